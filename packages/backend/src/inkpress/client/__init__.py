"""Client side: persisted session + async API client.

Learn: The session store is the only thing that decides whether the
client is logged in. The API client reads the token from it for each
protected call.
"""

from inkpress.client.api import ApiError, BlogClient
from inkpress.client.session import NotLoggedIn, Session, SessionStore

__all__ = ["ApiError", "BlogClient", "NotLoggedIn", "Session", "SessionStore"]
