"""Client-side session store.

Learn: The client is either anonymous or holds exactly one
{user, token} pair. The pair is written to a small JSON file (0600) so
it survives restarts — the CLI's equivalent of browser localStorage.

Transitions:
    anonymous --login()--> authenticated --logout()--> anonymous

login() always replaces whatever was there. logout() wipes memory and
disk, then fires on_logout so the caller can send the user back to the
login step.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import structlog

logger = structlog.get_logger()

SESSION_FILE_ENV = "INKPRESS_SESSION_FILE"


class NotLoggedIn(Exception):
    """A protected operation was attempted without a session."""


@dataclass(frozen=True)
class Session:
    user: dict
    token: str


def default_session_path() -> Path:
    override = os.environ.get(SESSION_FILE_ENV)
    if override:
        return Path(override)
    return Path.home() / ".config" / "inkpress" / "session.json"


class SessionStore:
    """Holds at most one Session, persisted to `path`."""

    def __init__(
        self,
        path: Optional[Path] = None,
        on_logout: Optional[Callable[[], None]] = None,
    ):
        self.path = Path(path) if path else default_session_path()
        self.on_logout = on_logout
        self._current: Optional[Session] = None
        self._loaded = False

    @property
    def current(self) -> Optional[Session]:
        if not self._loaded:
            self._current = self._read()
            self._loaded = True
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self.current is not None

    @property
    def user(self) -> Optional[dict]:
        return self.current.user if self.current else None

    @property
    def token(self) -> Optional[str]:
        return self.current.token if self.current else None

    def require_token(self) -> str:
        """Return the token, or raise NotLoggedIn before any network call."""
        session = self.current
        if session is None:
            raise NotLoggedIn("Please log in first")
        return session.token

    def login(self, user: dict, token: str) -> Session:
        session = Session(user=dict(user), token=token)
        self._write(session)
        self._current = session
        self._loaded = True
        return session

    def logout(self) -> None:
        self._current = None
        self._loaded = True
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        if self.on_logout:
            self.on_logout()

    # ─── Persistence ────────────────────────────────────

    def _read(self) -> Optional[Session]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("session.unreadable", path=str(self.path), error=str(e))
            return None

        if not isinstance(data, dict):
            data = {}
        user, token = data.get("user"), data.get("token")
        if not isinstance(user, dict) or not isinstance(token, str) or not token:
            logger.warning("session.invalid", path=str(self.path))
            return None
        return Session(user=user, token=token)

    def _write(self, session: Session) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        # A leftover tmp file keeps its old mode under O_CREAT, so start fresh.
        tmp.unlink(missing_ok=True)
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"user": session.user, "token": session.token}, f)
        os.replace(tmp, self.path)
