"""Error taxonomy — every failure the API can report.

Learn: Each error carries a category and an HTTP status. The global
handlers in api/error_handlers.py turn any InkpressError into the same
JSON envelope:

    {"error": {"category": "not_authorized", "message": "..."}}

Handlers and services raise these; routes never build error responses
by hand.
"""


class InkpressError(Exception):
    """Base class for errors that map to a structured API response."""

    category = "internal"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"error": {"category": self.category, "message": self.message}}


class BadRequest(InkpressError):
    """Missing or invalid input fields."""

    category = "bad_request"
    http_status = 400


class Unauthenticated(InkpressError):
    """Missing, malformed, or expired credentials."""

    category = "unauthenticated"
    http_status = 401


class NotAuthorized(InkpressError):
    """Authenticated, but not allowed to touch the resource.

    Also returned when a post to update or delete does not exist, so
    non-owners cannot probe which post ids are real.
    """

    category = "not_authorized"
    http_status = 403


class NotFound(InkpressError):
    category = "not_found"
    http_status = 404


class Conflict(InkpressError):
    category = "conflict"
    http_status = 409


class Internal(InkpressError):
    category = "internal"
    http_status = 500


class MethodNotAllowed(InkpressError):
    category = "method_not_allowed"
    http_status = 405
