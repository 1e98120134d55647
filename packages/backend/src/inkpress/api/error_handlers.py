"""Global exception handlers.

Learn: Four layers, most specific first:
- InkpressError → its own status + {"error": {"category", "message"}}
- RequestValidationError (pydantic) → 400 bad_request
- Starlette HTTPException (unknown route, wrong method) → same envelope,
  category picked from the status code
- anything else → 500 internal, logged with traceback, body says nothing
  about what broke

401s also carry WWW-Authenticate: Bearer.
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inkpress.errors import (
    BadRequest,
    Conflict,
    InkpressError,
    Internal,
    MethodNotAllowed,
    NotAuthorized,
    NotFound,
    Unauthenticated,
)

logger = structlog.get_logger()

# Framework-raised statuses that have a matching domain error.
_HTTP_ERRORS = {
    400: BadRequest,
    401: Unauthenticated,
    403: NotAuthorized,
    404: NotFound,
    405: MethodNotAllowed,
    409: Conflict,
}


def _error_response(exc: InkpressError, headers: Optional[dict] = None) -> JSONResponse:
    headers = dict(headers or {})
    if isinstance(exc, Unauthenticated):
        headers["WWW-Authenticate"] = "Bearer"
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(),
        headers=headers or None,
    )


def _from_http_exception(exc: StarletteHTTPException) -> InkpressError:
    error_cls = _HTTP_ERRORS.get(exc.status_code)
    if error_cls is not None:
        return error_cls(str(exc.detail))
    error = InkpressError(str(exc.detail))
    error.category = "http_error"
    error.http_status = exc.status_code
    return error


def _validation_message(exc: RequestValidationError) -> str:
    fields = sorted({
        str(err["loc"][-1])
        for err in exc.errors()
        if err.get("loc") and err["loc"][0] == "body" and len(err["loc"]) > 1
    })
    if fields:
        return f"Invalid or missing fields: {', '.join(fields)}"
    return "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(InkpressError)
    async def inkpress_error_handler(request: Request, exc: InkpressError):
        if exc.http_status >= 500:
            logger.error("api.error", category=exc.category, path=request.url.path)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("api.validation_failed", path=request.url.path)
        return _error_response(BadRequest(_validation_message(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.info("api.http_error", status=exc.status_code, path=request.url.path)
        return _error_response(_from_http_exception(exc), headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("api.unhandled_error", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=Internal("Internal server error").to_response(),
        )
