"""structlog setup.

Learn: Every module grabs `structlog.get_logger()` and logs dotted event
names with keyword fields. This function decides how those events are
rendered: a readable console line in development, one JSON object per
line when INKPRESS_LOG_JSON is set. merge_contextvars pulls in the
request_id / user_id bound by the middleware and the auth gate.
"""

import logging

import structlog


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """Configure structlog for the whole process."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=False,
    )
