"""Server entry point.

Learn: Settings are validated BEFORE inkpress.main is imported, so a
missing INKPRESS_JWT_SECRET stops the process with one readable line
instead of an import-time traceback.
"""

import sys

from pydantic import ValidationError

from inkpress.config import get_settings


def run() -> None:
    import uvicorn

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"FATAL: invalid configuration\n{e}", file=sys.stderr)
        sys.exit(1)

    uvicorn.run(
        "inkpress.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
