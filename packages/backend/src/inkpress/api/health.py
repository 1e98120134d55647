"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and the database is reachable.
"""

from fastapi import APIRouter, Depends

from inkpress import __version__
from inkpress.db.engine import Database, get_database

router = APIRouter()


@router.get("/health")
async def health_check(database: Database = Depends(get_database)):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await database.ping()
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    status = "healthy" if checks["database"] == "ok" else "degraded"
    return {"status": status, **checks}
