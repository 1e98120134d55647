"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: Unlike a router-wide auth dependency, auth here is per route —
posts are publicly readable, so only the write endpoints in posts.py
declare Depends(get_current_identity).
"""

from fastapi import APIRouter

from inkpress.api.auth import router as auth_router
from inkpress.api.health import router as health_router
from inkpress.api.posts import router as posts_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(posts_router, tags=["posts"])
