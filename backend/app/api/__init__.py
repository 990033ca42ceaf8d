"""
API Router.

Combines all API endpoints under the /api prefix.
"""

from fastapi import APIRouter

from app.api.endpoints import auth, forum, system

router = APIRouter()

# Include endpoint routers
router.include_router(system.router, tags=["System"])
router.include_router(auth.router, tags=["Auth"])
router.include_router(forum.router, tags=["Forum"])
