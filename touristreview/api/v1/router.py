"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from touristreview.api.v1.dependencies.
"""

from fastapi import APIRouter

from touristreview.api.v1.endpoints import friends, health, places, storage, users

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(places.router, prefix="/places", tags=["places"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(friends.router, prefix="/friends", tags=["friends"])
api_router.include_router(storage.router, prefix="/storage", tags=["storage"])
