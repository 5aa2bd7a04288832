# rutacafe/api/router.py
from fastapi import APIRouter

from rutacafe.api.routes import (
    advertising, auth, comments, dashboard, favorites, likes, places, routes, users,
)

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(routes.router, prefix="/routes", tags=["routes"])
api_router.include_router(places.router, prefix="/places", tags=["places"])
api_router.include_router(comments.router, prefix="/comments", tags=["comments"])
api_router.include_router(likes.router, prefix="/likes", tags=["likes"])
api_router.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
api_router.include_router(advertising.router, prefix="/advertising", tags=["advertising"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
