"""API package exports."""

from src.api.actors import router as actors_router
from src.api.admin import router as admin_router
from src.api.auth import router as auth_router
from src.api.genres import router as genres_router
from src.api.middleware import CorrelationIdMiddleware
from src.api.movies import router as movies_router
from src.api.routes import router

__all__ = [
    "CorrelationIdMiddleware",
    "actors_router",
    "admin_router",
    "auth_router",
    "genres_router",
    "movies_router",
    "router",
]
