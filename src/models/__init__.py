"""Models package exports."""

from src.models.auth import (
    LoginRequest,
    LoginResponse,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    TokenRequest,
    UpdateUserRequest,
    UserPublic,
)
from src.models.catalog import (
    Actor,
    ActorCreate,
    ActorPage,
    ActorUpdate,
    Genre,
    GenreCreate,
    GenreUpdate,
    Movie,
    MovieCreate,
    MovieUpdate,
)
from src.models.response import ErrorResponse, ValidationIssue
from src.models.user import AuthenticatedIdentity, RefreshTokenRecord, TokenClaims, User

__all__ = [
    "Actor",
    "ActorCreate",
    "ActorPage",
    "ActorUpdate",
    "AuthenticatedIdentity",
    "ErrorResponse",
    "Genre",
    "GenreCreate",
    "GenreUpdate",
    "LoginRequest",
    "LoginResponse",
    "Movie",
    "MovieCreate",
    "MovieUpdate",
    "RefreshResponse",
    "RefreshTokenRecord",
    "RegisterRequest",
    "RegisterResponse",
    "TokenClaims",
    "TokenRequest",
    "UpdateUserRequest",
    "User",
    "UserPublic",
    "ValidationIssue",
]
