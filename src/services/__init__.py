"""Services package exports."""

from src.services.auth_service import AuthService
from src.services.logging_service import configure_logging, get_logger
from src.services.password_service import PasswordHasher
from src.services.refresh_token_store import RefreshTokenStore
from src.services.token_service import TokenService
from src.services.user_service import UserService

__all__ = [
    "AuthService",
    "PasswordHasher",
    "RefreshTokenStore",
    "TokenService",
    "UserService",
    "configure_logging",
    "get_logger",
]
