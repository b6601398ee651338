"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Response, status
import structlog

from src.api.dependencies import authenticate
from src.errors import user_not_found
from src.models.auth import (
    LoginRequest,
    LoginResponse,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    TokenRequest,
    UserPublic,
)
from src.models.user import AuthenticatedIdentity
from src.services.auth_service import AuthService, user_public
from src.services.user_service import UserService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest) -> RegisterResponse:
    """Register a new account.

    Only the first account requesting admin status becomes an admin.

    Raises:
        409: EMAIL_TAKEN / USERNAME_TAKEN
        500: USER_CREATION_ERROR / TOKEN_PERSISTENCE_ERROR
    """
    auth_service = AuthService()
    return await auth_service.register(request)


@router.post("/login")
async def login(request: LoginRequest) -> LoginResponse:
    """Login with email or username and password.

    Raises:
        401: INVALID_CREDENTIALS
        403: ACCOUNT_DISABLED
    """
    auth_service = AuthService()
    return await auth_service.login(request.username_or_email, request.password)


@router.post("/refresh")
async def refresh(request: TokenRequest) -> RefreshResponse:
    """Exchange a refresh token for a new access token.

    Raises:
        400: TOKEN_REQUIRED
        403: INVALID_REFRESH_TOKEN / REFRESH_TOKEN_EXPIRED
        404: USER_NOT_FOUND
    """
    auth_service = AuthService()
    return await auth_service.refresh(request.token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(request: TokenRequest) -> Response:
    """Revoke a refresh token. Succeeds whether or not the token existed."""
    auth_service = AuthService()
    await auth_service.logout(request.token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me")
async def get_me(
    identity: AuthenticatedIdentity = Depends(authenticate),
) -> UserPublic:
    """Get the authenticated caller's profile."""
    user = await UserService().get_by_id(identity.id)
    if user is None:
        raise user_not_found()
    return user_public(user)
