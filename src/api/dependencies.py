"""FastAPI dependencies for authentication and authorization."""

from typing import Optional
from uuid import UUID

import structlog
from fastapi import Depends, Header

from src.errors import (
    AuthenticationError,
    ServiceError,
    account_disabled,
    admin_access_required,
    invalid_or_expired_token,
    invalid_token_format,
    missing_auth_token,
    user_not_found,
)
from src.models.user import AuthenticatedIdentity
from src.services.token_service import TokenError, TokenService, get_token_service
from src.services.user_service import UserService

logger = structlog.get_logger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header.

    Raises:
        AuthenticationError: MISSING_AUTH_TOKEN if the header is absent,
            INVALID_TOKEN_FORMAT if there is no token segment
    """
    if not authorization:
        raise missing_auth_token()

    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise invalid_token_format()
    return parts[1].strip()


async def resolve_identity(
    authorization: Optional[str],
    token_service: TokenService,
    user_service: UserService,
) -> AuthenticatedIdentity:
    """Verify the bearer access token and build the caller's identity.

    The admin and active flags are read from storage on every call, so a
    disabled account loses access before its token expires. The token's
    role claim is carried through but never used for the admin decision.

    Args:
        authorization: Raw Authorization header value
        token_service: Token codec for access-token verification
        user_service: User store for the live flag lookup

    Returns:
        AuthenticatedIdentity of the caller

    Raises:
        AuthenticationError: MISSING_AUTH_TOKEN, INVALID_TOKEN_FORMAT,
            INVALID_OR_EXPIRED_TOKEN, or AUTHENTICATION_ERROR (500) for any
            unexpected failure
        NotFoundError: USER_NOT_FOUND if the token's user no longer exists
        AuthenticationError: ACCOUNT_DISABLED (403) if the account was deactivated
    """
    try:
        token = extract_bearer_token(authorization)

        try:
            claims = token_service.verify_access(token)
            user_id = UUID(claims.id)
        except (TokenError, ValueError) as e:
            logger.info("access_token_rejected", reason=str(e))
            raise invalid_or_expired_token()

        flags = await user_service.get_account_flags(user_id)
        if flags is None:
            raise user_not_found("The user associated with this token does not exist")
        is_admin, is_active = flags
        if not is_active:
            logger.info("access_token_rejected", reason="account_disabled", user_id=str(user_id))
            raise account_disabled()

        return AuthenticatedIdentity(id=user_id, role=claims.role, is_admin=is_admin)
    except ServiceError:
        raise
    except Exception as e:
        logger.error("authentication_failed", error=str(e))
        raise AuthenticationError(
            "Authentication error",
            code="AUTHENTICATION_ERROR",
            status_code=500,
            details=str(e),
        ) from e


async def authenticate(
    authorization: Optional[str] = Header(default=None),
) -> AuthenticatedIdentity:
    """Require a valid access token and return the caller's identity."""
    return await resolve_identity(authorization, get_token_service(), UserService())


def ensure_admin(identity: Optional[AuthenticatedIdentity]) -> AuthenticatedIdentity:
    """Reject identities without admin privileges.

    Raises:
        AuthorizationError: ADMIN_ACCESS_REQUIRED
    """
    if identity is None or not identity.is_admin:
        raise admin_access_required()
    return identity


async def require_admin(
    identity: AuthenticatedIdentity = Depends(authenticate),
) -> AuthenticatedIdentity:
    """Require the authenticated caller to be an admin."""
    return ensure_admin(identity)
