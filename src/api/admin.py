"""Admin API endpoints for user management."""

from uuid import UUID

from fastapi import APIRouter, Depends
import structlog

from src.api.dependencies import require_admin
from src.errors import user_not_found
from src.models.auth import UpdateUserRequest, UserPublic
from src.models.user import AuthenticatedIdentity
from src.services.auth_service import user_public
from src.services.refresh_token_store import RefreshTokenStore
from src.services.user_service import UserService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/users")
async def list_users(
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> list[UserPublic]:
    """List all users (admin only).

    Returns:
        Users ordered by creation date
    """
    user_service = UserService()
    users = await user_service.list_users()
    return [user_public(u) for u in users]


@router.patch("/users/{user_id}")
async def update_user(
    user_id: UUID,
    request: UpdateUserRequest,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> UserPublic:
    """Update user details (admin only).

    Deactivating a user also revokes all of their refresh tokens.

    Raises:
        404: USER_NOT_FOUND
        409: EMAIL_TAKEN
    """
    user_service = UserService()

    updated = await user_service.update_user(
        user_id=user_id,
        name=request.name,
        surname=request.surname,
        email=request.email,
        is_active=request.is_active,
    )

    if updated is None:
        raise user_not_found()

    if request.is_active is False:
        await RefreshTokenStore().revoke_all_for_user(user_id)

    logger.info(
        "admin_updated_user",
        admin_id=str(admin.id),
        target_user_id=str(user_id),
    )

    return user_public(updated)
