"""Session service: registration, login, token refresh and logout."""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.config import get_settings
from src.errors import (
    PersistenceError,
    account_disabled,
    email_taken,
    invalid_credentials,
    invalid_refresh_token,
    refresh_token_expired,
    token_persistence_error,
    token_required,
    user_creation_error,
    user_not_found,
    username_taken,
)
from src.models.auth import (
    LoginResponse,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    UserPublic,
)
from src.models.user import TokenClaims, User
from src.services.password_service import PasswordHasher
from src.services.refresh_token_store import RefreshTokenStore
from src.services.token_service import (
    TokenExpiredError,
    TokenInvalidError,
    TokenService,
    get_token_service,
)
from src.services.user_service import BootstrapAdminTaken, UserService

logger = structlog.get_logger(__name__)


def user_public(user: User) -> UserPublic:
    """Convert a User model to its public representation."""
    return UserPublic(
        id=user.id,
        username=user.username,
        email=user.email,
        name=user.name,
        surname=user.surname,
        is_admin=user.is_admin,
        is_active=user.is_active,
        last_login=user.last_login,
    )


class AuthService:
    """Orchestrates the session lifecycle over the hasher, codec and stores."""

    def __init__(
        self,
        token_service: Optional[TokenService] = None,
        password_hasher: Optional[PasswordHasher] = None,
        user_service: Optional[UserService] = None,
        token_store: Optional[RefreshTokenStore] = None,
    ):
        self.token_service = token_service or get_token_service()
        self.password_hasher = password_hasher or PasswordHasher(get_settings().bcrypt_rounds)
        self.user_service = user_service or UserService()
        self.token_store = token_store or RefreshTokenStore()

    async def _issue_tokens(self, user: User) -> tuple[str, str]:
        """Sign an access/refresh pair and persist the refresh token."""
        claims = TokenClaims(id=str(user.id), role=user.role)
        access_token = self.token_service.sign_access(claims)
        refresh_token = self.token_service.sign_refresh(claims)

        try:
            await self.token_store.save(
                user.id, refresh_token, self.token_service.refresh_ttl_seconds
            )
        except PersistenceError:
            raise
        except Exception as e:
            raise token_persistence_error(str(e)) from e

        return access_token, refresh_token

    async def _resolve_admin_flag(self, requested: bool) -> bool:
        """Grant admin only when requested and no admin exists yet."""
        if not requested:
            return False
        return await self.user_service.count_admins() == 0

    async def register(self, request: RegisterRequest) -> RegisterResponse:
        """Register a new account and open its first session.

        Args:
            request: Validated registration payload

        Returns:
            RegisterResponse with the public user fields and both tokens

        Raises:
            ConflictError: EMAIL_TAKEN or USERNAME_TAKEN
            PersistenceError: USER_CREATION_ERROR if the user row was never
                written, TOKEN_PERSISTENCE_ERROR if the user exists but the
                session could not be stored
        """
        if await self.user_service.get_by_email(request.email) is not None:
            raise email_taken(request.email)
        if await self.user_service.get_by_username(request.username) is not None:
            raise username_taken(request.username)

        try:
            is_admin = await self._resolve_admin_flag(request.is_admin)
            password_hash = await self.password_hasher.hash_async(request.password)
        except Exception as e:
            logger.error("user_registration_failed", username=request.username, error=str(e))
            raise user_creation_error(str(e)) from e

        user_id = uuid4()
        fields = dict(
            user_id=user_id,
            username=request.username,
            email=request.email,
            password_hash=password_hash,
            name=request.name,
            surname=request.surname,
        )

        try:
            user = await self.user_service.create_user(**fields, is_admin=is_admin)
        except BootstrapAdminTaken:
            # Lost the race for the first admin; the constraint decides
            user = await self.user_service.create_user(**fields, is_admin=False)

        if request.is_admin and not user.is_admin:
            logger.info("admin_request_demoted", user_id=str(user.id))

        access_token, refresh_token = await self._issue_tokens(user)

        logger.info(
            "user_registered",
            user_id=str(user.id),
            username=user.username,
            is_admin=user.is_admin,
        )

        return RegisterResponse(
            user=user_public(user),
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def login(self, username_or_email: str, password: str) -> LoginResponse:
        """Authenticate by email or username and open a session.

        Raises:
            AuthenticationError: INVALID_CREDENTIALS (401) for an unknown
                identity or wrong password, ACCOUNT_DISABLED (403)
            PersistenceError: TOKEN_PERSISTENCE_ERROR
        """
        result = await self.user_service.get_by_email(username_or_email)
        if result is None:
            result = await self.user_service.get_by_username(username_or_email)
        if result is None:
            logger.info("login_failed", reason="unknown_identity")
            raise invalid_credentials()

        user, password_hash = result

        if not await self.password_hasher.verify_async(password, password_hash):
            logger.info("login_failed", reason="bad_password", user_id=str(user.id))
            raise invalid_credentials()

        if not user.is_active:
            logger.info("login_rejected_disabled", user_id=str(user.id))
            raise account_disabled()

        try:
            await self.user_service.update_last_login(user.id)
        except Exception as e:
            logger.error("last_login_update_failed", user_id=str(user.id), error=str(e))

        access_token, refresh_token = await self._issue_tokens(user)

        logger.info("user_logged_in", user_id=str(user.id), username=user.username)

        return LoginResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.token_service.access_ttl_seconds,
            user=user_public(user),
        )

    async def refresh(self, token: Optional[str]) -> RefreshResponse:
        """Exchange a stored refresh token for a new access token.

        The refresh token itself is not rotated.

        Raises:
            ValidationError: TOKEN_REQUIRED
            AuthenticationError: INVALID_REFRESH_TOKEN or REFRESH_TOKEN_EXPIRED
            NotFoundError: USER_NOT_FOUND
        """
        if not token:
            raise token_required()

        record = await self.token_store.find(token)
        if record is None or record.is_revoked:
            logger.warning("refresh_token_not_found", revoked=record is not None)
            raise invalid_refresh_token("Token not found")

        try:
            claims = self.token_service.verify_refresh(token)
        except TokenExpiredError:
            await self.token_store.delete(token)
            logger.info("refresh_token_expired", user_id=str(record.user_id))
            raise refresh_token_expired()
        except TokenInvalidError as e:
            await self.token_store.delete(token)
            logger.warning("refresh_token_invalid", user_id=str(record.user_id), error=str(e))
            raise invalid_refresh_token("Token signature is not valid")

        try:
            user_id = UUID(claims.id)
        except ValueError:
            user = None
        else:
            user = await self.user_service.get_by_id(user_id)
        if user is None:
            raise user_not_found("The user associated with the token does not exist")

        access_token = self.token_service.sign_access(
            TokenClaims(id=str(user.id), role=user.role)
        )
        logger.info("access_token_refreshed", user_id=str(user.id))

        return RefreshResponse(
            access_token=access_token,
            expires_in=self.token_service.access_ttl_seconds,
        )

    async def logout(self, token: Optional[str]) -> None:
        """Revoke a refresh token by deleting it. Idempotent.

        Raises:
            ValidationError: TOKEN_REQUIRED
        """
        if not token:
            raise token_required()

        await self.token_store.delete(token)
        logger.info("user_logged_out")
