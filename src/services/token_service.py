"""JWT access and refresh token signing and verification."""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from uuid import uuid4

import jwt
import structlog

from src.config import TokenConfig, get_token_config
from src.models.user import TokenClaims

logger = structlog.get_logger(__name__)


class TokenError(ValueError):
    """A token failed verification."""


class TokenExpiredError(TokenError):
    """The token's signature is valid but its lifetime has elapsed."""


class TokenInvalidError(TokenError):
    """The token is malformed, tampered with, or signed with another key."""


class InvalidClaimsError(ValueError):
    """Claims passed for signing are missing ``id`` or ``role``."""


class TokenService:
    """Signs and verifies access and refresh tokens.

    Access and refresh tokens use separate secrets, so a compromised access
    secret cannot forge refresh tokens and vice versa.
    """

    def __init__(self, config: TokenConfig):
        self.config = config

    @property
    def access_ttl_seconds(self) -> int:
        return self.config.access_ttl_seconds

    @property
    def refresh_ttl_seconds(self) -> int:
        return self.config.refresh_ttl_seconds

    def _sign(self, claims: TokenClaims | dict, secret: str, ttl_seconds: int, kind: str) -> str:
        if isinstance(claims, TokenClaims):
            claims = claims.model_dump()
        user_id = claims.get("id")
        role = claims.get("role")
        if not user_id or not role:
            raise InvalidClaimsError(f"id and role are required to sign a {kind} token")

        # jti keeps tokens signed in the same second distinct
        now = datetime.now(timezone.utc)
        payload = {
            "id": str(user_id),
            "role": role,
            "jti": uuid4().hex,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds),
        }
        token = jwt.encode(payload, secret, algorithm=self.config.algorithm)
        logger.debug(
            "token_signed",
            kind=kind,
            user_id=str(user_id),
            expires_seconds=ttl_seconds,
        )
        return token

    def _verify(self, token: str, secret: str) -> TokenClaims:
        if not token:
            raise TokenInvalidError("Token not provided")
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}")

        if not payload.get("id") or not payload.get("role"):
            raise TokenInvalidError("Invalid token: missing identity claims")
        return TokenClaims(id=str(payload["id"]), role=str(payload["role"]))

    def sign_access(self, claims: TokenClaims | dict) -> str:
        """Sign a short-lived access token for ``{id, role}``."""
        return self._sign(
            claims, self.config.access_secret, self.config.access_ttl_seconds, "access"
        )

    def sign_refresh(self, claims: TokenClaims | dict) -> str:
        """Sign a long-lived refresh token for ``{id, role}``."""
        return self._sign(
            claims, self.config.refresh_secret, self.config.refresh_ttl_seconds, "refresh"
        )

    def verify_access(self, token: str) -> TokenClaims:
        """Decode and validate an access token.

        Raises:
            TokenExpiredError: If the token has expired
            TokenInvalidError: If the token is malformed or wrongly signed
        """
        return self._verify(token, self.config.access_secret)

    def verify_refresh(self, token: str) -> TokenClaims:
        """Decode and validate a refresh token.

        Raises:
            TokenExpiredError: If the token has expired
            TokenInvalidError: If the token is malformed or wrongly signed
        """
        return self._verify(token, self.config.refresh_secret)


@lru_cache
def get_token_service() -> TokenService:
    """Get the process-wide token service."""
    return TokenService(get_token_config())
