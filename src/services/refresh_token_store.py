"""Persistence of issued refresh tokens."""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import structlog

from src.database import affected_rows, classify_storage_error, get_pool
from src.errors import token_persistence_error
from src.models.user import RefreshTokenRecord

logger = structlog.get_logger(__name__)


class RefreshTokenStore:
    """Stores refresh tokens so they can be revoked by deletion."""

    async def save(self, user_id: UUID, token: str, ttl_seconds: int) -> bool:
        """Persist a refresh token and prune expired rows.

        The stored expiry is ``now + ttl_seconds``, independent of the
        token's own ``exp`` claim.

        Args:
            user_id: Owning user
            token: Signed refresh token
            ttl_seconds: Lifetime of the stored record

        Returns:
            True on success

        Raises:
            PersistenceError: TOKEN_PERSISTENCE_ERROR if nothing was inserted
                or the storage call failed
        """
        if not user_id or not token:
            raise token_persistence_error("user_id and token are required")

        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(seconds=ttl_seconds)

        try:
            pool = await get_pool()
            async with pool.acquire() as conn:
                result = await conn.execute(
                    """
                    INSERT INTO refresh_tokens (user_id, token, expires_at, created_at)
                    VALUES ($1, $2, $3, $4)
                    """,
                    user_id,
                    token,
                    expires_at,
                    now,
                )
        except Exception as e:
            logger.error(
                "refresh_token_save_failed",
                user_id=str(user_id),
                category=classify_storage_error(e),
                error=str(e),
            )
            raise token_persistence_error(str(e)) from e

        if affected_rows(result) == 0:
            logger.error("refresh_token_not_inserted", user_id=str(user_id), result=result)
            raise token_persistence_error("The refresh token could not be inserted")

        logger.info(
            "refresh_token_saved",
            user_id=str(user_id),
            expires_at=expires_at.isoformat(),
        )

        try:
            await self.prune_expired()
        except Exception as e:
            logger.warning("expired_refresh_token_prune_failed", error=str(e))
        return True

    async def find(self, token: str) -> Optional[RefreshTokenRecord]:
        """Look up a stored refresh token.

        Args:
            token: Refresh token string

        Returns:
            RefreshTokenRecord or None if not stored
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT user_id, token, expires_at, created_at, is_revoked
                FROM refresh_tokens
                WHERE token = $1
                """,
                token,
            )

        if row is None:
            return None

        return RefreshTokenRecord(
            user_id=row["user_id"],
            token=row["token"],
            expires_at=row["expires_at"],
            created_at=row["created_at"],
            is_revoked=row["is_revoked"],
        )

    async def delete(self, token: str) -> None:
        """Delete a refresh token. Deleting an absent token is a no-op."""
        pool = await get_pool()

        async with pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM refresh_tokens WHERE token = $1",
                token,
            )

        logger.info("refresh_token_deleted", deleted=affected_rows(result))

    async def prune_expired(self) -> int:
        """Delete every refresh token whose expiry has passed.

        Returns:
            Number of rows removed
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM refresh_tokens WHERE expires_at < $1",
                datetime.now(timezone.utc),
            )

        count = affected_rows(result)
        if count:
            logger.info("expired_refresh_tokens_pruned", count=count)
        return count

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Flag all of a user's live refresh tokens as revoked.

        Args:
            user_id: User whose sessions should end

        Returns:
            Number of tokens revoked
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            result = await conn.execute(
                """
                UPDATE refresh_tokens
                SET is_revoked = TRUE
                WHERE user_id = $1 AND is_revoked = FALSE
                """,
                user_id,
            )

        count = affected_rows(result)
        logger.info("all_refresh_tokens_revoked", user_id=str(user_id), count=count)
        return count
