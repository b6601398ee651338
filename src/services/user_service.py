"""User storage service."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import asyncpg
import structlog

from src.database import DUPLICATE_KEY, classify_storage_error, get_pool
from src.errors import email_taken, user_creation_error, username_taken
from src.models.user import User

logger = structlog.get_logger(__name__)

BOOTSTRAP_ADMIN_CONSTRAINT = "users_bootstrap_admin_key"

_USER_COLUMNS = """
    id, username, email, name, surname, is_admin, is_active,
    last_login, created_at, updated_at
"""


class BootstrapAdminTaken(Exception):
    """Another account already holds the bootstrap admin flag."""


def _row_to_user(row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        name=row["name"],
        surname=row["surname"],
        is_admin=row["is_admin"],
        is_active=row["is_active"],
        last_login=row["last_login"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class UserService:
    """Service for user rows."""

    async def create_user(
        self,
        user_id: UUID,
        username: str,
        email: str,
        password_hash: str,
        name: Optional[str] = None,
        surname: Optional[str] = None,
        is_admin: bool = False,
    ) -> User:
        """Insert a new user row.

        Args:
            user_id: Pre-generated user UUID
            username: Unique username
            email: Unique email
            password_hash: Bcrypt hash of the password
            name: Optional first name
            surname: Optional surname
            is_admin: Whether the user is the bootstrap admin

        Returns:
            Created User model

        Raises:
            ConflictError: EMAIL_TAKEN / USERNAME_TAKEN on a unique violation
            BootstrapAdminTaken: If is_admin collides with an existing admin
            PersistenceError: USER_CREATION_ERROR for any other storage failure
        """
        now = datetime.now(timezone.utc)

        try:
            pool = await get_pool()
            async with pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO users (
                        id, username, email, password_hash, name, surname,
                        is_admin, is_active, created_at, updated_at
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, TRUE, $8, $9)
                    """,
                    user_id,
                    username,
                    email,
                    password_hash,
                    name,
                    surname,
                    is_admin,
                    now,
                    now,
                )
        except asyncpg.PostgresError as e:
            if classify_storage_error(e) == DUPLICATE_KEY:
                constraint = getattr(e, "constraint_name", None) or ""
                logger.warning(
                    "user_insert_conflict",
                    username=username,
                    constraint=constraint,
                )
                if constraint == BOOTSTRAP_ADMIN_CONSTRAINT:
                    raise BootstrapAdminTaken() from e
                if "email" in constraint:
                    raise email_taken(email) from e
                raise username_taken(username) from e
            logger.error("user_insert_failed", username=username, error=str(e))
            raise user_creation_error(str(e)) from e
        except Exception as e:
            logger.error("user_insert_failed", username=username, error=str(e))
            raise user_creation_error(str(e)) from e

        logger.info(
            "user_created",
            user_id=str(user_id),
            username=username,
            is_admin=is_admin,
        )

        return User(
            id=user_id,
            username=username,
            email=email,
            name=name,
            surname=surname,
            is_admin=is_admin,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    async def _get_with_hash(self, column: str, value: str) -> Optional[tuple[User, str]]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {_USER_COLUMNS}, password_hash
                FROM users
                WHERE {column} = $1
                """,
                value,
            )

        if row is None:
            return None
        return _row_to_user(row), row["password_hash"]

    async def get_by_email(self, email: str) -> Optional[tuple[User, str]]:
        """Get a user and password hash by email.

        Returns:
            Tuple of (User, password_hash) or None if not found
        """
        return await self._get_with_hash("email", email)

    async def get_by_username(self, username: str) -> Optional[tuple[User, str]]:
        """Get a user and password hash by username.

        Returns:
            Tuple of (User, password_hash) or None if not found
        """
        return await self._get_with_hash("username", username)

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by UUID.

        Args:
            user_id: User UUID

        Returns:
            User model or None if not found
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1",
                user_id,
            )

        if row is None:
            return None
        return _row_to_user(row)

    async def get_account_flags(self, user_id: UUID) -> Optional[tuple[bool, bool]]:
        """Current ``(is_admin, is_active)`` of a user, or None if the user does not exist."""
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT id, is_admin, is_active FROM users WHERE id = $1",
                user_id,
            )

        if row is None:
            return None
        return bool(row["is_admin"]), bool(row["is_active"])

    async def count_admins(self) -> int:
        """Count number of admin users.

        Returns:
            Admin user count
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            count = await conn.fetchval(
                "SELECT COUNT(*) FROM users WHERE is_admin = TRUE"
            )

        return count

    async def update_last_login(self, user_id: UUID) -> None:
        """Stamp the user's last-login time with the current time."""
        pool = await get_pool()

        async with pool.acquire() as conn:
            await conn.execute(
                "UPDATE users SET last_login = $1 WHERE id = $2",
                datetime.now(timezone.utc),
                user_id,
            )

    async def list_users(self) -> list[User]:
        """Return all users ordered by creation date."""
        pool = await get_pool()

        async with pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT {_USER_COLUMNS} FROM users ORDER BY created_at ASC"
            )

        return [_row_to_user(row) for row in rows]

    async def update_user(
        self,
        user_id: UUID,
        name: Optional[str] = None,
        surname: Optional[str] = None,
        email: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Optional[User]:
        """Update user fields that are not None.

        Args:
            user_id: UUID of the user to update
            name: New first name (if provided)
            surname: New surname (if provided)
            email: New email (if provided)
            is_active: New active status (if provided)

        Returns:
            Updated User model, or None if user not found

        Raises:
            ConflictError: EMAIL_TAKEN if the new email is in use
        """
        # Build SET clause dynamically for non-None fields
        set_clauses = []
        params = []
        fields = {"name": name, "surname": surname, "email": email, "is_active": is_active}

        for column, value in fields.items():
            if value is not None:
                params.append(value)
                set_clauses.append(f"{column} = ${len(params)}")

        if not set_clauses:
            return await self.get_by_id(user_id)

        params.append(datetime.now(timezone.utc))
        set_clauses.append(f"updated_at = ${len(params)}")

        params.append(user_id)
        query = f"""
            UPDATE users
            SET {', '.join(set_clauses)}
            WHERE id = ${len(params)}
            RETURNING {_USER_COLUMNS}
        """

        pool = await get_pool()

        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(query, *params)
        except asyncpg.UniqueViolationError as e:
            raise email_taken(email or "") from e

        if row is None:
            return None

        logger.info(
            "user_updated",
            user_id=str(user_id),
            fields_updated=[c.split(" = ")[0] for c in set_clauses if "updated_at" not in c],
        )

        return _row_to_user(row)
