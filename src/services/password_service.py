"""Password hashing with bcrypt."""

import asyncio

import bcrypt
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_ROUNDS = 10


class PasswordHasher:
    """One-way salted password hashing and verification."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain-text password to hash

        Returns:
            Bcrypt hash string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a bcrypt hash.

        A malformed or empty hash is treated as a mismatch.

        Args:
            password: Plain-text password to check
            password_hash: Bcrypt hash to verify against

        Returns:
            True if the password matches, False otherwise
        """
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except ValueError as e:
            logger.warning("password_hash_unreadable", error=str(e))
            return False

    async def hash_async(self, password: str) -> str:
        """Hash in the default executor so the event loop keeps serving requests."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, lambda: self.hash(password))

    async def verify_async(self, password: str, password_hash: str) -> bool:
        """Verify in the default executor so the event loop keeps serving requests."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            None, lambda: self.verify(password, password_hash)
        )
