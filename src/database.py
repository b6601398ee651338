"""PostgreSQL pool, schema migrations and storage-error helpers."""

from pathlib import Path
from typing import Optional

import asyncpg
import structlog

from src.config import get_settings

logger = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"

# Storage error categories
DUPLICATE_KEY = "duplicate_key"
FOREIGN_KEY = "foreign_key"
GENERIC = "generic"

_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    """Get the shared connection pool.

    Raises:
        RuntimeError: If init_database() has not run
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_database() first.")
    return _pool


async def init_database() -> asyncpg.Pool:
    """Create the connection pool from POSTGRES_URL (idempotent)."""
    global _pool

    if _pool is not None:
        return _pool

    settings = get_settings()

    try:
        _pool = await asyncpg.create_pool(
            settings.postgres_url,
            min_size=settings.postgres_pool_min_size,
            max_size=settings.postgres_pool_max_size,
            command_timeout=30,
        )
    except Exception as e:
        logger.error("database_pool_creation_failed", error=str(e))
        raise

    logger.info(
        "database_pool_created",
        min_size=settings.postgres_pool_min_size,
        max_size=settings.postgres_pool_max_size,
    )
    return _pool


async def close_database() -> None:
    """Close the connection pool if it is open."""
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("database_pool_closed")


async def run_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> int:
    """Apply the users, refresh-token and catalog schema.

    Files run in name order, each in its own transaction. They use
    ``IF NOT EXISTS`` so startup can re-run them safely.

    Returns:
        Number of migration files applied
    """
    files = sorted(migrations_dir.glob("*.sql")) if migrations_dir.exists() else []
    if not files:
        logger.warning("no_migrations_found", path=str(migrations_dir))
        return 0

    pool = await get_pool()

    async with pool.acquire() as conn:
        for migration_file in files:
            try:
                async with conn.transaction():
                    await conn.execute(migration_file.read_text())
            except Exception as e:
                logger.error("migration_failed", file=migration_file.name, error=str(e))
                raise
            logger.info("migration_applied", file=migration_file.name)

    return len(files)


async def health_check() -> bool:
    """Return True when a trivial query succeeds."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            return await conn.fetchval("SELECT 1") == 1
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return False


def affected_rows(status: Optional[str]) -> int:
    """Extract the row count from an asyncpg command tag.

    ``"INSERT 0 1"`` -> 1, ``"DELETE 3"`` -> 3, ``"UPDATE 0"`` -> 0.
    """
    if not status:
        return 0
    try:
        return int(status.rsplit(" ", 1)[-1])
    except ValueError:
        return 0


def classify_storage_error(exc: BaseException) -> str:
    """Categorize a storage exception for mapping to service errors."""
    if isinstance(exc, asyncpg.exceptions.UniqueViolationError):
        return DUPLICATE_KEY
    if isinstance(exc, asyncpg.exceptions.ForeignKeyViolationError):
        return FOREIGN_KEY
    return GENERIC
