"""Root and health endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

from src import database
from src.config import get_token_config

router = APIRouter()


@router.get("/")
async def root() -> dict:
    return {"message": "Movie catalog API online"}


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Status, ISO8601 timestamp, database state and whether the token
        signing keys are ephemeral
    """
    db_healthy = await database.health_check()

    return {
        "status": "healthy" if db_healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "healthy" if db_healthy else "unhealthy",
        "ephemeral_signing_keys": get_token_config().ephemeral,
    }
