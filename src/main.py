"""FastAPI application initialization."""

from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api import (
    CorrelationIdMiddleware,
    actors_router,
    admin_router,
    auth_router,
    genres_router,
    movies_router,
    router,
)
from src.api.error_handling import register_exception_handlers
from src.config import get_settings, get_token_config
from src.services.logging_service import configure_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    logger = get_logger("main")

    # Fail fast on missing secrets outside development
    token_config = get_token_config()

    from src.database import close_database, init_database, run_migrations

    await init_database()
    await run_migrations()
    logger.info("database_initialized")

    logger.info(
        "application_started",
        app_env=settings.app_env,
        log_level=settings.log_level,
        ephemeral_keys=token_config.ephemeral,
    )

    yield

    # Shutdown
    await close_database()
    logger.info("application_shutdown")


app = FastAPI(
    title="Movie Catalog API",
    description="Actors, genres and user accounts with JWT authentication",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# CORS middleware for browser clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Correlation ID middleware for request tracking and observability
app.add_middleware(CorrelationIdMiddleware)

app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(genres_router)
app.include_router(actors_router)
app.include_router(movies_router)
app.include_router(router)
