"""Movie endpoints. Reads are public; writes require an admin."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
import structlog

from src.api.dependencies import require_admin
from src.models.catalog import (
    Actor,
    Movie,
    MovieActorAdded,
    MovieActorLink,
    MovieCreate,
    MovieUpdate,
)
from src.models.user import AuthenticatedIdentity
from src.services.movie_service import MovieService, movie_not_found

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/movies", tags=["Movies"])


@router.get("")
async def list_movies() -> list[Movie]:
    return await MovieService().list_movies()


@router.get("/{movie_id}")
async def get_movie(movie_id: UUID) -> Movie:
    movie = await MovieService().get_movie(movie_id)
    if movie is None:
        raise movie_not_found(movie_id)
    return movie


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_movie(
    request: MovieCreate,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> Movie:
    movie = await MovieService().create_movie(request)
    logger.info("admin_created_movie", admin_id=str(admin.id), movie_id=str(movie.id))
    return movie


@router.put("/{movie_id}")
@router.patch("/{movie_id}")
async def update_movie(
    movie_id: UUID,
    request: MovieUpdate,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> Movie:
    """Partial update; PUT and PATCH behave the same."""
    movie = await MovieService().update_movie(movie_id, request)
    logger.info("admin_updated_movie", admin_id=str(admin.id), movie_id=str(movie_id))
    return movie


@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_movie(
    movie_id: UUID,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> Response:
    await MovieService().delete_movie(movie_id)
    logger.info("admin_deleted_movie", admin_id=str(admin.id), movie_id=str(movie_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{movie_id}/actors")
async def list_movie_actors(movie_id: UUID) -> list[Actor]:
    return await MovieService().list_movie_actors(movie_id)


@router.post("/{movie_id}/actors", status_code=status.HTTP_201_CREATED)
async def add_movie_actor(
    movie_id: UUID,
    request: MovieActorLink,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> MovieActorAdded:
    link = await MovieService().add_movie_actor(movie_id, request.actor_id)
    logger.info(
        "admin_added_movie_actor",
        admin_id=str(admin.id),
        movie_id=str(movie_id),
        actor_id=str(request.actor_id),
    )
    return link
