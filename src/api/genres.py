"""Genre endpoints. Reads are public; writes require an admin."""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
import structlog

from src.api.dependencies import require_admin
from src.models.catalog import Genre, GenreCreate, GenreUpdate
from src.models.user import AuthenticatedIdentity
from src.services.catalog_service import GenreService, genre_not_found

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/genres", tags=["Genres"])


@router.get("")
async def list_genres() -> list[Genre]:
    return await GenreService().list_genres()


@router.get("/{genre_id}")
async def get_genre(genre_id: UUID) -> Genre:
    genre = await GenreService().get_genre(genre_id)
    if genre is None:
        raise genre_not_found(genre_id)
    return genre


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_genre(
    request: GenreCreate,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> Genre:
    genre = await GenreService().create_genre(request)
    logger.info("admin_created_genre", admin_id=str(admin.id), genre_id=str(genre.id))
    return genre


@router.put("/{genre_id}")
async def update_genre(
    genre_id: UUID,
    request: GenreUpdate,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> Genre:
    genre = await GenreService().update_genre(genre_id, request)
    logger.info("admin_updated_genre", admin_id=str(admin.id), genre_id=str(genre_id))
    return genre


@router.delete("/{genre_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_genre(
    genre_id: UUID,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> Response:
    await GenreService().delete_genre(genre_id)
    logger.info("admin_deleted_genre", admin_id=str(admin.id), genre_id=str(genre_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
