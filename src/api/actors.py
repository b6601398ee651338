"""Actor endpoints. Reads are public; writes require an admin."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
import structlog

from src.api.dependencies import require_admin
from src.models.catalog import Actor, ActorCreate, ActorPage, ActorUpdate
from src.models.user import AuthenticatedIdentity
from src.services.catalog_service import DEFAULT_PAGE_LIMIT, ActorService, actor_not_found

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/actors", tags=["Actors"])


@router.get("")
async def list_actors(
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_LIMIT),
) -> ActorPage:
    return await ActorService().list_actors(page=page, limit=limit)


@router.get("/{actor_id}")
async def get_actor(actor_id: UUID) -> Actor:
    actor = await ActorService().get_actor(actor_id)
    if actor is None:
        raise actor_not_found(actor_id)
    return actor


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_actor(
    request: ActorCreate,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> Actor:
    actor = await ActorService().create_actor(request)
    logger.info("admin_created_actor", admin_id=str(admin.id), actor_id=str(actor.id))
    return actor


@router.put("/{actor_id}")
async def update_actor(
    actor_id: UUID,
    request: ActorUpdate,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> Actor:
    actor = await ActorService().update_actor(actor_id, request)
    logger.info("admin_updated_actor", admin_id=str(admin.id), actor_id=str(actor_id))
    return actor


@router.delete("/{actor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_actor(
    actor_id: UUID,
    admin: AuthenticatedIdentity = Depends(require_admin),
) -> Response:
    await ActorService().delete_actor(actor_id)
    logger.info("admin_deleted_actor", admin_id=str(admin.id), actor_id=str(actor_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
