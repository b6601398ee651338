"""Genre and actor storage."""

import math
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
import structlog

from src.database import affected_rows, get_pool
from src.errors import ConflictError, NotFoundError, ValidationError
from src.models.catalog import (
    Actor,
    ActorCreate,
    ActorPage,
    ActorUpdate,
    Genre,
    GenreCreate,
    GenreUpdate,
    Pagination,
)

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100


def genre_not_found(genre_id: UUID) -> NotFoundError:
    return NotFoundError(
        "Genre not found",
        code="GENRE_NOT_FOUND",
        details=f"No genre with ID: {genre_id}",
    )


def actor_not_found(actor_id: UUID) -> NotFoundError:
    return NotFoundError(
        "Actor not found",
        code="ACTOR_NOT_FOUND",
        details=f"No actor with ID: {actor_id}",
    )


def genre_exists(name: str) -> ConflictError:
    return ConflictError(
        "Genre already exists",
        code="GENRE_ALREADY_EXISTS",
        details=f"A genre named '{name}' already exists",
    )


def invalid_pagination() -> ValidationError:
    return ValidationError(
        "Invalid parameters",
        code="INVALID_PAGINATION_PARAMS",
        details=f"page must be at least 1 and limit between 1 and {MAX_PAGE_LIMIT}",
    )


def missing_update_fields() -> ValidationError:
    return ValidationError(
        "Incomplete data",
        code="MISSING_UPDATE_FIELDS",
        details="At least one field must be provided",
    )


class GenreService:
    """CRUD over the genres table."""

    async def list_genres(self) -> list[Genre]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT id, name, description FROM genres ORDER BY name"
            )

        return [Genre(**dict(row)) for row in rows]

    async def get_genre(self, genre_id: UUID) -> Optional[Genre]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT id, name, description FROM genres WHERE id = $1",
                genre_id,
            )

        return Genre(**dict(row)) if row is not None else None

    async def _name_in_use(self, name: str) -> bool:
        pool = await get_pool()

        async with pool.acquire() as conn:
            found = await conn.fetchval("SELECT 1 FROM genres WHERE name = $1 LIMIT 1", name)

        return found is not None

    async def create_genre(self, data: GenreCreate) -> Genre:
        """Create a genre.

        Raises:
            ConflictError: GENRE_ALREADY_EXISTS
        """
        if await self._name_in_use(data.name):
            raise genre_exists(data.name)

        genre_id = uuid4()
        pool = await get_pool()

        try:
            async with pool.acquire() as conn:
                await conn.execute(
                    "INSERT INTO genres (id, name, description) VALUES ($1, $2, $3)",
                    genre_id,
                    data.name,
                    data.description,
                )
        except asyncpg.UniqueViolationError as e:
            raise genre_exists(data.name) from e

        logger.info("genre_created", genre_id=str(genre_id), name=data.name)
        return Genre(id=genre_id, name=data.name, description=data.description)

    async def update_genre(self, genre_id: UUID, data: GenreUpdate) -> Genre:
        """Update a genre's name and/or description.

        Raises:
            NotFoundError: GENRE_NOT_FOUND
            ValidationError: MISSING_UPDATE_FIELDS
            ConflictError: GENRE_ALREADY_EXISTS when renaming onto another genre
        """
        genre = await self.get_genre(genre_id)
        if genre is None:
            raise genre_not_found(genre_id)

        if not data.name and not data.description:
            raise missing_update_fields()

        if data.name and data.name != genre.name and await self._name_in_use(data.name):
            raise genre_exists(data.name)

        name = data.name or genre.name
        description = data.description or genre.description

        pool = await get_pool()

        try:
            async with pool.acquire() as conn:
                await conn.execute(
                    "UPDATE genres SET name = $1, description = $2 WHERE id = $3",
                    name,
                    description,
                    genre_id,
                )
        except asyncpg.UniqueViolationError as e:
            raise genre_exists(name) from e

        logger.info("genre_updated", genre_id=str(genre_id))
        return Genre(id=genre_id, name=name, description=description)

    async def delete_genre(self, genre_id: UUID) -> None:
        """Delete a genre.

        Raises:
            NotFoundError: GENRE_NOT_FOUND
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            result = await conn.execute("DELETE FROM genres WHERE id = $1", genre_id)

        if affected_rows(result) == 0:
            raise genre_not_found(genre_id)

        logger.info("genre_deleted", genre_id=str(genre_id))


class ActorService:
    """CRUD over the actors table."""

    async def list_actors(self, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> ActorPage:
        """List actors ordered by surname, one page at a time.

        Raises:
            ValidationError: INVALID_PAGINATION_PARAMS
        """
        if page < 1 or limit < 1 or limit > MAX_PAGE_LIMIT:
            raise invalid_pagination()

        pool = await get_pool()

        async with pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, first_name, last_name, country, avatar_url
                FROM actors
                ORDER BY last_name, first_name, id
                LIMIT $1 OFFSET $2
                """,
                limit,
                (page - 1) * limit,
            )
            total = await conn.fetchval("SELECT COUNT(*) FROM actors")

        return ActorPage(
            data=[Actor(**dict(row)) for row in rows],
            pagination=Pagination(
                total=total,
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit),
            ),
        )

    async def get_actor(self, actor_id: UUID) -> Optional[Actor]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, first_name, last_name, country, avatar_url
                FROM actors
                WHERE id = $1
                """,
                actor_id,
            )

        return Actor(**dict(row)) if row is not None else None

    async def create_actor(self, data: ActorCreate) -> Actor:
        actor_id = uuid4()
        pool = await get_pool()

        async with pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO actors (id, first_name, last_name, country, avatar_url)
                VALUES ($1, $2, $3, $4, $5)
                """,
                actor_id,
                data.first_name,
                data.last_name,
                data.country,
                data.avatar_url,
            )

        logger.info("actor_created", actor_id=str(actor_id))
        return Actor(id=actor_id, **data.model_dump())

    async def update_actor(self, actor_id: UUID, data: ActorUpdate) -> Actor:
        """Update the provided actor fields.

        Raises:
            ValidationError: MISSING_UPDATE_FIELDS
            NotFoundError: ACTOR_NOT_FOUND
        """
        changes = data.model_dump(exclude_none=True)
        if not changes:
            raise missing_update_fields()

        params = list(changes.values())
        set_clause = ", ".join(f"{column} = ${i}" for i, column in enumerate(changes, start=1))
        params.append(actor_id)

        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE actors
                SET {set_clause}
                WHERE id = ${len(params)}
                RETURNING id, first_name, last_name, country, avatar_url
                """,
                *params,
            )

        if row is None:
            raise actor_not_found(actor_id)

        logger.info("actor_updated", actor_id=str(actor_id), fields_updated=list(changes))
        return Actor(**dict(row))

    async def delete_actor(self, actor_id: UUID) -> None:
        """Delete an actor.

        Raises:
            NotFoundError: ACTOR_NOT_FOUND
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            result = await conn.execute("DELETE FROM actors WHERE id = $1", actor_id)

        if affected_rows(result) == 0:
            raise actor_not_found(actor_id)

        logger.info("actor_deleted", actor_id=str(actor_id))
