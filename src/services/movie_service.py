"""Movie storage, with genre and cast links."""

from typing import Optional
from uuid import UUID, uuid4

import asyncpg
import structlog

from src.database import affected_rows, get_pool
from src.errors import NotFoundError, ValidationError
from src.models.catalog import (
    Actor,
    Genre,
    Movie,
    MovieActorAdded,
    MovieCreate,
    MovieUpdate,
)
from src.services.catalog_service import actor_not_found, missing_update_fields

logger = structlog.get_logger(__name__)

MOVIE_COLUMNS = (
    "id, title, description, release_date, duration_min, rating, poster_url, director_id"
)


def movie_not_found(movie_id: UUID) -> NotFoundError:
    return NotFoundError(
        "Movie not found",
        code="MOVIE_NOT_FOUND",
        details=f"No movie with ID: {movie_id}",
    )


def invalid_director(director_id: UUID) -> ValidationError:
    return ValidationError(
        "Invalid data",
        code="INVALID_DIRECTOR",
        details=f"No director with ID: {director_id}",
    )


def invalid_genres(genre_ids: list[UUID]) -> ValidationError:
    return ValidationError(
        "Invalid data",
        code="INVALID_GENRE",
        details=[f"No genre with ID: {genre_id}" for genre_id in genre_ids],
    )


async def _load_genres(
    conn: asyncpg.Connection, movie_ids: list[UUID]
) -> dict[UUID, list[Genre]]:
    """Genres of each movie, keyed by movie id."""
    if not movie_ids:
        return {}

    rows = await conn.fetch(
        """
        SELECT mg.movie_id, g.id, g.name, g.description
        FROM movie_genres mg
        JOIN genres g ON g.id = mg.genre_id
        WHERE mg.movie_id = ANY($1::uuid[])
        ORDER BY g.name
        """,
        movie_ids,
    )

    genres: dict[UUID, list[Genre]] = {}
    for row in rows:
        genres.setdefault(row["movie_id"], []).append(
            Genre(id=row["id"], name=row["name"], description=row["description"])
        )
    return genres


async def _fetch_movie(conn: asyncpg.Connection, movie_id: UUID) -> Optional[Movie]:
    row = await conn.fetchrow(f"SELECT {MOVIE_COLUMNS} FROM movies WHERE id = $1", movie_id)
    if row is None:
        return None
    genres = await _load_genres(conn, [movie_id])
    return Movie(**dict(row), genres=genres.get(movie_id, []))


async def _check_director(conn: asyncpg.Connection, director_id: Optional[UUID]) -> None:
    if director_id is None:
        return
    found = await conn.fetchval("SELECT 1 FROM actors WHERE id = $1", director_id)
    if found is None:
        raise invalid_director(director_id)


async def _resolve_genres(conn: asyncpg.Connection, genre_ids: list[UUID]) -> list[Genre]:
    """Load the requested genres, rejecting any id that does not exist."""
    wanted = list(dict.fromkeys(genre_ids))
    rows = await conn.fetch(
        "SELECT id, name, description FROM genres WHERE id = ANY($1::uuid[]) ORDER BY name",
        wanted,
    )
    found = {row["id"] for row in rows}
    missing = [genre_id for genre_id in wanted if genre_id not in found]
    if missing:
        raise invalid_genres(missing)
    return [Genre(**dict(row)) for row in rows]


class MovieService:
    """CRUD over movies plus their genre and actor links."""

    async def list_movies(self) -> list[Movie]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            rows = await conn.fetch(f"SELECT {MOVIE_COLUMNS} FROM movies ORDER BY title")
            genres = await _load_genres(conn, [row["id"] for row in rows])

        return [Movie(**dict(row), genres=genres.get(row["id"], [])) for row in rows]

    async def get_movie(self, movie_id: UUID) -> Optional[Movie]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            return await _fetch_movie(conn, movie_id)

    async def create_movie(self, data: MovieCreate) -> Movie:
        """Create a movie and link its genres in one transaction.

        Raises:
            ValidationError: INVALID_DIRECTOR or INVALID_GENRE
        """
        movie_id = uuid4()
        pool = await get_pool()

        async with pool.acquire() as conn:
            async with conn.transaction():
                await _check_director(conn, data.director_id)
                genres = await _resolve_genres(conn, data.genre_ids)

                await conn.execute(
                    f"""
                    INSERT INTO movies ({MOVIE_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    """,
                    movie_id,
                    data.title,
                    data.description,
                    data.release_date,
                    data.duration_min,
                    data.rating,
                    data.poster_url,
                    data.director_id,
                )
                await conn.execute(
                    """
                    INSERT INTO movie_genres (movie_id, genre_id)
                    SELECT $1, unnest($2::uuid[])
                    """,
                    movie_id,
                    [genre.id for genre in genres],
                )

        logger.info("movie_created", movie_id=str(movie_id), genres=len(genres))
        return Movie(
            id=movie_id,
            genres=genres,
            **data.model_dump(exclude={"genre_ids"}),
        )

    async def update_movie(self, movie_id: UUID, data: MovieUpdate) -> Movie:
        """Update the provided fields. ``genre_ids`` replaces the genre set.

        An explicit ``director_id: null`` clears the director.

        Raises:
            ValidationError: MISSING_UPDATE_FIELDS, INVALID_DIRECTOR, INVALID_GENRE
            NotFoundError: MOVIE_NOT_FOUND
        """
        changes = data.model_dump(exclude_none=True, exclude={"genre_ids", "director_id"})
        if "director_id" in data.model_fields_set:
            changes["director_id"] = data.director_id
        if not changes and data.genre_ids is None:
            raise missing_update_fields()

        pool = await get_pool()

        async with pool.acquire() as conn:
            async with conn.transaction():
                exists = await conn.fetchval("SELECT 1 FROM movies WHERE id = $1", movie_id)
                if exists is None:
                    raise movie_not_found(movie_id)

                await _check_director(conn, changes.get("director_id"))

                if changes:
                    params = list(changes.values())
                    set_clause = ", ".join(
                        f"{column} = ${i}" for i, column in enumerate(changes, start=1)
                    )
                    params.append(movie_id)
                    await conn.execute(
                        f"""
                        UPDATE movies
                        SET {set_clause}, updated_at = NOW()
                        WHERE id = ${len(params)}
                        """,
                        *params,
                    )

                if data.genre_ids is not None:
                    genres = await _resolve_genres(conn, data.genre_ids)
                    await conn.execute("DELETE FROM movie_genres WHERE movie_id = $1", movie_id)
                    await conn.execute(
                        """
                        INSERT INTO movie_genres (movie_id, genre_id)
                        SELECT $1, unnest($2::uuid[])
                        """,
                        movie_id,
                        [genre.id for genre in genres],
                    )

            movie = await _fetch_movie(conn, movie_id)

        if movie is None:
            raise movie_not_found(movie_id)

        logger.info(
            "movie_updated",
            movie_id=str(movie_id),
            fields_updated=list(changes),
            genres_replaced=data.genre_ids is not None,
        )
        return movie

    async def delete_movie(self, movie_id: UUID) -> None:
        """Delete a movie; its genre and actor links go with it.

        Raises:
            NotFoundError: MOVIE_NOT_FOUND
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            result = await conn.execute("DELETE FROM movies WHERE id = $1", movie_id)

        if affected_rows(result) == 0:
            raise movie_not_found(movie_id)

        logger.info("movie_deleted", movie_id=str(movie_id))

    async def list_movie_actors(self, movie_id: UUID) -> list[Actor]:
        """Cast of a movie.

        Raises:
            NotFoundError: MOVIE_NOT_FOUND
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            exists = await conn.fetchval("SELECT 1 FROM movies WHERE id = $1", movie_id)
            if exists is None:
                raise movie_not_found(movie_id)

            rows = await conn.fetch(
                """
                SELECT a.id, a.first_name, a.last_name, a.country, a.avatar_url
                FROM movie_actors ma
                JOIN actors a ON a.id = ma.actor_id
                WHERE ma.movie_id = $1
                ORDER BY a.last_name, a.first_name
                """,
                movie_id,
            )

        return [Actor(**dict(row)) for row in rows]

    async def add_movie_actor(self, movie_id: UUID, actor_id: UUID) -> MovieActorAdded:
        """Link an actor to a movie. Linking twice is a no-op.

        Raises:
            NotFoundError: MOVIE_NOT_FOUND or ACTOR_NOT_FOUND
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            if await conn.fetchval("SELECT 1 FROM movies WHERE id = $1", movie_id) is None:
                raise movie_not_found(movie_id)
            if await conn.fetchval("SELECT 1 FROM actors WHERE id = $1", actor_id) is None:
                raise actor_not_found(actor_id)

            await conn.execute(
                """
                INSERT INTO movie_actors (movie_id, actor_id)
                VALUES ($1, $2)
                ON CONFLICT (movie_id, actor_id) DO NOTHING
                """,
                movie_id,
                actor_id,
            )

        logger.info("movie_actor_added", movie_id=str(movie_id), actor_id=str(actor_id))
        return MovieActorAdded(movie_id=movie_id, actor_id=actor_id)
