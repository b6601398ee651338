"""Genre, actor and movie models."""

from datetime import date
from typing import Literal, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, field_validator

MovieRating = Literal["G", "PG", "PG-13", "R", "NC-17", "NR"]


def _strip_required(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Value cannot be empty or whitespace only")
    return v


def _http_url(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not v.startswith(("http://", "https://")):
        raise ValueError("Must be an http or https URL")
    return v


class Genre(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None


class GenreCreate(BaseModel):
    name: str = Field(
        ..., min_length=1, max_length=50, validation_alias=AliasChoices("name", "nombre")
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
        validation_alias=AliasChoices("description", "descripcion"),
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _strip_required(v)


class GenreUpdate(BaseModel):
    name: Optional[str] = Field(
        default=None, max_length=50, validation_alias=AliasChoices("name", "nombre")
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
        validation_alias=AliasChoices("description", "descripcion"),
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _strip_required(v)


class Actor(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    country: Optional[str] = None
    avatar_url: Optional[str] = None


class ActorCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    country: Optional[str] = Field(default=None, max_length=100)
    avatar_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("avatar_url")
    @classmethod
    def avatar_is_url(cls, v: Optional[str]) -> Optional[str]:
        """Accept only http(s) URLs for avatars."""
        return _http_url(v)


class ActorUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    country: Optional[str] = Field(default=None, max_length=100)
    avatar_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("avatar_url")
    @classmethod
    def avatar_is_url(cls, v: Optional[str]) -> Optional[str]:
        return _http_url(v)


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class ActorPage(BaseModel):
    """One page of actors plus the paging counters."""

    data: list[Actor]
    pagination: Pagination


class Movie(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    release_date: date
    duration_min: int
    rating: MovieRating
    poster_url: str
    director_id: Optional[UUID] = None
    genres: list[Genre] = []


class MovieCreate(BaseModel):
    """Movie payload. Spanish field names from older clients are accepted."""

    title: str = Field(
        ..., min_length=2, max_length=100, validation_alias=AliasChoices("title", "titulo")
    )
    description: Optional[str] = Field(
        default=None,
        max_length=2000,
        validation_alias=AliasChoices("description", "descripcion"),
    )
    release_date: date = Field(
        ..., validation_alias=AliasChoices("release_date", "fecha_lanzamiento")
    )
    duration_min: int = Field(
        ..., ge=1, le=600, validation_alias=AliasChoices("duration_min", "duracion_min")
    )
    rating: MovieRating = Field(
        ..., validation_alias=AliasChoices("rating", "clasificacion")
    )
    genre_ids: list[UUID] = Field(
        ..., min_length=1, validation_alias=AliasChoices("genre_ids", "generos")
    )
    poster_url: str = Field(
        ..., max_length=255, validation_alias=AliasChoices("poster_url", "URLposter")
    )
    director_id: Optional[UUID] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("release_date")
    @classmethod
    def not_in_future(cls, v: date) -> date:
        if v > date.today():
            raise ValueError("Release date cannot be in the future")
        return v

    @field_validator("poster_url")
    @classmethod
    def poster_is_url(cls, v: str) -> str:
        return _http_url(v)


class MovieUpdate(BaseModel):
    """Partial movie update; ``genre_ids`` replaces the whole genre set."""

    title: Optional[str] = Field(
        default=None,
        min_length=2,
        max_length=100,
        validation_alias=AliasChoices("title", "titulo"),
    )
    description: Optional[str] = Field(
        default=None,
        max_length=2000,
        validation_alias=AliasChoices("description", "descripcion"),
    )
    release_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("release_date", "fecha_lanzamiento")
    )
    duration_min: Optional[int] = Field(
        default=None, ge=1, le=600, validation_alias=AliasChoices("duration_min", "duracion_min")
    )
    rating: Optional[MovieRating] = Field(
        default=None, validation_alias=AliasChoices("rating", "clasificacion")
    )
    genre_ids: Optional[list[UUID]] = Field(
        default=None, min_length=1, validation_alias=AliasChoices("genre_ids", "generos")
    )
    poster_url: Optional[str] = Field(
        default=None, max_length=255, validation_alias=AliasChoices("poster_url", "URLposter")
    )
    director_id: Optional[UUID] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _strip_required(v)

    @field_validator("release_date")
    @classmethod
    def not_in_future(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and v > date.today():
            raise ValueError("Release date cannot be in the future")
        return v

    @field_validator("poster_url")
    @classmethod
    def poster_is_url(cls, v: Optional[str]) -> Optional[str]:
        return _http_url(v)


class MovieActorLink(BaseModel):
    actor_id: UUID


class MovieActorAdded(BaseModel):
    movie_id: UUID
    actor_id: UUID
