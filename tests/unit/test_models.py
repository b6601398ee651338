"""Unit tests for Pydantic models."""

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError

from src.models.auth import LoginRequest, RegisterRequest, TokenRequest, UpdateUserRequest
from src.models.catalog import (
    ActorCreate,
    ActorUpdate,
    GenreCreate,
    GenreUpdate,
    MovieCreate,
    MovieUpdate,
)
from src.models.response import ErrorResponse
from src.models.user import User, role_for


class TestRegisterRequest:
    """Tests for RegisterRequest validation."""

    def _valid(self, **overrides):
        values = {
            "username": "alice_01",
            "email": "alice@example.com",
            "password": "Str0ngPass",
        }
        values.update(overrides)
        return values

    def test_valid_request(self):
        request = RegisterRequest(**self._valid())
        assert request.username == "alice_01"
        assert request.is_admin is False
        assert request.name is None

    @pytest.mark.parametrize("username", ["ab", "a" * 51, "has space", "dash-ed", "emoji😀"])
    def test_invalid_usernames(self, username):
        with pytest.raises(ValidationError):
            RegisterRequest(**self._valid(username=username))

    @pytest.mark.parametrize("email", ["plain", "no@tld", "@example.com", "a b@example.com"])
    def test_invalid_emails(self, email):
        with pytest.raises(ValidationError):
            RegisterRequest(**self._valid(email=email))

    @pytest.mark.parametrize(
        "password",
        ["Sh0rt", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere", "A1" + "a" * 80],
    )
    def test_weak_passwords(self, password):
        with pytest.raises(ValidationError):
            RegisterRequest(**self._valid(password=password))

    def test_spanish_field_names(self):
        request = RegisterRequest(
            **self._valid(), nombre="Alicia", apellido="García", es_admin=True
        )
        assert request.name == "Alicia"
        assert request.surname == "García"
        assert request.is_admin is True

    def test_blank_name_becomes_none(self):
        request = RegisterRequest(**self._valid(), name="   ")
        assert request.name is None


class TestOtherRequests:
    """Tests for login, token and admin update payloads."""

    def test_login_camel_case_alias(self):
        request = LoginRequest(usernameOrEmail="alice", password="x")
        assert request.username_or_email == "alice"

    def test_login_requires_password(self):
        with pytest.raises(ValidationError):
            LoginRequest(username_or_email="alice", password="")

    def test_token_request_optional(self):
        assert TokenRequest().token is None
        assert TokenRequest(refresh_token="abc").token == "abc"

    def test_update_user_email_checked(self):
        with pytest.raises(ValidationError):
            UpdateUserRequest(email="nope")
        assert UpdateUserRequest(is_active=False).email is None


class TestCatalogModels:
    """Tests for genre and actor payloads."""

    def test_genre_name_trimmed(self):
        assert GenreCreate(name="  Drama ").name == "Drama"

    def test_genre_blank_name(self):
        with pytest.raises(ValidationError):
            GenreCreate(name="   ")

    def test_actor_avatar_url(self):
        assert ActorCreate(
            first_name="A", last_name="B", avatar_url="https://img.example.com/a.png"
        ).avatar_url.startswith("https://")
        with pytest.raises(ValidationError):
            ActorCreate(first_name="A", last_name="B", avatar_url="not a url")

    def test_genre_update_name_trimmed(self):
        assert GenreUpdate(name=" Noir ").name == "Noir"
        assert GenreUpdate(description="x").name is None

    def test_genre_update_blank_name(self):
        with pytest.raises(ValidationError):
            GenreUpdate(name="   ")

    def test_actor_update_avatar_url(self):
        assert ActorUpdate(avatar_url="http://img.example.com/a.png").avatar_url
        assert ActorUpdate(country="Peru").avatar_url is None
        with pytest.raises(ValidationError):
            ActorUpdate(avatar_url="ftp://img.example.com/a.png")


class TestMovieModels:
    """Tests for movie payloads."""

    def _payload(self, **overrides):
        values = {
            "title": "  Solaris ",
            "release_date": "1972-03-20",
            "duration_min": 167,
            "rating": "PG",
            "genre_ids": [str(uuid4())],
            "poster_url": "https://img.example.com/solaris.jpg",
        }
        values.update(overrides)
        return values

    def test_valid_movie(self):
        movie = MovieCreate(**self._payload())
        assert movie.title == "Solaris"
        assert movie.release_date == date(1972, 3, 20)
        assert movie.director_id is None

    def test_spanish_field_names(self):
        genre_id = uuid4()
        movie = MovieCreate(
            titulo="Roma",
            descripcion="Mexico City, 1970",
            fecha_lanzamiento="2018-08-30",
            duracion_min=135,
            clasificacion="R",
            generos=[str(genre_id)],
            URLposter="https://img.example.com/roma.jpg",
        )
        assert movie.title == "Roma"
        assert movie.genre_ids == [genre_id]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"title": "A"},
            {"duration_min": 0},
            {"duration_min": 601},
            {"rating": "X"},
            {"genre_ids": []},
            {"poster_url": "poster.jpg"},
            {"release_date": (date.today() + timedelta(days=1)).isoformat()},
        ],
    )
    def test_invalid_movie(self, overrides):
        with pytest.raises(ValidationError):
            MovieCreate(**self._payload(**overrides))

    def test_update_fields_optional(self):
        update = MovieUpdate(director_id=None)
        assert update.genre_ids is None
        assert "director_id" in update.model_fields_set

    def test_update_rejects_blank_title(self):
        with pytest.raises(ValidationError):
            MovieUpdate(title="   ")


class TestUserModel:
    """Tests for User and role mapping."""

    def test_role_for(self):
        assert role_for(True) == "admin"
        assert role_for(False) == "user"

    def test_user_role_property(self):
        now = datetime.now(timezone.utc)
        user = User(
            id=uuid4(), username="a", email="a@example.com", is_admin=True,
            created_at=now, updated_at=now,
        )
        assert user.role == "admin"
        assert user.is_active is True


class TestErrorResponse:
    """Tests for the error envelope."""

    def test_details_optional(self):
        body = ErrorResponse(error="Forbidden", code="ADMIN_ACCESS_REQUIRED")
        assert body.model_dump() == {
            "error": "Forbidden",
            "code": "ADMIN_ACCESS_REQUIRED",
            "details": None,
        }
