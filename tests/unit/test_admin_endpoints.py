"""Unit tests for admin user-management endpoints."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from src.errors import email_taken
from src.models.user import AuthenticatedIdentity, User


def _make_user(username="bob", is_admin=False, is_active=True, user_id=None):
    now = datetime.now(timezone.utc)
    return User(
        id=user_id or uuid4(),
        username=username,
        email=f"{username}@example.com",
        is_admin=is_admin,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def admin_identity():
    return AuthenticatedIdentity(id=uuid4(), role="admin", is_admin=True)


@pytest.fixture
def non_admin_identity():
    return AuthenticatedIdentity(id=uuid4(), role="user", is_admin=False)


@pytest.fixture
def as_identity(client):
    """Authenticate requests as the given identity; the admin check stays real."""
    from src.api.dependencies import authenticate
    from src.main import app

    def _use(identity):
        app.dependency_overrides[authenticate] = lambda: identity

    yield _use
    app.dependency_overrides.pop(authenticate, None)


# ---------------------------------------------------------------------------
# GET /api/admin/users
# ---------------------------------------------------------------------------

class TestListUsers:
    """Tests for GET /api/admin/users."""

    def test_returns_user_list_for_admin(self, client, as_identity, admin_identity):
        as_identity(admin_identity)
        users = [_make_user("admin", is_admin=True), _make_user("bob")]

        with patch("src.api.admin.UserService") as MockUserService:
            MockUserService.return_value.list_users = AsyncMock(return_value=users)

            response = client.get("/api/admin/users")

        assert response.status_code == 200
        data = response.json()
        assert [u["username"] for u in data] == ["admin", "bob"]
        assert all("password_hash" not in u for u in data)

    def test_returns_403_for_non_admin(self, client, as_identity, non_admin_identity):
        as_identity(non_admin_identity)

        with patch("src.api.admin.UserService") as MockUserService:
            response = client.get("/api/admin/users")
            MockUserService.return_value.list_users.assert_not_called()

        assert response.status_code == 403
        assert response.json()["code"] == "ADMIN_ACCESS_REQUIRED"

    def test_returns_401_without_token(self, client):
        response = client.get("/api/admin/users")

        assert response.status_code == 401
        assert response.json()["code"] == "MISSING_AUTH_TOKEN"


# ---------------------------------------------------------------------------
# PATCH /api/admin/users/{user_id}
# ---------------------------------------------------------------------------

class TestUpdateUser:
    """Tests for PATCH /api/admin/users/{user_id}."""

    def test_updates_name(self, client, as_identity, admin_identity):
        as_identity(admin_identity)
        target = _make_user()

        with (
            patch("src.api.admin.UserService") as MockUserService,
            patch("src.api.admin.RefreshTokenStore") as MockStore,
        ):
            update = AsyncMock(return_value=target)
            MockUserService.return_value.update_user = update
            MockStore.return_value.revoke_all_for_user = AsyncMock()

            response = client.patch(f"/api/admin/users/{target.id}", json={"name": "Bobby"})

            MockStore.return_value.revoke_all_for_user.assert_not_awaited()

        assert response.status_code == 200
        assert update.call_args.kwargs["name"] == "Bobby"
        assert update.call_args.kwargs["is_active"] is None

    def test_deactivation_revokes_sessions(self, client, as_identity, admin_identity):
        as_identity(admin_identity)
        target = _make_user(is_active=False)

        with (
            patch("src.api.admin.UserService") as MockUserService,
            patch("src.api.admin.RefreshTokenStore") as MockStore,
        ):
            MockUserService.return_value.update_user = AsyncMock(return_value=target)
            revoke = AsyncMock(return_value=2)
            MockStore.return_value.revoke_all_for_user = revoke

            response = client.patch(
                f"/api/admin/users/{target.id}", json={"is_active": False}
            )

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        revoke.assert_awaited_once_with(target.id)

    def test_unknown_user_404(self, client, as_identity, admin_identity):
        as_identity(admin_identity)

        with patch("src.api.admin.UserService") as MockUserService:
            MockUserService.return_value.update_user = AsyncMock(return_value=None)

            response = client.patch(f"/api/admin/users/{uuid4()}", json={"name": "X"})

        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    def test_email_conflict_409(self, client, as_identity, admin_identity):
        as_identity(admin_identity)

        with patch("src.api.admin.UserService") as MockUserService:
            MockUserService.return_value.update_user = AsyncMock(
                side_effect=email_taken("taken@example.com")
            )

            response = client.patch(
                f"/api/admin/users/{uuid4()}", json={"email": "taken@example.com"}
            )

        assert response.status_code == 409
        assert response.json()["code"] == "EMAIL_TAKEN"

    def test_invalid_uuid_400(self, client, as_identity, admin_identity):
        as_identity(admin_identity)

        response = client.patch("/api/admin/users/not-a-uuid", json={"name": "X"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_non_admin_forbidden(self, client, as_identity, non_admin_identity):
        as_identity(non_admin_identity)

        response = client.patch(f"/api/admin/users/{uuid4()}", json={"is_active": False})

        assert response.status_code == 403
        assert response.json()["code"] == "ADMIN_ACCESS_REQUIRED"
