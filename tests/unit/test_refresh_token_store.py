"""Unit tests for RefreshTokenStore with mocked asyncpg database."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from src.errors import PersistenceError
from src.models.user import RefreshTokenRecord
from src.services.refresh_token_store import RefreshTokenStore


@pytest.fixture
def store():
    return RefreshTokenStore()


class TestSave:
    """Tests for RefreshTokenStore.save."""

    async def test_inserts_with_expiry_from_ttl(self, store, mock_pool):
        pool, conn = mock_pool
        conn.execute.side_effect = ["INSERT 0 1", "DELETE 0"]
        user_id = uuid4()

        with patch("src.services.refresh_token_store.get_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = pool
            before = datetime.now(timezone.utc)
            assert await store.save(user_id, "refresh.jwt.value", 3600) is True

        insert_call = conn.execute.call_args_list[0]
        sql, passed_user, token, expires_at, created_at = insert_call[0]
        assert "INSERT INTO refresh_tokens" in sql
        assert passed_user == user_id
        assert token == "refresh.jwt.value"
        assert expires_at - created_at == timedelta(seconds=3600)
        assert created_at >= before

    async def test_prunes_expired_after_insert(self, store, mock_pool):
        pool, conn = mock_pool
        conn.execute.side_effect = ["INSERT 0 1", "DELETE 4"]

        with patch("src.services.refresh_token_store.get_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = pool
            await store.save(uuid4(), "tok", 60)

        prune_sql = conn.execute.call_args_list[1][0][0]
        assert "DELETE FROM refresh_tokens WHERE expires_at < $1" in prune_sql

    async def test_prune_failure_does_not_fail_save(self, store, mock_pool):
        pool, conn = mock_pool
        conn.execute.side_effect = ["INSERT 0 1", ConnectionError("gone")]

        with patch("src.services.refresh_token_store.get_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = pool
            assert await store.save(uuid4(), "tok", 60) is True

    async def test_nothing_inserted(self, store, mock_pool):
        pool, conn = mock_pool
        conn.execute.return_value = "INSERT 0 0"

        with patch("src.services.refresh_token_store.get_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = pool
            with pytest.raises(PersistenceError) as exc_info:
                await store.save(uuid4(), "tok", 60)

        assert exc_info.value.code == "TOKEN_PERSISTENCE_ERROR"

    async def test_storage_failure(self, store, mock_pool):
        pool, conn = mock_pool
        conn.execute.side_effect = ConnectionError("connection reset")

        with patch("src.services.refresh_token_store.get_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = pool
            with pytest.raises(PersistenceError) as exc_info:
                await store.save(uuid4(), "tok", 60)

        assert exc_info.value.code == "TOKEN_PERSISTENCE_ERROR"
        assert exc_info.value.status_code == 500

    async def test_missing_token(self, store):
        with pytest.raises(PersistenceError):
            await store.save(uuid4(), "", 60)


class TestFind:
    """Tests for RefreshTokenStore.find."""

    async def test_returns_record(self, store, mock_pool):
        pool, conn = mock_pool
        now = datetime.now(timezone.utc)
        user_id = uuid4()
        conn.fetchrow.return_value = {
            "user_id": user_id,
            "token": "tok",
            "expires_at": now + timedelta(days=7),
            "created_at": now,
            "is_revoked": False,
        }

        with patch("src.services.refresh_token_store.get_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = pool
            record = await store.find("tok")

        assert isinstance(record, RefreshTokenRecord)
        assert record.user_id == user_id
        assert record.is_revoked is False

    async def test_returns_none_when_absent(self, store, mock_pool):
        pool, conn = mock_pool
        conn.fetchrow.return_value = None

        with patch("src.services.refresh_token_store.get_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = pool
            assert await store.find("missing") is None


class TestDeleteAndRevoke:
    """Tests for delete / prune_expired / revoke_all_for_user."""

    async def test_delete_is_idempotent(self, store, mock_pool):
        pool, conn = mock_pool
        conn.execute.side_effect = ["DELETE 1", "DELETE 0"]

        with patch("src.services.refresh_token_store.get_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = pool
            await store.delete("tok")
            await store.delete("tok")

        assert conn.execute.await_count == 2
        assert conn.execute.call_args[0][1] == "tok"

    async def test_prune_expired_returns_count(self, store, mock_pool):
        pool, conn = mock_pool
        conn.execute.return_value = "DELETE 2"

        with patch("src.services.refresh_token_store.get_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = pool
            assert await store.prune_expired() == 2

    async def test_revoke_all_for_user(self, store, mock_pool):
        pool, conn = mock_pool
        conn.execute.return_value = "UPDATE 3"
        user_id = uuid4()

        with patch("src.services.refresh_token_store.get_pool", new_callable=AsyncMock) as mock_get_pool:
            mock_get_pool.return_value = pool
            assert await store.revoke_all_for_user(user_id) == 3

        sql, passed_id = conn.execute.call_args[0]
        assert "SET is_revoked = TRUE" in sql
        assert passed_id == user_id
