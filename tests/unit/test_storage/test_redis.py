"""Tests for the Redis fragment store using a mocked client."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.asyncio.connection import Connection, SSLConnection
from redis.exceptions import ConnectionError as RedisConnectionError

from loreweaver.context import Fragment
from loreweaver.errors import StorageFailedError
from loreweaver.llm.base import Message, MessageRole
from loreweaver.storage import RedisFragmentStore, RedisStoreConfig
from loreweaver.storage import redis as redis_module


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def redis_store(client: AsyncMock) -> RedisFragmentStore:
    return RedisFragmentStore(RedisStoreConfig(key_prefix="test"), client=client)


@pytest.fixture
def fragment() -> Fragment:
    fragment = Fragment()
    fragment.append(Message(role=MessageRole.USER, content="hello there", author="a"), 2)
    return fragment


class TestRedisStoreConfig:
    """Tests for RedisStoreConfig."""

    def test_defaults(self):
        """Test default connection settings."""
        config = RedisStoreConfig()
        assert config.host == "localhost"
        assert config.port == 6379
        assert config.key_prefix == "loreweaver"


class TestRedisFragmentStore:
    """Tests for RedisFragmentStore."""

    @pytest.mark.asyncio
    async def test_fetch_reads_last_element(self, redis_store, client, fragment):
        """Test fetch returns the tail of the key's list."""
        client.lindex.return_value = json.dumps(fragment.to_dict())

        fetched = await redis_store.fetch("story:1")

        client.lindex.assert_awaited_once_with("test:story:1", -1)
        assert fetched == fragment

    @pytest.mark.asyncio
    async def test_fetch_missing(self, redis_store, client):
        """Test an unknown key is None."""
        client.lindex.return_value = None
        assert await redis_store.fetch("story:1") is None

    @pytest.mark.asyncio
    async def test_new_fragment_pushes(self, redis_store, client, fragment):
        """Test new fragments are appended to the list."""
        await redis_store.save("story:1", fragment, new_fragment=True)

        client.rpush.assert_awaited_once()
        key, payload = client.rpush.await_args.args
        assert key == "test:story:1"
        assert json.loads(payload)["total_tokens"] == 2
        client.lset.assert_not_called()

    @pytest.mark.asyncio
    async def test_continuation_replaces_tail(self, redis_store, client, fragment):
        """Test continuation overwrites the last element."""
        client.llen.return_value = 3

        await redis_store.save("story:1", fragment, new_fragment=False)

        client.lset.assert_awaited_once()
        assert client.lset.await_args.args[:2] == ("test:story:1", -1)
        client.rpush.assert_not_called()

    @pytest.mark.asyncio
    async def test_continuation_on_empty_list_pushes(self, redis_store, client, fragment):
        """Test the first continuation save creates the list."""
        client.llen.return_value = 0

        await redis_store.save("story:1", fragment, new_fragment=False)

        client.rpush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_history(self, redis_store, client, fragment):
        """Test history reads the whole list in order."""
        client.lrange.return_value = [json.dumps(fragment.to_dict())] * 2

        trail = await redis_store.history("story:1")

        client.lrange.assert_awaited_once_with("test:story:1", 0, -1)
        assert len(trail) == 2

    @pytest.mark.asyncio
    async def test_redis_errors_become_storage_failures(self, redis_store, client, fragment):
        """Test Redis errors are wrapped with the key."""
        client.lindex.side_effect = RedisConnectionError("refused")
        client.rpush.side_effect = RedisConnectionError("refused")

        with pytest.raises(StorageFailedError) as exc_info:
            await redis_store.fetch("story:1")
        assert exc_info.value.key == "story:1"

        with pytest.raises(StorageFailedError):
            await redis_store.save("story:1", fragment, new_fragment=True)

    @pytest.mark.asyncio
    async def test_corrupt_payload(self, redis_store, client):
        """Test unparseable data is a storage failure."""
        client.lindex.return_value = "not json"

        with pytest.raises(StorageFailedError, match="Parsing error"):
            await redis_store.fetch("story:1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "ssl,connection_class",
        [(True, SSLConnection), (False, Connection)],
    )
    async def test_connect_pool_connection_class(self, monkeypatch, ssl, connection_class):
        """Test the ssl setting selects the pool's connection class."""
        pool_cls = MagicMock()
        redis_cls = MagicMock()
        redis_cls.return_value.ping = AsyncMock()
        monkeypatch.setattr(redis_module, "ConnectionPool", pool_cls)
        monkeypatch.setattr(redis_module, "Redis", redis_cls)

        await RedisFragmentStore(RedisStoreConfig(ssl=ssl)).connect()

        assert pool_cls.call_args.kwargs["connection_class"] is connection_class
        redis_cls.assert_called_once_with(connection_pool=pool_cls.return_value)

    @pytest.mark.asyncio
    async def test_connect_failure(self, monkeypatch):
        """Test an unreachable server is a storage failure."""
        redis_cls = MagicMock()
        redis_cls.return_value.ping = AsyncMock(side_effect=RedisConnectionError("refused"))
        redis_cls.return_value.aclose = AsyncMock()
        pool_cls = MagicMock()
        pool_cls.return_value.disconnect = AsyncMock()
        monkeypatch.setattr(redis_module, "ConnectionPool", pool_cls)
        monkeypatch.setattr(redis_module, "Redis", redis_cls)

        with pytest.raises(StorageFailedError):
            await RedisFragmentStore().connect()

    @pytest.mark.asyncio
    async def test_disconnect_closes_client(self, redis_store, client):
        """Test disconnect releases the client."""
        await redis_store.disconnect()
        client.aclose.assert_awaited_once()
