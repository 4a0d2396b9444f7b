"""Redis-backed fragment store.

Each conversation key maps to a Redis list of JSON-serialized fragments.
The last element is the current fragment; earlier elements are the
fragments that compaction replaced.
"""

from __future__ import annotations

import json
from typing import List, Optional

from pydantic import BaseModel
from redis.asyncio import ConnectionPool, Redis
from redis.asyncio.connection import Connection, SSLConnection
from redis.exceptions import RedisError

from loreweaver.context.fragment import Fragment
from loreweaver.errors import StorageFailedError
from loreweaver.observability.logging import get_logger

logger = get_logger(__name__)


class RedisStoreConfig(BaseModel):
    """Configuration for the Redis fragment store.

    Attributes:
        host: Redis server host.
        port: Redis server port.
        db: Redis database number.
        password: Optional Redis password.
        ssl: Whether to use SSL.
        max_connections: Maximum connections in the pool.
        key_prefix: Prefix for all Redis keys.
        socket_timeout: Socket timeout in seconds.
        socket_connect_timeout: Connection timeout in seconds.
    """

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    ssl: bool = False
    max_connections: int = 10
    key_prefix: str = "loreweaver"
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0


class RedisFragmentStore:
    """Fragment store backed by Redis lists."""

    def __init__(
        self,
        config: Optional[RedisStoreConfig] = None,
        client: Optional[Redis] = None,
    ):
        """Initialize Redis fragment store.

        Args:
            config: Optional Redis configuration.
            client: Optional ready client; skips pool creation.
        """
        self.config = config or RedisStoreConfig()
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[Redis] = client

    async def connect(self) -> None:
        """Establish connection to Redis with connection pooling."""
        if self._client is not None:
            return

        self._pool = ConnectionPool(
            host=self.config.host,
            port=self.config.port,
            db=self.config.db,
            password=self.config.password,
            max_connections=self.config.max_connections,
            socket_timeout=self.config.socket_timeout,
            socket_connect_timeout=self.config.socket_connect_timeout,
            decode_responses=True,
            connection_class=SSLConnection if self.config.ssl else Connection,
        )
        self._client = Redis(connection_pool=self._pool)

        try:
            await self._client.ping()
        except RedisError as e:
            await self.disconnect()
            raise StorageFailedError(f"Failed to connect to Redis: {e}") from e

    async def disconnect(self) -> None:
        """Close Redis connection and pool."""
        if self._client:
            await self._client.aclose()
            self._client = None
        if self._pool:
            await self._pool.disconnect()
            self._pool = None

    async def _ensure_connected(self) -> Redis:
        if self._client is None:
            await self.connect()
        return self._client  # type: ignore

    def _build_key(self, key: str) -> str:
        return f"{self.config.key_prefix}:{key}"

    async def fetch(self, key: str) -> Optional[Fragment]:
        client = await self._ensure_connected()
        try:
            data = await client.lindex(self._build_key(key), -1)
        except RedisError as e:
            raise StorageFailedError(f"Redis error: {e}", key=key) from e
        if data is None:
            return None
        return self._deserialize(data, key)

    async def save(self, key: str, fragment: Fragment, new_fragment: bool) -> None:
        client = await self._ensure_connected()
        redis_key = self._build_key(key)
        data = json.dumps(fragment.to_dict())
        try:
            if new_fragment or await client.llen(redis_key) == 0:
                await client.rpush(redis_key, data)
            else:
                await client.lset(redis_key, -1, data)
        except RedisError as e:
            raise StorageFailedError(f"Redis error: {e}", key=key) from e
        logger.debug("fragment_written", redis_key=redis_key, new_fragment=new_fragment)

    async def history(self, key: str) -> List[Fragment]:
        client = await self._ensure_connected()
        try:
            items = await client.lrange(self._build_key(key), 0, -1)
        except RedisError as e:
            raise StorageFailedError(f"Redis error: {e}", key=key) from e
        return [self._deserialize(item, key) for item in items]

    def _deserialize(self, data: str, key: str) -> Fragment:
        try:
            return Fragment.from_dict(json.loads(data))
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            raise StorageFailedError(f"Parsing error: {e}", key=key) from e
