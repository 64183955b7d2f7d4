"""
Redis Client with Connection Pooling

Architecture:
    RedisClient (Public API, CacheStore implementation)
        ├── ConnectionManager (Connection lifecycle)
        ├── OperationExecutor (Command execution with error handling)
        └── PrefixCodec (Key namespace for keyed commands)

redis-py has no client-side key prefix option, so the prefix is applied here
for GET/SET/DEL. SCAN works on physical patterns/keys; PatternScanner adds and
strips the prefix around it.
"""

from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from cache_facade.core.config.constants import Stage
from cache_facade.core.config.settings import RedisSettings
from cache_facade.core.exceptions import CacheConnectionError, CacheKeyError
from cache_facade.core.logging.logger import get_logger
from cache_facade.infrastructure.cache.key_prefix import PrefixCodec

logger = get_logger(__name__)


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# Handles connection lifecycle and pooling
# =============================================================================


class ConnectionManager:
    """
    Manages Redis connection lifecycle and pooling.

    The pool is created once at connect() and released once at disconnect();
    retries on socket timeout are left to redis-py (retry_on_timeout).
    """

    def __init__(self, settings: RedisSettings):
        """
        Initialize connection manager.

        Args:
            settings: Redis connection settings
        """
        self._settings = settings
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = None
        self._is_connected = False

    async def connect(self) -> redis.Redis:
        """
        Establish connection to Redis with connection pooling.

        Returns:
            redis.Redis: Connected Redis client

        Raises:
            CacheConnectionError: If connection fails
        """
        if self._is_connected and self._client:
            return self._client

        try:
            self._pool = ConnectionPool(
                host=self._settings.REDIS_HOST,
                port=self._settings.REDIS_PORT,
                db=self._settings.REDIS_DB,
                password=self._settings.REDIS_PASSWORD,
                max_connections=self._settings.REDIS_MAX_CONNECTIONS,
                socket_connect_timeout=self._settings.REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=self._settings.REDIS_SOCKET_TIMEOUT,
                retry_on_timeout=True,
                health_check_interval=self._settings.REDIS_HEALTH_CHECK_INTERVAL,
                decode_responses=True,  # Return strings instead of bytes
            )
            self._client = redis.Redis(connection_pool=self._pool)

            # Verify the connection actually works
            await self._client.ping()

            self._is_connected = True

            logger.info(
                "Redis connected successfully",
                stage=Stage.REDIS_CONNECT.value,
                host=self._settings.REDIS_HOST,
                port=self._settings.REDIS_PORT,
                db=self._settings.REDIS_DB,
                max_connections=self._settings.REDIS_MAX_CONNECTIONS,
            )

            return self._client

        except (ConnectionError, TimeoutError) as e:
            logger.error("Failed to connect to Redis", stage=Stage.REDIS_CONNECT.value, error=str(e))
            await self._release()
            raise CacheConnectionError(
                message=f"Failed to connect to Redis: {e}",
                details={
                    "host": self._settings.REDIS_HOST,
                    "port": self._settings.REDIS_PORT,
                },
            ) from e

    async def _release(self) -> None:
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        self._client = None
        self._pool = None
        self._is_connected = False

    async def disconnect(self) -> None:
        """
        Close Redis client and pool.

        Safe to call when never connected.
        """
        was_connected = self._is_connected
        await self._release()

        if was_connected:
            logger.info("Redis disconnected", stage=Stage.REDIS_DISCONNECT.value)

    def get_client(self) -> redis.Redis | None:
        """Get the Redis client instance."""
        return self._client

    def is_connected(self) -> bool:
        """Check if connected to Redis."""
        return self._is_connected


# =============================================================================
# LAYER 2: OPERATION EXECUTOR
# Executes Redis commands with error handling and logging
# =============================================================================


class OperationExecutor:
    """
    Executes Redis commands with consistent error handling.

    Error Handling Strategy:
    - Catch RedisError exceptions
    - Log error with context (stage, command, key)
    - Raise CacheKeyError, chaining the original exception

    All keys here are physical keys; prefixing happens in RedisClient.
    """

    def __init__(self, redis_client: redis.Redis):
        """
        Initialize operation executor.

        Args:
            redis_client: Redis client instance
        """
        self._redis = redis_client

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            logger.error("Redis GET failed", stage=Stage.REDIS_COMMAND.value, key=key, error=str(e))
            raise CacheKeyError(message=f"Redis GET failed: {e}", details={"key": key}) from e

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """
        SET key value [EX ttl].

        Returns:
            True if set successfully
        """
        try:
            result = await self._redis.set(key, value, ex=ttl)
            return result is not None
        except RedisError as e:
            logger.error("Redis SET failed", stage=Stage.REDIS_COMMAND.value, key=key, error=str(e))
            raise CacheKeyError(message=f"Redis SET failed: {e}", details={"key": key}) from e

    async def delete(self, *keys: str) -> int:
        """
        DEL key [key ...].

        Returns:
            Number of keys deleted
        """
        try:
            return await self._redis.delete(*keys)
        except RedisError as e:
            logger.error(
                "Redis DELETE failed", stage=Stage.REDIS_COMMAND.value, keys=len(keys), error=str(e)
            )
            raise CacheKeyError(
                message=f"Redis DELETE failed: {e}", details={"keys": list(keys)}
            ) from e

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        """
        SCAN cursor MATCH pattern COUNT n.

        Returns:
            (next_cursor, keys)
        """
        try:
            next_cursor, keys = await self._redis.scan(cursor=cursor, match=match, count=count)
            return int(next_cursor), list(keys)
        except RedisError as e:
            logger.error(
                "Redis SCAN failed",
                stage=Stage.REDIS_COMMAND.value,
                cursor=cursor,
                match=match,
                error=str(e),
            )
            raise CacheKeyError(
                message=f"Redis SCAN failed: {e}", details={"cursor": cursor, "match": match}
            ) from e

    async def flushdb(self) -> bool:
        try:
            return await self._redis.flushdb()
        except RedisError as e:
            logger.error("Redis FLUSHDB failed", stage=Stage.REDIS_COMMAND.value, error=str(e))
            raise CacheKeyError(message=f"Redis FLUSHDB failed: {e}") from e

    async def dbsize(self) -> int:
        try:
            return await self._redis.dbsize()
        except RedisError as e:
            logger.error("Redis DBSIZE failed", stage=Stage.REDIS_COMMAND.value, error=str(e))
            raise CacheKeyError(message=f"Redis DBSIZE failed: {e}") from e

    async def info(self, section: str) -> dict[str, Any]:
        """
        INFO section.

        redis-py parses the "key:value" text blob into a dict.
        """
        try:
            return await self._redis.info(section)
        except RedisError as e:
            logger.error(
                "Redis INFO failed", stage=Stage.REDIS_COMMAND.value, section=section, error=str(e)
            )
            raise CacheKeyError(
                message=f"Redis INFO failed: {e}", details={"section": section}
            ) from e


# =============================================================================
# LAYER 3: PUBLIC API
# =============================================================================


class RedisClient:
    """
    Async Redis transport with connection pooling and key namespacing.

    Implements the CacheStore protocol consumed by the cache facade.

    Usage:
        client = RedisClient(settings.redis, key_prefix="app:")
        await client.connect()

        await client.set("user:1", '{"name": "a"}', ttl=60)  # stored as app:user:1
        value = await client.get("user:1")

        await client.disconnect()
    """

    def __init__(self, settings: RedisSettings, key_prefix: str = ""):
        """
        Initialize Redis client.

        Args:
            settings: Redis connection settings
            key_prefix: Namespace prefix for every keyed command
        """
        self._settings = settings
        self._codec = PrefixCodec(key_prefix)
        self._conn_mgr = ConnectionManager(settings)
        self._executor: OperationExecutor | None = None

    @property
    def key_prefix(self) -> str:
        return self._codec.prefix

    async def connect(self) -> None:
        """
        Establish connection to Redis.

        Raises:
            CacheConnectionError: If connection fails
        """
        client = await self._conn_mgr.connect()
        self._executor = OperationExecutor(client)

    async def disconnect(self) -> None:
        """Close Redis connection and pool."""
        await self._conn_mgr.disconnect()
        self._executor = None

    def is_connected(self) -> bool:
        return self._conn_mgr.is_connected()

    def get_client(self) -> redis.Redis | None:
        """Underlying redis.asyncio client, for advanced operations."""
        return self._conn_mgr.get_client()

    def _require_executor(self) -> OperationExecutor:
        if self._executor is None:
            raise CacheConnectionError(
                message="Redis client not initialized; call connect() first",
                details={"host": self._settings.REDIS_HOST, "port": self._settings.REDIS_PORT},
            )
        return self._executor

    # -------------------------------------------------------------------------
    # Keyed commands (prefix applied)
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        """Get value from Redis."""
        return await self._require_executor().get(self._codec.add_prefix(key))

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """Set value in Redis."""
        return await self._require_executor().set(self._codec.add_prefix(key), value, ttl)

    async def delete(self, *keys: str) -> int:
        """Delete keys from Redis."""
        return await self._require_executor().delete(*(self._codec.add_prefix(k) for k in keys))

    # -------------------------------------------------------------------------
    # Key-space commands (physical patterns / whole database)
    # -------------------------------------------------------------------------

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        """One SCAN round over physical keys."""
        return await self._require_executor().scan(cursor, match, count)

    async def flushdb(self) -> bool:
        """Flush the whole logical database (not just this prefix)."""
        return await self._require_executor().flushdb()

    async def dbsize(self) -> int:
        return await self._require_executor().dbsize()

    async def info(self, section: str) -> dict[str, Any]:
        return await self._require_executor().info(section)
