#!/usr/bin/env python3
"""
Redis Cache Service (cache facade)

Architecture:
    RedisCacheService (Public API)
        ├── CacheStore (RedisClient in production)
        ├── ValueSerializer (JSON via orjson)
        ├── ExecutionDispatcher (blocking vs fire-and-forget)
        ├── PatternScanner (SCAN-based key enumeration)
        └── StatsReporter (DBSIZE + INFO memory)

Execution modes:
    set / del_key / del_keys / del_pattern / del_patterns / reset accept
    ``options=CacheOperationOptions(fire_and_forget=...)``. An explicit
    per-call value always wins over the facade default. In fire-and-forget
    mode deletes return 0 and failures only reach the log.

Consistency:
    No ordering is guaranteed between a fire-and-forget write and a later
    blocking read. Callers needing read-after-write must use blocking mode.
"""

import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

import redis.asyncio as redis
from pydantic import BaseModel, Field

from cache_facade.core.config.constants import DEFAULT_SCAN_COUNT, Stage
from cache_facade.core.config.settings import Settings, get_settings
from cache_facade.core.exceptions import CacheComputeError, CacheError, ConfigurationError
from cache_facade.core.interfaces.cache import CacheStore
from cache_facade.core.logging.logger import get_logger, log_stage
from cache_facade.infrastructure.cache.execution_mode import (
    CacheOperationOptions,
    ExecutionDispatcher,
    ExecutionMode,
    override_from,
    resolve_execution_mode,
)
from cache_facade.infrastructure.cache.key_prefix import PrefixCodec
from cache_facade.infrastructure.cache.pattern_scanner import PatternScanner
from cache_facade.infrastructure.cache.redis_client import RedisClient
from cache_facade.infrastructure.cache.serializers import JsonSerializer, ValueSerializer
from cache_facade.infrastructure.cache.stats_reporter import StatsReporter, StatsSnapshot

logger = get_logger(__name__)

T = TypeVar("T")


class CacheFacadeConfig(BaseModel):
    """
    Immutable facade configuration, captured once at construction.

    Attributes:
        key_prefix: Namespace prefix for physical keys; an injected store must
            carry the same prefix
        default_ttl: TTL in seconds used when a call gives none (None = no expiry)
        fire_and_forget: Default execution mode for mutating operations
        debug: Emit a debug log entry for every operation
        scan_count: SCAN COUNT hint
    """

    model_config = {"frozen": True}

    key_prefix: str = ""
    default_ttl: int | None = None
    fire_and_forget: bool = False
    debug: bool = False
    scan_count: int = Field(default=DEFAULT_SCAN_COUNT, gt=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheFacadeConfig":
        cache = settings.cache
        return cls(
            key_prefix=cache.CACHE_KEY_PREFIX,
            default_ttl=cache.CACHE_DEFAULT_TTL,
            fire_and_forget=cache.CACHE_FIRE_AND_FORGET,
            debug=cache.CACHE_DEBUG,
            scan_count=cache.CACHE_SCAN_COUNT,
        )


class RedisCacheService:
    """
    Cache facade over a remote key-value store.

    Usage:
        async with RedisCacheService() as cache:
            await cache.set("user:1", {"name": "Ada"}, ttl=300)
            user = await cache.get("user:1")

            profile = await cache.get_or_set("profile:1", load_profile, ttl=60)

            await cache.del_pattern("user:*")
            await cache.del_key("user:2", CacheOperationOptions(fire_and_forget=True))

            stats = await cache.get_stats()

    get_or_set takes no lock: two concurrent misses on the same key both run
    the compute function and both write. The last write wins.
    """

    def __init__(
        self,
        config: CacheFacadeConfig | None = None,
        store: CacheStore | None = None,
        serializer: ValueSerializer | None = None,
    ):
        """
        Initialize the cache service.

        Args:
            config: Facade configuration (default: from environment settings)
            store: Transport (default: RedisClient built from settings)
            serializer: Value codec (default: JsonSerializer)

        Raises:
            ConfigurationError: If an injected store is namespaced under a
                different prefix than config.key_prefix
        """
        settings = get_settings() if config is None or store is None else None

        if config is None:
            config = CacheFacadeConfig.from_settings(settings)
        if store is None:
            store = RedisClient(settings.redis, key_prefix=config.key_prefix)
        elif store.key_prefix != config.key_prefix:
            raise ConfigurationError(
                message="Store key prefix does not match facade config",
                details={"config_prefix": config.key_prefix, "store_prefix": store.key_prefix},
            )

        self._config = config
        self._store = store
        self._serializer = serializer if serializer is not None else JsonSerializer()
        self._dispatcher = ExecutionDispatcher()
        self._scanner = PatternScanner(
            self._store, PrefixCodec(self._store.key_prefix), self._config.scan_count
        )
        self._stats = StatsReporter(self._store, debug=self._config.debug)
        self._initialized = False

    @property
    def config(self) -> CacheFacadeConfig:
        return self._config

    @property
    def pending_operations(self) -> int:
        """Fire-and-forget operations still in flight."""
        return self._dispatcher.pending

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Connect the transport.

        Raises:
            CacheConnectionError: If the store is unreachable
        """
        if self._initialized:
            return

        await self._store.connect()
        self._initialized = True

        logger.info(
            "Cache service initialized",
            key_prefix=self._store.key_prefix,
            default_ttl=self._config.default_ttl,
            fire_and_forget=self._config.fire_and_forget,
        )

    async def shutdown(self) -> None:
        """
        Wait for detached operations, then release the connection.

        Detached operations are drained even if initialize() was never
        called. The connection is released at most once.
        """
        await self._dispatcher.drain()

        if not self._initialized:
            return

        await self._store.disconnect()
        self._initialized = False

        logger.info("Cache service shutdown")

    async def __aenter__(self) -> "RedisCacheService":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _trace(self, stage: Stage, message: str, **fields: Any) -> None:
        if self._config.debug:
            log_stage(logger, stage, message, level="debug", **fields)

    def _mode(self, options: CacheOperationOptions | None) -> ExecutionMode:
        return resolve_execution_mode(override_from(options), self._config.fire_and_forget)

    def _decode(self, key: str, raw: str) -> Any:
        try:
            return self._serializer.decode(raw)
        except CacheError as e:
            logger.error("Error decoding cached value", stage=Stage.CACHE_GET.value, key=key)
            e.with_context(key=key)
            raise

    # -------------------------------------------------------------------------
    # Read / write
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """
        Get a value.

        Returns:
            Decoded value, or None if the key does not exist

        Raises:
            CacheKeyError: If the store command fails
            CacheDecodeError: If the stored payload cannot be decoded
        """
        raw = await self._store.get(key)

        if raw is None:
            self._trace(Stage.CACHE_GET, "GET - MISS", key=key)
            return None

        self._trace(Stage.CACHE_GET, "GET - HIT", key=key)
        return self._decode(key, raw)

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
        options: CacheOperationOptions | None = None,
    ) -> None:
        """
        Store a value.

        Args:
            key: Cache key (bare, without prefix)
            value: Any JSON-serializable value
            ttl: TTL in seconds; falls back to the facade default. 0 means no expiry
            options: Per-call execution mode override

        Raises:
            CacheEncodeError: If the value cannot be serialized (both modes)
            CacheKeyError: If the SET fails (blocking mode only)
        """
        payload = self._serializer.encode(value)
        ttl_to_use = ttl if ttl is not None else self._config.default_ttl
        mode = self._mode(options)

        self._trace(Stage.CACHE_SET, "SET", key=key, ttl=ttl_to_use or "none", mode=mode.value)

        await self._dispatcher.run(
            self._store.set(key, payload, ttl_to_use or None),
            mode,
            f"Error setting key {key}",
            key=key,
        )

    async def get_or_set(
        self,
        key: str,
        compute: Callable[[], T | Awaitable[T]],
        ttl: int | None = None,
    ) -> T:
        """
        Cache-aside: return the cached value, or compute, cache and return it.

        Args:
            key: Cache key
            compute: Sync or async callable producing the value on a miss
            ttl: TTL in seconds for the computed value

        Returns:
            Cached or computed value

        Raises:
            CacheComputeError: If compute fails (nothing is cached)
            CacheKeyError: If a store command fails
            CacheDecodeError: If the cached payload cannot be decoded
        """
        raw = await self._store.get(key)

        if raw is not None:
            self._trace(Stage.CACHE_GET_OR_SET, "GET_OR_SET - HIT", key=key)
            return self._decode(key, raw)

        self._trace(Stage.CACHE_GET_OR_SET, "GET_OR_SET - computing value", key=key)

        try:
            result = compute()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(
                "Error computing value in get_or_set",
                stage=Stage.CACHE_GET_OR_SET.value,
                key=key,
                error=str(e),
            )
            raise CacheComputeError.from_exception(
                e, message=f"Compute failed for key {key}", key=key
            ) from e

        await self.set(key, result, ttl)
        return result

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    async def del_key(self, key: str, options: CacheOperationOptions | None = None) -> int:
        """
        Delete one key.

        Returns:
            1 if removed, 0 if absent; always 0 in fire-and-forget mode
        """
        mode = self._mode(options)
        self._trace(Stage.CACHE_DEL, "DEL", key=key, mode=mode.value)

        deleted = await self._dispatcher.run(
            self._store.delete(key),
            mode,
            f"Error deleting key {key}",
            detached_result=0,
            key=key,
        )

        self._trace(Stage.CACHE_DEL, "DEL - done", key=key, deleted=deleted)
        return deleted

    async def del_keys(
        self, keys: Iterable[str], options: CacheOperationOptions | None = None
    ) -> int:
        """
        Delete several keys in one DEL.

        Returns:
            Number of keys removed; 0 for empty input (no store call) and in
            fire-and-forget mode
        """
        keys = list(keys)
        if not keys:
            return 0

        mode = self._mode(options)
        self._trace(Stage.CACHE_DEL, "DEL keys", keys=keys, count=len(keys), mode=mode.value)

        deleted = await self._dispatcher.run(
            self._store.delete(*keys),
            mode,
            "Error deleting keys",
            detached_result=0,
            count=len(keys),
        )

        self._trace(Stage.CACHE_DEL, "DEL keys - done", deleted=deleted)
        return deleted

    async def del_pattern(
        self, pattern: str, options: CacheOperationOptions | None = None
    ) -> int:
        """
        Delete every key matching a glob pattern (e.g. "user:*").

        The scan always runs to completion before the DEL is issued; only the
        DEL itself is detached in fire-and-forget mode.

        Returns:
            Number of keys removed; 0 when nothing matched or in
            fire-and-forget mode

        Raises:
            CacheKeyError: If a SCAN round fails (nothing is deleted) or the
                DEL fails in blocking mode
        """
        try:
            keys = await self._scanner.scan(pattern)
        except CacheError:
            logger.error("Error scanning pattern", stage=Stage.CACHE_DEL_PATTERN.value, pattern=pattern)
            raise

        if not keys:
            self._trace(Stage.CACHE_DEL_PATTERN, "DEL pattern - no keys found", pattern=pattern)
            return 0

        mode = self._mode(options)
        deleted = await self._dispatcher.run(
            self._store.delete(*sorted(keys)),
            mode,
            f"Error deleting pattern {pattern}",
            detached_result=0,
            pattern=pattern,
        )

        self._trace(
            Stage.CACHE_DEL_PATTERN,
            "DEL pattern",
            pattern=pattern,
            matched=len(keys),
            deleted=deleted,
            mode=mode.value,
        )
        return deleted

    async def del_patterns(
        self, patterns: Iterable[str], options: CacheOperationOptions | None = None
    ) -> int:
        """
        Delete keys for several patterns, one pattern at a time.

        Returns:
            Sum of keys removed across patterns; 0 for empty input
        """
        patterns = list(patterns)
        if not patterns:
            return 0

        self._trace(Stage.CACHE_DEL_PATTERN, "DEL patterns", patterns=patterns)

        total_deleted = 0
        for pattern in patterns:
            total_deleted += await self.del_pattern(pattern, options)

        self._trace(Stage.CACHE_DEL_PATTERN, "DEL patterns - done", deleted=total_deleted)
        return total_deleted

    async def get_keys_by_pattern(self, pattern: str) -> list[str]:
        """
        List keys matching a glob pattern, without the namespace prefix.

        Returns:
            Sorted list of bare keys
        """
        keys = sorted(await self._scanner.scan(pattern))
        self._trace(Stage.CACHE_SCAN, "GET keys by pattern", pattern=pattern, found=len(keys))
        return keys

    async def reset(self, options: CacheOperationOptions | None = None) -> None:
        """
        FLUSHDB: remove every key in the logical database.

        Warning:
            Not scoped to this facade's key prefix. Other applications sharing
            the same Redis database lose their keys too.
        """
        mode = self._mode(options)
        self._trace(Stage.CACHE_RESET, "RESET - clearing all cache", mode=mode.value)

        await self._dispatcher.run(self._store.flushdb(), mode, "Error resetting cache")

        self._trace(Stage.CACHE_RESET, "RESET - cache cleared")

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    async def get_stats(self) -> StatsSnapshot:
        """Key count and memory usage; never raises."""
        return await self._stats.get_stats()

    def get_client(self) -> redis.Redis | None:
        """
        Underlying redis.asyncio client for advanced operations.

        Returns None when the service runs on a non-Redis store or before
        initialize(). Commands sent through it bypass the key prefix.
        """
        if isinstance(self._store, RedisClient):
            return self._store.get_client()
        return None


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_cache_service: RedisCacheService | None = None


def get_cache_service() -> RedisCacheService:
    """
    Get the global cache service instance (singleton).

    Returns:
        RedisCacheService: Global cache service, configured from settings
    """
    global _cache_service

    if _cache_service is None:
        _cache_service = RedisCacheService()

    return _cache_service


async def init_cache() -> RedisCacheService:
    """
    Initialize and connect the global cache service.

    Returns:
        RedisCacheService: Connected cache service
    """
    service = get_cache_service()
    await service.initialize()
    return service


async def close_cache() -> None:
    """Shutdown the global cache service."""
    global _cache_service

    if _cache_service:
        await _cache_service.shutdown()
        _cache_service = None
