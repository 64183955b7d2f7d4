"""
Redis cache facade.

Usage:
    from cache_facade import RedisCacheService, CacheOperationOptions

    async with RedisCacheService() as cache:
        await cache.set("user:1", {"name": "Ada"})
"""

from cache_facade.core.exceptions import (
    CacheComputeError,
    CacheConnectionError,
    CacheDecodeError,
    CacheEncodeError,
    CacheError,
    CacheFacadeError,
    CacheKeyError,
)
from cache_facade.core.logging import setup_logging
from cache_facade.infrastructure.cache import (
    CacheFacadeConfig,
    CacheOperationOptions,
    ExecutionMode,
    RedisCacheService,
    StatsSnapshot,
    close_cache,
    get_cache_service,
    init_cache,
)

__version__ = "1.0.0"

__all__ = [
    "RedisCacheService",
    "CacheFacadeConfig",
    "CacheOperationOptions",
    "ExecutionMode",
    "StatsSnapshot",
    "get_cache_service",
    "init_cache",
    "close_cache",
    "setup_logging",
    "CacheFacadeError",
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "CacheEncodeError",
    "CacheDecodeError",
    "CacheComputeError",
]
