"""
Cache Module

Provides the Redis cache facade: get/set, cache-aside, key and pattern
invalidation, and store statistics.
"""

from .cache_service import (
    CacheFacadeConfig,
    RedisCacheService,
    close_cache,
    get_cache_service,
    init_cache,
)
from .execution_mode import CacheOperationOptions, ExecutionMode, resolve_execution_mode
from .key_prefix import PrefixCodec
from .pattern_scanner import PatternScanner
from .redis_client import RedisClient
from .serializers import JsonSerializer, ValueSerializer
from .stats_reporter import StatsReporter, StatsSnapshot, parse_info_field

__all__ = [
    "RedisCacheService",
    "CacheFacadeConfig",
    "get_cache_service",
    "init_cache",
    "close_cache",
    "CacheOperationOptions",
    "ExecutionMode",
    "resolve_execution_mode",
    "PrefixCodec",
    "PatternScanner",
    "RedisClient",
    "JsonSerializer",
    "ValueSerializer",
    "StatsReporter",
    "StatsSnapshot",
    "parse_info_field",
]
