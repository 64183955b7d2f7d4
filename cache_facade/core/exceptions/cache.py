"""
Cache-Related Exceptions

All exceptions raised by the cache facade and its Redis transport.

Taxonomy:
- CacheKeyError: the store itself failed (transport error)
- CacheDecodeError: a stored payload could not be decoded
- CacheComputeError: the caller-supplied compute function failed
"""

from cache_facade.core.exceptions.base import CacheFacadeError


class CacheError(CacheFacadeError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to cache (Redis).

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Incorrect host/port configuration
    - Authentication failure
    - Client used before initialize()
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when a store command fails.

    Common causes:
    - Connection lost mid-command
    - Operation timeout
    - Wrong value type for the command
    - Memory limit exceeded
    """
    pass


class CacheSerializationError(CacheError):
    """Base exception for value encode/decode failures."""
    pass


class CacheEncodeError(CacheSerializationError):
    """Raised when a value cannot be serialized for storage."""
    pass


class CacheDecodeError(CacheSerializationError):
    """
    Raised when a stored payload cannot be decoded.

    A decode failure is never treated as a cache miss.
    """
    pass


class CacheComputeError(CacheError):
    """
    Raised when the compute function passed to get_or_set fails.

    The original exception is chained as __cause__. Nothing is cached.
    """
    pass
