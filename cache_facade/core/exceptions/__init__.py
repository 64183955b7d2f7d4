"""
Exception Module

Structured exception hierarchy for the cache facade.

Module Structure:
-----------------
- **base.py**: CacheFacadeError base class + ConfigurationError
- **cache.py**: Cache and transport exceptions

Usage:
------
```python
from cache_facade.core.exceptions import CacheKeyError, CacheDecodeError
```
"""

from cache_facade.core.exceptions.base import CacheFacadeError, ConfigurationError
from cache_facade.core.exceptions.cache import (
    CacheComputeError,
    CacheConnectionError,
    CacheDecodeError,
    CacheEncodeError,
    CacheError,
    CacheKeyError,
    CacheSerializationError,
)

__all__ = [
    # Base
    "CacheFacadeError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "CacheSerializationError",
    "CacheEncodeError",
    "CacheDecodeError",
    "CacheComputeError",
]
