"""
Core Interfaces Module

Components:
-----------
- **cache.py**: CacheStore protocol (the store primitives the facade
  consumes) and InMemoryStore

Usage:
------
```python
from cache_facade.core.interfaces import CacheStore

def build(store: CacheStore):
    # Works with RedisClient or InMemoryStore
    ...
```
"""

from cache_facade.core.interfaces.cache import CacheStore, InMemoryStore

__all__ = [
    "CacheStore",
    "InMemoryStore",
]
