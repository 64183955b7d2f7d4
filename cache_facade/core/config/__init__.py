"""
Configuration Module

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Log stage labels, SCAN protocol constants, INFO field names

Usage:
------
```python
from cache_facade.core.config import get_settings

settings = get_settings()
prefix = settings.cache.CACHE_KEY_PREFIX
```

Environment Variables:
---------------------
```bash
REDIS_HOST=localhost
REDIS_PORT=6379
CACHE_KEY_PREFIX=app:
CACHE_DEFAULT_TTL=300
CACHE_FIRE_AND_FORGET=false
CACHE_DEBUG=false
LOG_LEVEL=INFO
```
"""

from cache_facade.core.config.constants import (
    DEFAULT_SCAN_COUNT,
    SCAN_CURSOR_START,
    Stage,
)
from cache_facade.core.config.settings import Settings, get_settings, reload_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "reload_settings",
    # Enums
    "Stage",
    # SCAN
    "SCAN_CURSOR_START",
    "DEFAULT_SCAN_COUNT",
]
