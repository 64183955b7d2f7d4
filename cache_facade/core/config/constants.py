"""
System Constants and Enumerations

Single source of truth for the magic numbers and log stage labels used by the
cache facade.
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Stage labels attached to every log entry as ``stage=...``.

    Format: {LAYER}.{OPERATION}
    """

    # Transport
    REDIS_CONNECT = "REDIS.CONNECT"
    REDIS_DISCONNECT = "REDIS.DISCONNECT"
    REDIS_COMMAND = "REDIS.COMMAND"

    # Facade operations
    CACHE_GET = "CACHE.GET"
    CACHE_SET = "CACHE.SET"
    CACHE_GET_OR_SET = "CACHE.GET_OR_SET"
    CACHE_DEL = "CACHE.DEL"
    CACHE_DEL_PATTERN = "CACHE.DEL_PATTERN"
    CACHE_SCAN = "CACHE.SCAN"
    CACHE_RESET = "CACHE.RESET"
    CACHE_STATS = "CACHE.STATS"
    CACHE_DETACHED = "CACHE.DETACHED"


# ============================================================================
# SCAN protocol
# ============================================================================

# Cursor value that both starts and (when returned again) ends a SCAN
SCAN_CURSOR_START = 0

# COUNT hint sent with every SCAN round
DEFAULT_SCAN_COUNT = 100


# ============================================================================
# INFO parsing
# ============================================================================

INFO_SECTION_MEMORY = "memory"
INFO_FIELD_USED_MEMORY = "used_memory_human"
INFO_FIELD_PEAK_MEMORY = "used_memory_peak_human"
INFO_FIELD_FRAGMENTATION = "mem_fragmentation_ratio"

NOT_CONNECTED_ERROR = "Redis not connected"
