"""
Cache statistics.

Stats are advisory: failures are reported inside the snapshot instead of
being raised.
"""

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from cache_facade.core.config.constants import (
    INFO_FIELD_FRAGMENTATION,
    INFO_FIELD_PEAK_MEMORY,
    INFO_FIELD_USED_MEMORY,
    INFO_SECTION_MEMORY,
    NOT_CONNECTED_ERROR,
    Stage,
)
from cache_facade.core.interfaces.cache import CacheStore
from cache_facade.core.logging.logger import get_logger

logger = get_logger(__name__)


class StatsSnapshot(BaseModel):
    """Health/usage snapshot, computed fresh on every call."""

    model_config = {"frozen": True}

    connected: bool
    key_count: int = 0
    memory_used: str | None = None
    memory_peak: str | None = None
    memory_fragmentation_ratio: str | None = None
    error: str | None = None


def parse_info_field(info: Mapping[str, Any] | str, field: str) -> str | None:
    """
    Extract one field from INFO output.

    Accepts either the raw "key:value" text blob or the mapping redis-py
    builds from it. Missing fields yield None.
    """
    if isinstance(info, str):
        match = re.search(rf"^{re.escape(field)}:(.+)$", info, re.MULTILINE)
        return match.group(1).strip() if match else None

    value = info.get(field)
    return None if value is None else str(value)


class StatsReporter:
    """
    Builds StatsSnapshot from DBSIZE and INFO memory.

    Usage:
        reporter = StatsReporter(store)
        snapshot = await reporter.get_stats()
    """

    def __init__(self, store: CacheStore, debug: bool = False):
        self._store = store
        self._debug = debug

    async def get_stats(self) -> StatsSnapshot:
        """
        Query the store for key count and memory usage.

        Never raises: a disconnected transport or any command failure yields
        connected=False with the reason in ``error``.
        """
        if not self._store.is_connected():
            return StatsSnapshot(connected=False, key_count=0, error=NOT_CONNECTED_ERROR)

        try:
            key_count = await self._store.dbsize()
            memory_info = await self._store.info(INFO_SECTION_MEMORY)

            snapshot = StatsSnapshot(
                connected=True,
                key_count=key_count,
                memory_used=parse_info_field(memory_info, INFO_FIELD_USED_MEMORY),
                memory_peak=parse_info_field(memory_info, INFO_FIELD_PEAK_MEMORY),
                memory_fragmentation_ratio=parse_info_field(memory_info, INFO_FIELD_FRAGMENTATION),
            )
        except Exception as e:
            logger.error("Error getting cache stats", stage=Stage.CACHE_STATS.value, error=str(e))
            return StatsSnapshot(connected=False, key_count=0, error=str(e) or e.__class__.__name__)

        if self._debug:
            logger.debug(
                "STATS",
                stage=Stage.CACHE_STATS.value,
                key_count=snapshot.key_count,
                memory_used=snapshot.memory_used,
            )
        return snapshot
