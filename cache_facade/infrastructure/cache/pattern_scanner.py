"""
Pattern-based key enumeration using SCAN.

Why SCAN instead of KEYS?
- KEYS walks the whole key space in one blocking command and can stall the
  server for seconds on a large database
- SCAN is cursor-based: a bounded batch per round, other clients are served
  between rounds

Termination rule:
    The scan is complete only when the store hands back the start cursor (0)
    again. A round may legitimately return an empty batch while matches
    remain further along, so an empty batch never ends the scan.
"""

from collections.abc import AsyncIterator

from cache_facade.core.config.constants import DEFAULT_SCAN_COUNT, SCAN_CURSOR_START
from cache_facade.core.interfaces.cache import CacheStore
from cache_facade.infrastructure.cache.key_prefix import PrefixCodec


class PatternScanner:
    """
    Exhaustive, non-blocking enumeration of keys matching a glob pattern.

    Returned keys are prefix-free; the prefix is added to the MATCH pattern
    and stripped from every key the store returns.

    Usage:
        scanner = PatternScanner(store, PrefixCodec("app:"))
        keys = await scanner.scan("user:*")   # {"user:1", "user:2"}
    """

    def __init__(
        self,
        store: CacheStore,
        codec: PrefixCodec,
        batch_size: int = DEFAULT_SCAN_COUNT,
    ):
        self._store = store
        self._codec = codec
        self._batch_size = batch_size

    async def iter_batches(self, pattern: str) -> AsyncIterator[list[str]]:
        """
        Yield one batch of bare keys per SCAN round.

        Any store failure propagates (CacheKeyError) and ends the iteration.
        Batches may be empty and may repeat keys seen in earlier rounds.
        """
        full_pattern = self._codec.add_prefix(pattern)
        cursor = SCAN_CURSOR_START

        while True:
            cursor, keys = await self._store.scan(cursor, full_pattern, self._batch_size)
            yield [self._codec.strip_prefix(key) for key in keys]
            if int(cursor) == SCAN_CURSOR_START:
                break

    async def scan(self, pattern: str) -> set[str]:
        """
        Collect every key matching the pattern.

        Returns:
            Set of bare keys (deduplicated)

        Raises:
            CacheKeyError: If any SCAN round fails; partial results are dropped
        """
        found: set[str] = set()
        async for batch in self.iter_batches(pattern):
            found.update(batch)
        return found
