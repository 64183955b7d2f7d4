"""
Cache Store Protocol

This module defines the primitive command set the cache facade consumes from
its transport, enabling dependency injection and testability.

Architectural Decision: Protocol-based abstraction
- RedisClient is the production transport
- InMemoryStore is a dependency-free transport for tests and local development
- The facade never talks to redis-py directly, only to this protocol

Key namespacing:
    Keyed commands (get/set/delete) take *bare* keys; the transport applies
    its key prefix. SCAN is the exception: it takes a *physical* match
    pattern and returns *physical* keys, so the caller strips the prefix.
"""

import fnmatch
import time
from typing import Any, Protocol, runtime_checkable

from cache_facade.core.config.constants import SCAN_CURSOR_START


@runtime_checkable
class CacheStore(Protocol):
    """
    Protocol defining the primitive commands of the remote key-value store.

    Implementations:
    - RedisClient: Production Redis-backed transport
    - InMemoryStore: Testing/development transport
    """

    @property
    def key_prefix(self) -> str:
        """Namespace prefix applied to every keyed command ("" if none)."""
        ...

    async def connect(self) -> None:
        """
        Establish connection to the store.

        Raises:
            CacheConnectionError: If connection fails
        """
        ...

    async def disconnect(self) -> None:
        """Close connection to the store."""
        ...

    def is_connected(self) -> bool:
        """True when the transport is ready to serve commands."""
        ...

    async def get(self, key: str) -> str | None:
        """GET. Returns None when the key is absent."""
        ...

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """SET, with EX when ttl is given."""
        ...

    async def delete(self, *keys: str) -> int:
        """DEL. Returns the number of keys actually removed."""
        ...

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        """
        One SCAN round.

        Args:
            cursor: Cursor returned by the previous round (0 to start)
            match: Physical glob pattern (prefix already applied)
            count: Batch size hint

        Returns:
            (next_cursor, physical_keys). next_cursor == 0 ends the scan.
        """
        ...

    async def flushdb(self) -> bool:
        """FLUSHDB on the whole logical database."""
        ...

    async def dbsize(self) -> int:
        """DBSIZE."""
        ...

    async def info(self, section: str) -> dict[str, Any] | str:
        """INFO <section>, as a parsed mapping or the raw text blob."""
        ...


class InMemoryStore:
    """
    Simple in-memory store implementing the CacheStore protocol.

    Useful for unit tests and development environments. SCAN follows the
    real cursor protocol: the cursor is an offset into a snapshot of the key
    space, each round inspects at most ``count`` keys and may return an empty
    batch before the scan is finished.

    Note: This is NOT distributed. Use only for testing purposes.
    """

    def __init__(self, key_prefix: str = ""):
        self._key_prefix = key_prefix
        self._store: dict[str, str] = {}
        self._expires_at: dict[str, float] = {}
        self._connected = False

    @property
    def key_prefix(self) -> str:
        return self._key_prefix

    @property
    def data(self) -> dict[str, str]:
        """Live physical key space (expired keys purged)."""
        self._purge_expired()
        return self._store

    async def connect(self) -> None:
        """Simulate connection."""
        self._connected = True

    async def disconnect(self) -> None:
        """Simulate disconnection."""
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    def _physical(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def _purge_expired(self) -> None:
        now = time.monotonic()
        for key in [k for k, deadline in self._expires_at.items() if deadline <= now]:
            self._store.pop(key, None)
            self._expires_at.pop(key, None)

    async def get(self, key: str) -> str | None:
        self._purge_expired()
        return self._store.get(self._physical(key))

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        physical = self._physical(key)
        self._store[physical] = value
        if ttl:
            self._expires_at[physical] = time.monotonic() + ttl
        else:
            self._expires_at.pop(physical, None)
        return True

    async def delete(self, *keys: str) -> int:
        self._purge_expired()
        count = 0
        for key in keys:
            physical = self._physical(key)
            if physical in self._store:
                del self._store[physical]
                self._expires_at.pop(physical, None)
                count += 1
        return count

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        self._purge_expired()
        snapshot = sorted(self._store)
        window = snapshot[cursor:cursor + count]
        next_cursor = cursor + count
        if next_cursor >= len(snapshot):
            next_cursor = SCAN_CURSOR_START
        return next_cursor, [k for k in window if fnmatch.fnmatchcase(k, match)]

    async def flushdb(self) -> bool:
        self._store.clear()
        self._expires_at.clear()
        return True

    async def dbsize(self) -> int:
        self._purge_expired()
        return len(self._store)

    async def info(self, section: str) -> dict[str, Any]:
        used = sum(len(k) + len(v) for k, v in self.data.items())
        return {
            "used_memory": used,
            "used_memory_human": f"{used / 1024:.2f}K",
            "used_memory_peak_human": f"{used / 1024:.2f}K",
            "mem_fragmentation_ratio": 1.0,
        }
