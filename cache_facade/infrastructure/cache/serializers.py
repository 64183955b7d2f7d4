"""
Value serialization for cache entries.

The facade only relies on the encode/decode contract below; JSON via orjson is
the shipped implementation.
"""

from typing import Any, Protocol, runtime_checkable

import orjson

from cache_facade.core.exceptions import CacheDecodeError, CacheEncodeError


@runtime_checkable
class ValueSerializer(Protocol):
    """Encode values for storage and decode stored payloads."""

    def encode(self, value: Any) -> str:
        ...

    def decode(self, raw: str | bytes) -> Any:
        ...


class JsonSerializer:
    """
    JSON serializer backed by orjson.

    - encode: returns UTF-8 text (the Redis client runs with decode_responses)
    - decode: accepts str or bytes
    - Failures raise CacheEncodeError / CacheDecodeError, never return None,
      so a corrupt payload can't be mistaken for a cache miss.
    """

    def encode(self, value: Any) -> str:
        try:
            return orjson.dumps(value).decode("utf-8")
        except orjson.JSONEncodeError as e:
            raise CacheEncodeError.from_exception(
                e, message=f"Value of type {type(value).__name__} is not serializable"
            ) from e

    def decode(self, raw: str | bytes) -> Any:
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise CacheDecodeError.from_exception(e, message="Stored payload is not valid JSON") from e
