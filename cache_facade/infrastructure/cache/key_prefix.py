"""
Key namespace prefix handling.

Every physical key in the store carries the configured prefix; callers of the
facade only ever see bare keys.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PrefixCodec:
    """
    Adds and strips the key namespace prefix.

    Usage:
        codec = PrefixCodec("app:")
        codec.add_prefix("user:*")      # "app:user:*"
        codec.strip_prefix("app:user:1")  # "user:1"
    """

    prefix: str = ""

    def add_prefix(self, pattern: str) -> str:
        """Prepend the prefix to a key or glob pattern."""
        return f"{self.prefix}{pattern}"

    def strip_prefix(self, key: str) -> str:
        """
        Remove exactly one leading occurrence of the prefix.

        Anchored at the start: a key that only contains the prefix somewhere
        else (e.g. "user:app:1" with prefix "app:") is returned unchanged.
        """
        if self.prefix and key.startswith(self.prefix):
            return key[len(self.prefix):]
        return key
