"""
Base Exception Class

This module contains ONLY the base exception class that all other exceptions inherit from.
All specialized exceptions are in their respective themed modules.
"""

from typing import Any


class CacheFacadeError(Exception):
    """
    Base exception for all cache facade errors.

    All custom exceptions inherit from this class to enable:
    - Consistent error handling
    - Structured error logging
    - Rich context for debugging

    Attributes:
        message: Error message
        details: Additional error details (dict)

    Example:
        raise CacheKeyError(
            "Redis GET failed",
            details={"key": "user:1", "command": "GET"}
        )
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = (details or {}).copy()  # Copy to prevent external modification
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging/API responses.

        Returns:
            Dict with error_type, message and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def with_context(self, **context) -> "CacheFacadeError":
        """
        Add additional context to the error details.

        Args:
            **context: Key-value pairs to add to details

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        """
        Return detailed string representation for debugging.

        Example:
            >>> error = CacheKeyError("GET failed", details={"key": "a"})
            >>> repr(error)
            "CacheKeyError(message='GET failed', details={'key': 'a'})"
        """
        details_str = f", details={self.details}" if self.details else ""
        return f"{self.__class__.__name__}(message='{self.message}'{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        **details
    ) -> "CacheFacadeError":
        """
        Create an error from another exception.

        Useful for wrapping third-party exceptions with additional context.

        Args:
            exc: Original exception to wrap
            message: Custom message (defaults to original exception message)
            **details: Additional context to include

        Returns:
            New instance carrying the original error type and message

        Example:
            >>> try:
            ...     await redis.get("key")
            ... except RedisError as e:
            ...     raise CacheKeyError.from_exception(e, key="key") from e
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, details=error_details)


class ConfigurationError(CacheFacadeError):
    """Raised when configuration is invalid or missing."""
    pass
