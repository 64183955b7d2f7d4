"""
Execution mode selection and dispatch.

Every mutating facade operation runs in one of two modes:

    BLOCKING         caller awaits the store reply; errors propagate
    FIRE_AND_FORGET  command is issued on a background task; the caller gets
                     a synthetic result immediately and failures are only logged

Resolution order per call: explicit per-call option (even False) ->
facade default -> BLOCKING.
"""

import asyncio
from collections.abc import Coroutine
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel

from cache_facade.core.config.constants import Stage
from cache_facade.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ExecutionMode(str, Enum):
    """How a mutating operation is executed."""

    BLOCKING = "blocking"
    FIRE_AND_FORGET = "fire_and_forget"


class CacheOperationOptions(BaseModel):
    """
    Per-call options for mutating operations.

    fire_and_forget: None means "not provided" and falls back to the facade
    default; False forces BLOCKING even when the default is fire-and-forget.
    """

    model_config = {"frozen": True}

    fire_and_forget: bool | None = None


def resolve_execution_mode(call_override: bool | None, facade_default: bool) -> ExecutionMode:
    """
    Resolve the execution mode for one call.

    Args:
        call_override: Per-call flag, None when not provided
        facade_default: Facade-level fire-and-forget default

    Returns:
        ExecutionMode for this call
    """
    fire_and_forget = call_override if call_override is not None else facade_default
    return ExecutionMode.FIRE_AND_FORGET if fire_and_forget else ExecutionMode.BLOCKING


def override_from(options: CacheOperationOptions | None) -> bool | None:
    """Extract the per-call fire-and-forget override from optional options."""
    return options.fire_and_forget if options is not None else None


class ExecutionDispatcher:
    """
    Runs store commands according to their resolved ExecutionMode.

    Detached (fire-and-forget) commands are tracked until they finish so
    they are not garbage-collected mid-flight and can be drained at shutdown.
    Their outcome is only consumed by the error-logging callback.
    """

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of detached commands still in flight."""
        return len(self._tasks)

    async def run(
        self,
        operation: Coroutine[Any, Any, T],
        mode: ExecutionMode,
        description: str,
        detached_result: Any = None,
        **log_context: Any,
    ) -> T | Any:
        """
        Execute a store command in the given mode.

        Args:
            operation: Un-awaited coroutine issuing the command
            mode: Resolved execution mode
            description: Error message logged if a detached command fails
            detached_result: Value returned immediately in FIRE_AND_FORGET mode
            **log_context: Extra fields for the failure log entry

        Returns:
            The command result (BLOCKING) or detached_result (FIRE_AND_FORGET)
        """
        if mode is ExecutionMode.BLOCKING:
            return await operation

        task = asyncio.create_task(operation)
        self._tasks.add(task)
        task.add_done_callback(
            lambda t: self._on_detached_done(t, description, log_context)
        )
        return detached_result

    def _on_detached_done(
        self, task: asyncio.Task, description: str, log_context: dict[str, Any]
    ) -> None:
        self._tasks.discard(task)

        if task.cancelled():
            logger.warning(
                "Detached cache operation cancelled",
                stage=Stage.CACHE_DETACHED.value,
                operation=description,
                **log_context,
            )
            return

        error = task.exception()
        if error is not None:
            logger.error(
                description,
                stage=Stage.CACHE_DETACHED.value,
                error=str(error),
                error_type=error.__class__.__name__,
                **log_context,
            )

    async def drain(self) -> None:
        """
        Wait for every detached command to finish.

        Failures were already logged by the done callback and are not raised.
        """
        if not self._tasks:
            return
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
