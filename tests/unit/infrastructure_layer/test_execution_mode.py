"""
Unit Tests for Execution Mode Resolution and Dispatch
"""

import asyncio

import pytest
from structlog.testing import capture_logs

from cache_facade.core.exceptions import CacheKeyError
from cache_facade.infrastructure.cache.execution_mode import (
    CacheOperationOptions,
    ExecutionDispatcher,
    ExecutionMode,
    override_from,
    resolve_execution_mode,
)


@pytest.mark.unit
class TestResolveExecutionMode:
    """Test per-call override > facade default > BLOCKING."""

    @pytest.mark.parametrize(
        "call_override, facade_default, expected",
        [
            (None, False, ExecutionMode.BLOCKING),
            (None, True, ExecutionMode.FIRE_AND_FORGET),
            (True, False, ExecutionMode.FIRE_AND_FORGET),
            (False, True, ExecutionMode.BLOCKING),
            (True, True, ExecutionMode.FIRE_AND_FORGET),
            (False, False, ExecutionMode.BLOCKING),
        ],
    )
    def test_resolution(self, call_override, facade_default, expected):
        assert resolve_execution_mode(call_override, facade_default) is expected

    def test_override_from_options(self):
        """Test override extraction distinguishes unset from False."""
        assert override_from(None) is None
        assert override_from(CacheOperationOptions()) is None
        assert override_from(CacheOperationOptions(fire_and_forget=False)) is False
        assert override_from(CacheOperationOptions(fire_and_forget=True)) is True


@pytest.mark.unit
class TestExecutionDispatcher:
    """Test blocking and detached execution."""

    async def test_blocking_returns_result(self):
        """Test BLOCKING awaits and returns the command result."""
        dispatcher = ExecutionDispatcher()

        async def command():
            return 3

        assert await dispatcher.run(command(), ExecutionMode.BLOCKING, "err") == 3
        assert dispatcher.pending == 0

    async def test_blocking_propagates_errors(self):
        """Test BLOCKING raises the command's error."""
        dispatcher = ExecutionDispatcher()

        async def command():
            raise CacheKeyError("DEL failed")

        with pytest.raises(CacheKeyError):
            await dispatcher.run(command(), ExecutionMode.BLOCKING, "err")

    async def test_fire_and_forget_returns_immediately(self):
        """Test detached commands return the synthetic result before completing."""
        dispatcher = ExecutionDispatcher()
        release = asyncio.Event()
        done = []

        async def command():
            await release.wait()
            done.append(True)
            return 5

        result = await dispatcher.run(
            command(), ExecutionMode.FIRE_AND_FORGET, "err", detached_result=0
        )

        assert result == 0
        assert dispatcher.pending == 1
        assert done == []

        release.set()
        await dispatcher.drain()

        assert done == [True]
        assert dispatcher.pending == 0

    async def test_detached_failure_is_logged_not_raised(self):
        """Test detached failures reach the log with context."""
        dispatcher = ExecutionDispatcher()

        async def command():
            raise CacheKeyError("connection lost")

        with capture_logs() as logs:
            result = await dispatcher.run(
                command(), ExecutionMode.FIRE_AND_FORGET, "Error deleting key a", key="a"
            )
            await dispatcher.drain()

        assert result is None
        errors = [entry for entry in logs if entry["log_level"] == "error"]
        assert len(errors) == 1
        assert errors[0]["event"] == "Error deleting key a"
        assert errors[0]["stage"] == "CACHE.DETACHED"
        assert errors[0]["error"] == "connection lost"
        assert errors[0]["error_type"] == "CacheKeyError"
        assert errors[0]["key"] == "a"

    async def test_detached_cancellation_is_logged(self):
        """Test cancelled detached commands log a warning."""
        dispatcher = ExecutionDispatcher()

        async def command():
            await asyncio.sleep(10)

        with capture_logs() as logs:
            await dispatcher.run(command(), ExecutionMode.FIRE_AND_FORGET, "err")
            task = next(iter(dispatcher._tasks))
            task.cancel()
            await dispatcher.drain()

        assert [entry["log_level"] for entry in logs] == ["warning"]
        assert dispatcher.pending == 0

    async def test_drain_without_tasks(self):
        """Test drain is a no-op when nothing is pending."""
        await ExecutionDispatcher().drain()
