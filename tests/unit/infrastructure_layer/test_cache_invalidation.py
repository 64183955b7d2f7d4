"""
Unit Tests for Pattern Invalidation

Tests del_pattern, del_patterns and get_keys_by_pattern.
"""

import pytest
from structlog.testing import capture_logs

from cache_facade.core.exceptions import CacheKeyError
from cache_facade.infrastructure.cache.execution_mode import CacheOperationOptions
from tests.test_fixtures.cache_factory import CacheTestFactory

USERS_AND_SESSIONS = {
    "app:user:1": "1",
    "app:user:2": "2",
    "app:user:admin": "3",
    "app:session:9": "4",
    "other:user:5": "5",
}


@pytest.mark.unit
class TestGetKeysByPattern:
    """Test key listing."""

    async def test_keys_are_prefix_free_and_sorted(self, make_cache_service):
        store = CacheTestFactory.store_with_data(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.get_keys_by_pattern("user:*") == ["user:1", "user:2", "user:admin"]

    async def test_no_match(self, make_cache_service):
        store = CacheTestFactory.store_with_data(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.get_keys_by_pattern("order:*") == []

    async def test_matches_across_many_rounds(self, make_cache_service):
        """Test a small scan_count still returns every match."""
        data = {f"app:user:{i:04d}": "1" for i in range(1000)}
        data.update({f"app:noise:{i:04d}": "1" for i in range(500)})
        store = CacheTestFactory.store_with_data(data, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:", scan_count=7)

        keys = await cache.get_keys_by_pattern("user:*")

        assert len(keys) == 1000
        assert keys[0] == "user:0000"

    async def test_prefix_inside_key_is_kept(self, make_cache_service):
        """Test only the leading prefix is stripped from returned keys."""
        store = CacheTestFactory.store_with_data({"app:user:app:1": "1"}, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.get_keys_by_pattern("user:*") == ["user:app:1"]


@pytest.mark.unit
class TestDelPattern:
    """Test single-pattern invalidation."""

    async def test_user_pattern_scenario(self, make_cache_service):
        """Test two user keys go and the session key stays."""
        cache = await make_cache_service(key_prefix="app:")
        await cache.set("user:1", {"id": 1})
        await cache.set("user:2", {"id": 2})
        await cache.set("session:9", {"sid": 9})

        assert await cache.del_pattern("user:*") == 2
        assert await cache.get_keys_by_pattern("*") == ["session:9"]

    async def test_idempotent(self, make_cache_service):
        """Test a repeated delete of the same pattern removes nothing more."""
        store = CacheTestFactory.store_with_data(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.del_pattern("user:*") == 3
        assert await cache.del_pattern("user:*") == 0

    async def test_deletes_only_matching_keys(self, make_cache_service):
        store = CacheTestFactory.store_with_data(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.del_pattern("user:*") == 3
        assert sorted(store.data) == ["app:session:9", "other:user:5"]

    async def test_no_match_issues_no_delete(self, make_cache_service):
        store = CacheTestFactory.spy_store(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.del_pattern("order:*") == 0
        store.delete.assert_not_awaited()

    async def test_single_delete_with_bare_keys(self, make_cache_service):
        """Test matches are deleted in one DEL using bare keys."""
        store = CacheTestFactory.spy_store(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        await cache.del_pattern("user:*")

        store.delete.assert_awaited_once_with("user:1", "user:2", "user:admin")

    async def test_deletes_every_match_across_rounds(self, make_cache_service):
        data = {f"app:user:{i:04d}": "1" for i in range(1000)}
        store = CacheTestFactory.store_with_data(data, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:", scan_count=100)

        assert await cache.del_pattern("user:*") == 1000
        assert store.data == {}

    async def test_empty_intermediate_batches(self, make_cache_service):
        """Test empty SCAN rounds before the last do not stop the scan."""
        store = CacheTestFactory.scripted_scan_store(
            [(10, []), (20, []), (0, ["app:user:1"])], key_prefix="app:"
        )
        store.data.update({"app:user:1": "1"})
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.del_pattern("user:*") == 1
        assert store.scan.await_count == 3

    async def test_scan_failure_deletes_nothing(self, make_cache_service):
        """Test a failed scan round aborts before any DEL."""
        store = CacheTestFactory.scripted_scan_store(
            [(10, ["app:user:1"]), CacheKeyError("Redis SCAN failed")], key_prefix="app:"
        )
        store.data.update({"app:user:1": "1"})
        cache = await make_cache_service(store=store, key_prefix="app:")

        with capture_logs() as logs:
            with pytest.raises(CacheKeyError):
                await cache.del_pattern("user:*")

        assert store.data == {"app:user:1": "1"}
        assert logs[0]["event"] == "Error scanning pattern"
        assert logs[0]["pattern"] == "user:*"

    async def test_scan_failure_raises_in_fire_and_forget(self, make_cache_service):
        """Test the scan is never detached, so its failure reaches the caller."""
        store = CacheTestFactory.failing_store(fail_on=("scan",), key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:", fire_and_forget=True)

        with pytest.raises(CacheKeyError):
            await cache.del_pattern("user:*")

    async def test_fire_and_forget_returns_zero(self, make_cache_service):
        store = CacheTestFactory.store_with_data(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.del_pattern("user:*", CacheOperationOptions(fire_and_forget=True)) == 0

        await cache.shutdown()
        assert sorted(store.data) == ["app:session:9", "other:user:5"]

    async def test_blocking_override(self, make_cache_service):
        """Test an explicit blocking option wins over a fire-and-forget default."""
        store = CacheTestFactory.store_with_data(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:", fire_and_forget=True)

        assert await cache.del_pattern("user:*", CacheOperationOptions(fire_and_forget=False)) == 3

    async def test_blocking_delete_failure_propagates(self, make_cache_service):
        store = CacheTestFactory.failing_store(
            fail_on=("delete",), initial_data=USERS_AND_SESSIONS, key_prefix="app:"
        )
        cache = await make_cache_service(store=store, key_prefix="app:")

        with pytest.raises(CacheKeyError):
            await cache.del_pattern("user:*")


@pytest.mark.unit
class TestDelPatterns:
    """Test multi-pattern invalidation."""

    async def test_sums_counts(self, make_cache_service):
        store = CacheTestFactory.store_with_data(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.del_patterns(["user:*", "session:*", "order:*"]) == 4
        assert store.data == {"other:user:5": "5"}

    async def test_overlapping_patterns_count_once(self, make_cache_service):
        """Test patterns run serially so a key removed earlier is not recounted."""
        store = CacheTestFactory.store_with_data(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.del_patterns(["user:*", "user:1"]) == 3

    async def test_empty_input(self, make_cache_service):
        store = CacheTestFactory.spy_store(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:")

        assert await cache.del_patterns([]) == 0
        store.scan.assert_not_awaited()
        store.delete.assert_not_awaited()

    async def test_fire_and_forget(self, make_cache_service):
        store = CacheTestFactory.store_with_data(USERS_AND_SESSIONS, key_prefix="app:")
        cache = await make_cache_service(store=store, key_prefix="app:", fire_and_forget=True)

        assert await cache.del_patterns(["user:*", "session:*"]) == 0

        await cache.shutdown()
        assert store.data == {"other:user:5": "5"}

    async def test_failure_stops_remaining_patterns(self, make_cache_service):
        """Test a failing pattern propagates; earlier patterns stay deleted."""
        store = CacheTestFactory.scripted_scan_store(
            [(0, ["app:session:9"]), CacheKeyError("Redis SCAN failed")], key_prefix="app:"
        )
        store.data.update(USERS_AND_SESSIONS)
        cache = await make_cache_service(store=store, key_prefix="app:")

        with pytest.raises(CacheKeyError):
            await cache.del_patterns(["session:*", "user:*", "order:*"])

        assert "app:session:9" not in store.data
        assert "app:user:1" in store.data
        assert store.scan.await_count == 2
