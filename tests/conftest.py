"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from cache_facade.core.interfaces.cache import InMemoryStore  # noqa: E402
from cache_facade.infrastructure.cache.cache_service import (  # noqa: E402
    CacheFacadeConfig,
    RedisCacheService,
)

# ============================================================================
# Environment-Based Integration Toggles
# ============================================================================


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if real Redis should be used for integration tests."""
    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def memory_store():
    """In-memory store namespaced under "app:"."""
    return InMemoryStore(key_prefix="app:")


# ============================================================================
# Cache Service Fixtures
# ============================================================================


@pytest.fixture
async def cache_service(memory_store):
    """Initialized blocking-mode cache service over memory_store."""
    service = RedisCacheService(config=CacheFacadeConfig(key_prefix="app:"), store=memory_store)
    await service.initialize()
    yield service
    await service.shutdown()


@pytest.fixture
async def make_cache_service():
    """
    Factory for cache services with custom config/store.

    Every service created is shut down after the test.
    """
    created: list[RedisCacheService] = []

    async def _make(store=None, **config) -> RedisCacheService:
        store = store if store is not None else InMemoryStore(key_prefix=config.get("key_prefix", ""))
        service = RedisCacheService(config=CacheFacadeConfig(**config), store=store)
        await service.initialize()
        created.append(service)
        return service

    yield _make

    for service in created:
        await service.shutdown()
