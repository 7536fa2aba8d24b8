"""Shared test fixtures for the agent test suite.

Provides settings isolation and a Redis mock so shared-library tests can
run without Docker infrastructure.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from shared.config import get_settings


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    """Every test starts from default settings; ``get_settings`` is cached."""
    monkeypatch.delenv("SERVICE_AUTH_TOKEN", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Redis mock
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_redis():
    """Mock async Redis client with common operations."""
    redis = AsyncMock()
    redis.ping = AsyncMock(return_value=True)
    redis.publish = AsyncMock(return_value=1)
    redis.aclose = AsyncMock()
    return redis
