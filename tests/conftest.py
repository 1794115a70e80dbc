"""
Shared fixtures for the test suite.

Centralizes reusable test infrastructure so individual test files
don't need to repeat tuning constants or cache override boilerplate.
"""

import random
from typing import Any

import pytest
from fastapi.testclient import TestClient

from api.deps import get_analysis_cache
from api.main import app
from infrastructure.cache import make_key

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

STANDARD: tuple[str, ...] = ("E4", "B3", "G3", "D3", "A2", "E2")
"""Standard guitar tuning, string 0 = highest."""


# ---------------------------------------------------------------------------
# Fake analysis cache
# ---------------------------------------------------------------------------


class FakeAnalysisCache:
    """In-memory stand-in for AnalysisCache — no Redis calls."""

    def __init__(self) -> None:
        self.store: dict[str, Any] = {}

    @property
    def available(self) -> bool:
        return True

    def get(self, operation: str, payload: dict[str, Any]) -> Any | None:
        return self.store.get(make_key(operation, payload))

    def set(self, operation: str, payload: dict[str, Any], response: Any) -> None:
        self.store[make_key(operation, payload)] = response

    def flush(self) -> int:
        deleted = len(self.store)
        self.store.clear()
        return deleted

    def stats(self) -> dict[str, Any]:
        return {"available": True, "keys": len(self.store), "ttl_seconds": 60}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def standard_tuning() -> tuple[str, ...]:
    return STANDARD


@pytest.fixture()
def rng() -> random.Random:
    """Seeded random source for reproducible generation."""
    return random.Random(42)


@pytest.fixture()
def fake_cache() -> FakeAnalysisCache:
    return FakeAnalysisCache()


@pytest.fixture()
def api_client(fake_cache: FakeAnalysisCache):
    """FastAPI ``TestClient`` with the analysis cache overridden.

    The fake cache is accessible as ``client._cache``.
    """
    app.dependency_overrides[get_analysis_cache] = lambda: fake_cache

    with TestClient(app) as c:
        c._cache = fake_cache  # type: ignore[attr-defined]
        yield c

    app.dependency_overrides.clear()
