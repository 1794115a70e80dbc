"""Redis-backed analysis cache for the fretboard harmony service.

Tuning analyses are pure functions of their inputs, so identical requests
(same operation, same tuning or marked notes) can be served from Redis
without re-running the analyzer.

Cache key = SHA-256(operation + canonical JSON of the request payload).
Entries are stored as JSON with a TTL.

Progression generation is not cached: it is seeded per request and meant
to vary between calls.

Usage::

    from infrastructure.cache import AnalysisCache

    cache = AnalysisCache()
    hit = cache.get("tuning", {"tuning": tuning})
    if hit:
        return hit
    result = ... # run analysis
    cache.set("tuning", {"tuning": tuning}, result)
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from typing import Any

import redis as redis_lib

logger = logging.getLogger(__name__)

# Analyses never change for the same input; a week keeps Redis tidy.
_DEFAULT_TTL_SECONDS = 604_800
# Redis key namespace
_NS = "fret:analysis:"


def _default_ttl() -> int:
    raw = os.environ.get("ANALYSIS_CACHE_TTL")
    if raw is None:
        return _DEFAULT_TTL_SECONDS
    try:
        ttl = int(raw)
    except ValueError:
        logger.warning("ANALYSIS_CACHE_TTL=%r is not an integer; using default", raw)
        return _DEFAULT_TTL_SECONDS
    return ttl if ttl > 0 else _DEFAULT_TTL_SECONDS


def make_key(operation: str, payload: dict[str, Any]) -> str:
    """Deterministic cache key from an operation name and its inputs.

    Args:
        operation: Analysis operation, e.g. "tuning", "marked".
        payload: JSON-serialisable request inputs.

    Returns:
        Namespaced Redis key string.
    """
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(f"{operation}|{canonical}".encode()).hexdigest()
    return f"{_NS}{operation}:{digest}"


class AnalysisCache:
    """Redis-backed cache for analysis responses.

    Falls back gracefully to a no-op if Redis is unavailable — the API
    continues working, just without caching.

    Args:
        redis_url: Redis connection URL (default: from REDIS_URL env var or
            ``redis://localhost:6379/0``).
        ttl_seconds: Cache TTL in seconds (default: ANALYSIS_CACHE_TTL env
            var or 604800 = 7 days).
    """

    def __init__(
        self,
        redis_url: str | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        """Initialize Redis connection (fails gracefully)."""
        self._ttl = ttl_seconds if ttl_seconds is not None else _default_ttl()
        self._client: Any = None
        url = redis_url or os.environ.get("REDIS_URL", "redis://localhost:6379/0")
        try:
            self._client = redis_lib.from_url(url, decode_responses=True, socket_timeout=0.5)
            self._client.ping()
            logger.info("AnalysisCache: connected to Redis at %s", url)
        except Exception as exc:  # noqa: BLE001
            logger.warning("AnalysisCache: Redis unavailable (%s) — caching disabled", exc)
            self._client = None

    @property
    def available(self) -> bool:
        """True if Redis is reachable."""
        return self._client is not None

    @property
    def ttl(self) -> int:
        return self._ttl

    def get(self, operation: str, payload: dict[str, Any]) -> Any | None:
        """Return the cached response or None on miss / error."""
        if not self._client:
            return None
        key = make_key(operation, payload)
        try:
            raw = self._client.get(key)
            if raw is None:
                return None
            logger.debug("AnalysisCache HIT: %s", key)
            return json.loads(raw)
        except Exception as exc:  # noqa: BLE001
            logger.warning("AnalysisCache.get error: %s", exc)
            return None

    def set(self, operation: str, payload: dict[str, Any], response: Any) -> None:
        """Store a JSON-serialisable response under the request's key."""
        if not self._client:
            return
        key = make_key(operation, payload)
        try:
            self._client.setex(key, self._ttl, json.dumps(response))
            logger.debug("AnalysisCache SET: %s", key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("AnalysisCache.set error: %s", exc)

    def flush(self) -> int:
        """Delete all analysis cache entries.

        Returns:
            Number of keys deleted.
        """
        if not self._client:
            return 0
        try:
            keys = list(self._client.scan_iter(f"{_NS}*"))
            if not keys:
                return 0
            deleted = self._client.delete(*keys)
            logger.info("AnalysisCache: flushed %d keys", deleted)
            return int(deleted)
        except Exception as exc:  # noqa: BLE001
            logger.warning("AnalysisCache.flush error: %s", exc)
            return 0

    def stats(self) -> dict[str, Any]:
        """Return basic cache statistics.

        Returns:
            Dict with keys: available, keys, ttl_seconds.
        """
        if not self._client:
            return {"available": False, "keys": 0, "ttl_seconds": self._ttl}
        try:
            count = sum(1 for _ in self._client.scan_iter(f"{_NS}*"))
            return {"available": True, "keys": count, "ttl_seconds": self._ttl}
        except Exception as exc:  # noqa: BLE001
            logger.warning("AnalysisCache.stats error: %s", exc)
            return {"available": False, "keys": 0, "ttl_seconds": self._ttl}
