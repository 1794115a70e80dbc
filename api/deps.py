"""
FastAPI dependency providers.

The analysis cache is created once and reused across requests so the
Redis connection (or its absence) is resolved a single time per process.
"""

from infrastructure.cache import AnalysisCache

_analysis_cache: AnalysisCache | None = None


def get_analysis_cache() -> AnalysisCache:
    """Return a cached AnalysisCache singleton (Redis-backed).

    Falls back gracefully to a no-op cache if Redis is unavailable.
    """
    global _analysis_cache  # noqa: PLW0603
    if _analysis_cache is None:
        _analysis_cache = AnalysisCache()
    return _analysis_cache
