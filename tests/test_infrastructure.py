"""Tests for infrastructure/ caching and observability layer.

Covers:
- AnalysisCache: get/set/flush/stats, graceful Redis failure
- make_key: determinism and namespacing
- metrics: counters and histograms move with record_*() calls
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from infrastructure import metrics as metrics_module
from infrastructure.cache import AnalysisCache, make_key

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_cache_no_redis() -> AnalysisCache:
    """AnalysisCache with Redis patched to fail — exercises no-op path."""
    with patch("infrastructure.cache.redis_lib") as mock_redis:
        mock_redis.from_url.side_effect = ConnectionError("no redis")
        cache = AnalysisCache(redis_url="redis://nowhere:9999/0")
    return cache


def _make_mock_redis() -> MagicMock:
    """Create a mock Redis client that behaves like a real one."""
    client = MagicMock()
    client.ping.return_value = True
    client.get.return_value = None
    client.setex.return_value = True
    client.delete.return_value = 2
    client.scan_iter.return_value = iter([])
    return client


def _sample(name: str, **labels: str) -> float:
    """Read a sample from the service registry (0.0 if never observed)."""
    value = metrics_module._REGISTRY.get_sample_value(name, labels or None)
    return value or 0.0


# ---------------------------------------------------------------------------
# Key helpers
# ---------------------------------------------------------------------------


class TestCacheKeyHelpers:
    def test_make_key_deterministic(self) -> None:
        payload = {"tuning": ["E4", "B3", "G3"]}
        assert make_key("tuning", payload) == make_key("tuning", payload)

    def test_make_key_namespace(self) -> None:
        assert make_key("tuning", {}).startswith("fret:analysis:tuning:")

    def test_make_key_ignores_dict_order(self) -> None:
        assert make_key("marked", {"a": 1, "b": 2}) == make_key("marked", {"b": 2, "a": 1})

    def test_make_key_differs_on_operation(self) -> None:
        payload = {"notes": ["C", "E", "G"]}
        assert make_key("tuning", payload) != make_key("marked", payload)

    def test_make_key_differs_on_string_order(self) -> None:
        assert make_key("tuning", {"tuning": ["E4", "B3"]}) != make_key(
            "tuning", {"tuning": ["B3", "E4"]}
        )


# ---------------------------------------------------------------------------
# AnalysisCache without Redis
# ---------------------------------------------------------------------------


class TestAnalysisCacheNoRedis:
    def test_available_false_when_redis_unreachable(self) -> None:
        assert _make_cache_no_redis().available is False

    def test_get_returns_none_when_unavailable(self) -> None:
        assert _make_cache_no_redis().get("tuning", {"tuning": ["E4"]}) is None

    def test_set_is_noop_when_unavailable(self) -> None:
        cache = _make_cache_no_redis()
        cache.set("tuning", {"tuning": ["E4"]}, {"groups": []})
        assert cache.get("tuning", {"tuning": ["E4"]}) is None

    def test_flush_returns_zero_when_unavailable(self) -> None:
        assert _make_cache_no_redis().flush() == 0

    def test_stats_returns_unavailable(self) -> None:
        stats = _make_cache_no_redis().stats()
        assert stats["available"] is False
        assert stats["keys"] == 0


# ---------------------------------------------------------------------------
# AnalysisCache with (mocked) Redis
# ---------------------------------------------------------------------------


class TestAnalysisCacheWithRedis:
    def _make_cache(self, **kwargs) -> tuple[AnalysisCache, MagicMock]:
        mock_client = _make_mock_redis()
        with patch("infrastructure.cache.redis_lib") as mock_redis_mod:
            mock_redis_mod.from_url.return_value = mock_client
            cache = AnalysisCache(redis_url="redis://localhost:6379/0", **kwargs)
        return cache, mock_client

    def test_available_true_with_redis(self) -> None:
        cache, _ = self._make_cache()
        assert cache.available is True

    def test_get_miss_returns_none(self) -> None:
        cache, _ = self._make_cache()
        assert cache.get("tuning", {"tuning": ["E4"]}) is None

    def test_get_hit_returns_parsed_dict(self) -> None:
        cache, mock_client = self._make_cache()
        payload = {"groups": [{"chord_name": "Em7"}]}
        mock_client.get.return_value = json.dumps(payload)
        assert cache.get("tuning", {"tuning": ["E4"]}) == payload

    def test_set_calls_setex_with_ttl(self) -> None:
        cache, mock_client = self._make_cache(ttl_seconds=120)
        cache.set("marked", {"notes": ["C"]}, {"analyses": []})
        key, ttl, body = mock_client.setex.call_args.args
        assert key == make_key("marked", {"notes": ["C"]})
        assert ttl == 120
        assert json.loads(body) == {"analyses": []}

    def test_default_ttl_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYSIS_CACHE_TTL", "300")
        cache, _ = self._make_cache()
        assert cache.ttl == 300

    def test_bad_ttl_env_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYSIS_CACHE_TTL", "soon")
        cache, _ = self._make_cache()
        assert cache.ttl == 604_800

    def test_flush_deletes_namespace(self) -> None:
        cache, mock_client = self._make_cache()
        mock_client.scan_iter.return_value = iter(["fret:analysis:a", "fret:analysis:b"])
        assert cache.flush() == 2
        mock_client.delete.assert_called_once_with("fret:analysis:a", "fret:analysis:b")

    def test_flush_empty_namespace(self) -> None:
        cache, mock_client = self._make_cache()
        assert cache.flush() == 0
        mock_client.delete.assert_not_called()

    def test_stats_counts_keys(self) -> None:
        cache, mock_client = self._make_cache(ttl_seconds=60)
        mock_client.scan_iter.return_value = iter(["k1", "k2", "k3"])
        assert cache.stats() == {"available": True, "keys": 3, "ttl_seconds": 60}

    def test_get_error_returns_none_gracefully(self) -> None:
        cache, mock_client = self._make_cache()
        mock_client.get.side_effect = ConnectionError("lost")
        assert cache.get("tuning", {"tuning": ["E4"]}) is None

    def test_set_error_does_not_raise(self) -> None:
        cache, mock_client = self._make_cache()
        mock_client.setex.side_effect = ConnectionError("lost")
        cache.set("tuning", {"tuning": ["E4"]}, {"groups": []})


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


class TestMetricsRecording:
    def test_record_analysis_hit_and_miss_separate(self) -> None:
        hit_before = _sample("fret_analysis_requests_total", operation="tuning", cache="hit")
        miss_before = _sample("fret_analysis_requests_total", operation="tuning", cache="miss")

        metrics_module.record_analysis(operation="tuning", cache_hit=True)

        assert _sample("fret_analysis_requests_total", operation="tuning", cache="hit") == (
            hit_before + 1
        )
        assert (
            _sample("fret_analysis_requests_total", operation="tuning", cache="miss")
            == miss_before
        )

    def test_record_voicing_search_outcomes(self) -> None:
        before = _sample("fret_voicing_searches_total", quality="minor", outcome="empty")
        count_before = _sample("fret_voicing_search_latency_seconds_count")

        metrics_module.record_voicing_search(quality="minor", found=0, latency_seconds=0.01)

        assert _sample("fret_voicing_searches_total", quality="minor", outcome="empty") == (
            before + 1
        )
        assert _sample("fret_voicing_search_latency_seconds_count") == count_before + 1

    def test_record_progressions(self) -> None:
        before = _sample("fret_progressions_generated_total")
        latency_before = _sample("fret_progression_latency_seconds_count", strings="7")

        metrics_module.record_progressions(
            mode="minor", strings=7, generated=3, latency_seconds=0.4
        )

        assert _sample("fret_progressions_generated_total") == before + 3
        assert _sample("fret_progression_latency_seconds_count", strings="7") == (
            latency_before + 1
        )

    def test_metrics_response_is_prometheus_text(self) -> None:
        metrics_module.record_analysis(operation="marked", cache_hit=False)
        body, content_type = metrics_module.get_metrics_response()
        assert b"fret_analysis_requests_total" in body
        assert content_type.startswith("text/plain")

    def test_latency_timer(self) -> None:
        with metrics_module.LatencyTimer() as timer:
            sum(range(1000))
        assert timer.elapsed >= 0.0
