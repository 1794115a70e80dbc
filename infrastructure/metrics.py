"""Prometheus metrics for the fretboard harmony service.

Metrics carry musical context (chord quality, key mode, string count) so
dashboards show which tunings and requests are expensive, not just generic
HTTP stats.

Metrics:
    fret_analysis_requests_total          Counter by operation and cache status
    fret_voicing_searches_total           Counter by chord quality and outcome
    fret_voicing_search_latency_seconds   Histogram of voicing search latency
    fret_progression_requests_total       Counter by mode and outcome
    fret_progressions_generated_total     Progressions returned to callers
    fret_progression_latency_seconds      Histogram of generation latency

Usage::

    from infrastructure.metrics import LatencyTimer, record_voicing_search

    with LatencyTimer() as t:
        voicings = search_voicings(chord, tuning)
    record_voicing_search(quality="minor", found=len(voicings), latency_seconds=t.elapsed)
"""

from __future__ import annotations

import logging
import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

_REGISTRY = CollectorRegistry()

analysis_requests_total = Counter(
    "fret_analysis_requests_total",
    "Analysis requests by operation and cache status",
    ["operation", "cache"],
    registry=_REGISTRY,
)

voicing_searches_total = Counter(
    "fret_voicing_searches_total",
    "Voicing searches by chord quality and outcome",
    ["quality", "outcome"],
    registry=_REGISTRY,
)

voicing_search_latency_seconds = Histogram(
    "fret_voicing_search_latency_seconds",
    "Voicing search latency in seconds",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
    registry=_REGISTRY,
)

progression_requests_total = Counter(
    "fret_progression_requests_total",
    "Progression generation requests by key mode and outcome",
    ["mode", "outcome"],
    registry=_REGISTRY,
)

progressions_generated_total = Counter(
    "fret_progressions_generated_total",
    "Progressions returned to callers",
    registry=_REGISTRY,
)

progression_latency_seconds = Histogram(
    "fret_progression_latency_seconds",
    "End-to-end progression generation latency in seconds",
    ["strings"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
    registry=_REGISTRY,
)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def record_analysis(*, operation: str, cache_hit: bool) -> None:
    """Record an analysis request.

    Args:
        operation: "tuning", "marked" or "reanalyze".
        cache_hit: True if the response came from the analysis cache.
    """
    analysis_requests_total.labels(operation=operation, cache="hit" if cache_hit else "miss").inc()


def record_voicing_search(*, quality: str, found: int, latency_seconds: float) -> None:
    """Record a completed voicing search.

    Args:
        quality: Chord quality family, or "unknown" for unparseable names.
        found: Number of voicings returned.
        latency_seconds: Search wall-clock time in seconds.
    """
    outcome = "found" if found else "empty"
    voicing_searches_total.labels(quality=quality, outcome=outcome).inc()
    voicing_search_latency_seconds.observe(latency_seconds)


def record_progressions(
    *,
    mode: str,
    strings: int,
    generated: int,
    latency_seconds: float,
) -> None:
    """Record a completed progression generation request.

    Args:
        mode: Key mode, "major" or "minor".
        strings: Number of strings in the tuning.
        generated: Number of progressions returned.
        latency_seconds: End-to-end wall-clock time in seconds.
    """
    outcome = "generated" if generated else "empty"
    progression_requests_total.labels(mode=mode, outcome=outcome).inc()
    progressions_generated_total.inc(generated)
    progression_latency_seconds.labels(strings=str(strings)).observe(latency_seconds)


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
    """
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            progressions = generate_progressions(request)
        record_progressions(mode="major", strings=6, generated=5, latency_seconds=t.elapsed)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        """Start timing."""
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        """Stop timing and record elapsed."""
        self.elapsed = time.perf_counter() - self._start
