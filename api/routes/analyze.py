"""
api/routes/analyze.py — Tuning and marked-note analysis endpoints.

Endpoints:
    POST /analyze/tuning     — Name every string-group prefix and profile the tuning
    POST /analyze/marked     — Analyse marked notes once per candidate root
    POST /analyze/reanalyze  — Re-express an analysis against a new root

Tuning and marked analyses are deterministic and served from the Redis
analysis cache when it is reachable.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_analysis_cache
from api.schemas.music import (
    MarkedAnalysisResponse,
    MarkedNotesRequest,
    ReanalyzeRequest,
    StringGroupAnalysisOut,
    TuningAnalysisRequest,
    TuningAnalysisResponse,
    TuningProfileOut,
)
from core.music_theory.analysis import (
    analyze_marked_pitch_set,
    analyze_tuning_groups,
    reanalyze,
)
from core.music_theory.tuning import analyze_tuning_profile
from infrastructure.cache import AnalysisCache
from infrastructure.metrics import record_analysis

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analyze", tags=["analyze"])

Cache = Annotated[AnalysisCache, Depends(get_analysis_cache)]


# ---------------------------------------------------------------------------
# POST /analyze/tuning
# ---------------------------------------------------------------------------


@router.post("/tuning", response_model=TuningAnalysisResponse)
def analyze_tuning(request: TuningAnalysisRequest, cache: Cache) -> TuningAnalysisResponse:
    """Analyse a tuning string group by string group.

    Names the chord formed by the highest 3, 4, … N strings (rooted on the
    lowest string of each group) and summarises the whole tuning: adjacent
    intervals, open-chord detection, mood and range.

    The group analysis skips unparseable strings, but the profile needs
    every pitch, so one bad entry still rejects the request.

    Raises:
        HTTPException 422: Tuning contains an unparseable pitch.
    """
    payload = {"tuning": request.tuning}
    hit = cache.get("tuning", payload)
    if hit is not None:
        record_analysis(operation="tuning", cache_hit=True)
        return TuningAnalysisResponse(**{**hit, "cached": True})

    try:
        groups = analyze_tuning_groups(request.tuning)
        full_chord = groups[-1].chord_name if groups else None
        profile = analyze_tuning_profile(request.tuning, full_chord)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    response = TuningAnalysisResponse(
        tuning=request.tuning,
        groups=[StringGroupAnalysisOut.from_analysis(g) for g in groups],
        profile=TuningProfileOut.from_profile(profile),
    )
    record_analysis(operation="tuning", cache_hit=False)
    cache.set("tuning", payload, response.model_dump(mode="json"))
    return response


# ---------------------------------------------------------------------------
# POST /analyze/marked
# ---------------------------------------------------------------------------


@router.post("/marked", response_model=MarkedAnalysisResponse)
def analyze_marked(request: MarkedNotesRequest, cache: Cache) -> MarkedAnalysisResponse:
    """Analyse marked notes against each distinct pitch class as root.

    Unparseable entries are skipped. Fewer than two valid notes yields an
    empty list rather than an error.
    """
    payload = {"notes": request.notes}
    hit = cache.get("marked", payload)
    if hit is not None:
        record_analysis(operation="marked", cache_hit=True)
        return MarkedAnalysisResponse(**{**hit, "cached": True})

    analyses = analyze_marked_pitch_set(request.notes)
    response = MarkedAnalysisResponse(
        analyses=[StringGroupAnalysisOut.from_analysis(a) for a in analyses],
        count=len(analyses),
    )
    record_analysis(operation="marked", cache_hit=False)
    cache.set("marked", payload, response.model_dump(mode="json"))
    return response


# ---------------------------------------------------------------------------
# POST /analyze/reanalyze
# ---------------------------------------------------------------------------


@router.post("/reanalyze", response_model=StringGroupAnalysisOut)
def reanalyze_group(request: ReanalyzeRequest) -> StringGroupAnalysisOut:
    """Recompute intervals, chord name and inversion against a new root.

    An unparseable new root comes back as the same analysis named "<root>?".

    Raises:
        HTTPException 422: The analysis payload is inconsistent (e.g. notes
            and intervals of different lengths).
    """
    try:
        base = request.analysis.to_analysis()
        result = reanalyze(base, request.new_root)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    record_analysis(operation="reanalyze", cache_hit=False)
    return StringGroupAnalysisOut.from_analysis(result)
