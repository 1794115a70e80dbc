"""
api/routes/voicings.py — Voicing search and scoring endpoints.

Endpoints:
    POST /voicings/search         — Playable fingerings of a chord in a tuning
    POST /voicings/score          — Ergonomy score of a single voicing
    POST /voicings/voice-leading  — Smoothness between consecutive voicings

Pure computation; an unknown chord name is not an error and yields an
empty voicing list.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from api.schemas.music import (
    ErgonomyScoreRequest,
    ErgonomyScoreResponse,
    VoiceLeadingRequest,
    VoiceLeadingResponse,
    VoicingOut,
    VoicingSearchRequest,
    VoicingSearchResponse,
)
from core.music_theory.chords import parse_chord_name
from core.music_theory.ergonomy import score_ergonomy
from core.music_theory.voice_leading import average_voice_leading, score_voice_leading
from core.music_theory.voicing import search_voicings
from infrastructure.metrics import LatencyTimer, record_voicing_search

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/voicings", tags=["voicings"])


# ---------------------------------------------------------------------------
# POST /voicings/search
# ---------------------------------------------------------------------------


@router.post("/search", response_model=VoicingSearchResponse)
def search(request: VoicingSearchRequest) -> VoicingSearchResponse:
    """Search the fretboard for voicings of a chord, best ergonomy first.

    Raises:
        HTTPException 422: A tuning pitch is malformed or has no octave.
    """
    descriptor = parse_chord_name(request.chord_name)
    try:
        with LatencyTimer() as timer:
            voicings = search_voicings(request.chord_name, request.tuning, request.max_results)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    record_voicing_search(
        quality=descriptor.quality if descriptor else "unknown",
        found=len(voicings),
        latency_seconds=timer.elapsed,
    )
    logger.info(
        "Voicing search %r on %d strings: %d found in %.3fs",
        request.chord_name,
        len(request.tuning),
        len(voicings),
        timer.elapsed,
    )
    return VoicingSearchResponse(
        chord_name=request.chord_name.strip(),
        voicings=[VoicingOut.from_voicing(v) for v in voicings],
        count=len(voicings),
    )


# ---------------------------------------------------------------------------
# POST /voicings/score
# ---------------------------------------------------------------------------


@router.post("/score", response_model=ErgonomyScoreResponse)
def score(request: ErgonomyScoreRequest) -> ErgonomyScoreResponse:
    """Re-score a voicing against the tuning it was built on.

    Raises:
        HTTPException 422: Malformed voicing, or string counts disagree.
    """
    try:
        voicing = request.voicing.to_voicing()
        value = score_ergonomy(voicing, request.tuning)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ErgonomyScoreResponse(ergonomy_score=value)


# ---------------------------------------------------------------------------
# POST /voicings/voice-leading
# ---------------------------------------------------------------------------


@router.post("/voice-leading", response_model=VoiceLeadingResponse)
def voice_leading(request: VoiceLeadingRequest) -> VoiceLeadingResponse:
    """Score each consecutive pair of voicings and their mean.

    A single voicing has no pairs and averages 100.
    """
    try:
        voicings = [v.to_voicing() for v in request.voicings]
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    pairs = [score_voice_leading(a, b) for a, b in zip(voicings, voicings[1:])]
    return VoiceLeadingResponse(
        pair_scores=pairs,
        average=average_voice_leading(voicings),
    )
