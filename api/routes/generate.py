"""
api/routes/generate.py — Progression generation endpoints.

Endpoints:
    POST /generate/progressions   — Ranked playable progressions for a tuning + key
    POST /generate/replace-chord  — Revoice one slot of an existing progression

No database, no cache — generation is seeded per request and meant to vary
between calls unless a seed is given.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from api.schemas.music import (
    ProgressionOut,
    ProgressionsRequest,
    ProgressionsResponse,
    ReplaceChordRequest,
    ReplaceChordResponse,
)
from core.music_theory.harmony import generate_progressions, replace_chord
from core.music_theory.scales import parse_key
from core.music_theory.types import GenerationRequest
from infrastructure.metrics import LatencyTimer, record_progressions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/generate", tags=["generate"])


# ---------------------------------------------------------------------------
# POST /generate/progressions
# ---------------------------------------------------------------------------


@router.post("/progressions", response_model=ProgressionsResponse)
def generate(request: ProgressionsRequest) -> ProgressionsResponse:
    """Generate progressions for a tuning and key.

    The result may hold fewer than result_count progressions (or none)
    when the constraints leave too few playable attempts.

    Raises:
        HTTPException 422: Invalid key, tuning pitch, required chord or
            continuation progression.
    """
    try:
        root, mode = parse_key(request.key)
        generation_request = GenerationRequest(
            tuning=tuple(request.tuning),
            chord_count=request.chord_count,
            key=request.key,
            required_chords=tuple(request.required_chords),
            continue_from=(
                request.continue_from.to_progression() if request.continue_from else None
            ),
            result_count=request.result_count,
            algorithm=request.algorithm.to_options(),
            seed=request.seed,
        )
        with LatencyTimer() as timer:
            progressions = generate_progressions(generation_request)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    record_progressions(
        mode=mode,
        strings=len(request.tuning),
        generated=len(progressions),
        latency_seconds=timer.elapsed,
    )
    return ProgressionsResponse(
        key=f"{root} {mode}",
        progressions=[ProgressionOut.from_progression(p) for p in progressions],
        count=len(progressions),
    )


# ---------------------------------------------------------------------------
# POST /generate/replace-chord
# ---------------------------------------------------------------------------


@router.post("/replace-chord", response_model=ReplaceChordResponse)
def replace(request: ReplaceChordRequest) -> ReplaceChordResponse:
    """Swap the chord at one index for a new chord, voiced from its neighbour.

    Returns progression=null when the new chord has no voicing under the
    given constraints.

    Raises:
        HTTPException 422: Index out of range or malformed progression.
    """
    try:
        progression = request.progression.to_progression()
        updated = replace_chord(
            progression,
            request.index,
            request.chord_name,
            request.algorithm.to_options(),
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if updated is None:
        logger.info("No voicing for %r at index %d", request.chord_name, request.index)
        return ReplaceChordResponse(progression=None)
    return ReplaceChordResponse(progression=ProgressionOut.from_progression(updated))
