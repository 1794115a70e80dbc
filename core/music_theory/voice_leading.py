"""
core/music_theory/voice_leading.py — Smoothness score between consecutive voicings.

Voices are paired from the bass end: the last sounding note of one voicing
is compared with the last sounding note of the next, and so on for as many
voices as the smaller voicing has. Less average movement scores higher.
"""

from __future__ import annotations

from collections.abc import Sequence

from core.music_theory.pitch import note_to_midi
from core.music_theory.types import ChordVoicing

MAX_SCORE: float = 100.0
PENALTY_PER_SEMITONE: float = 10.0


def _midi(note: str) -> int:
    midi = note_to_midi(note)
    return midi if midi is not None else 0


def score_voice_leading(previous: ChordVoicing, following: ChordVoicing) -> float:
    """Score the movement from one voicing to the next, 0–100.

    Args:
        previous:  Voicing played first
        following: Voicing played next

    Returns:
        max(0, 100 − 10 × mean semitone movement), or 0.0 when either
        voicing has no sounding notes

    Examples:
        >>> score_voice_leading(c_major, c_major)
        100.0
    """
    a, b = previous.notes, following.notes
    if not a or not b:
        return 0.0

    voices = min(len(a), len(b))
    movement = sum(abs(_midi(a[-1 - i]) - _midi(b[-1 - i])) for i in range(voices))
    return max(0.0, MAX_SCORE - (movement / voices) * PENALTY_PER_SEMITONE)


def average_voice_leading(voicings: Sequence[ChordVoicing]) -> float:
    """Mean voice-leading score over consecutive pairs; 100 for fewer than two."""
    if len(voicings) < 2:
        return MAX_SCORE
    scores = [score_voice_leading(a, b) for a, b in zip(voicings, voicings[1:])]
    return sum(scores) / len(scores)
