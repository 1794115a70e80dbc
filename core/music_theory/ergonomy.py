"""
core/music_theory/ergonomy.py — Playability score for a fretted voicing.

score_ergonomy() starts from a base of 60 and applies, in order of weight:

    1. gaps        −25 per muted string inside the sounding span, +20 if none
    2. stretch     −10 per fret beyond 4, +10 when ≤ 2
    3. position    +15 (max fret ≤ 3), +10 (≤ 5), +5 (≤ 7), −5 (> 9)
    4. fingers     +10 for ≤ 2 distinct pressed frets, −8 per fret beyond 4
    5. barre       −8 when adjacent strings share a pressed fret
    6. drones      +5 per open string inside the sounding span
    7. root bass   +8 when the bass pitch class is the chord root
    8. fullness    +5 when at least 4 strings sound

The result is clamped to [0, 100]. Rules 2–5 only apply when at least one
string is pressed.
"""

from __future__ import annotations

from collections.abc import Sequence

from core.music_theory.chords import parse_chord_name
from core.music_theory.pitch import pitch_class
from core.music_theory.types import ChordVoicing

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

BASE_SCORE: int = 60
GAP_PENALTY: int = 25
CLOSED_BONUS: int = 20
COMFORT_STRETCH: int = 4  # frets; each fret beyond this costs
STRETCH_PENALTY: int = 10
COMPACT_STRETCH: int = 2
COMPACT_BONUS: int = 10
FINGER_PENALTY: int = 8
BARRE_PENALTY: int = 8
DRONE_BONUS: int = 5
ROOT_BASS_BONUS: int = 8
FULL_CHORD_BONUS: int = 5
FULL_CHORD_STRINGS: int = 4


# ---------------------------------------------------------------------------
# Shape helpers
# ---------------------------------------------------------------------------


def _sounding_span(frets: Sequence[int]) -> tuple[int, int] | None:
    sounding = [i for i, f in enumerate(frets) if f >= 0]
    if not sounding:
        return None
    return sounding[0], sounding[-1]


def count_string_gaps(frets: Sequence[int]) -> int:
    """Count muted strings strictly between the first and last sounding string.

    Examples:
        >>> count_string_gaps([0, -1, 2, -1, -1, 3])
        3
        >>> count_string_gaps([-1, 0, 2, 2, -1, -1])
        0
    """
    span = _sounding_span(frets)
    if span is None:
        return 0
    first, last = span
    return sum(1 for i in range(first + 1, last) if frets[i] < 0)


def has_barre(frets: Sequence[int]) -> bool:
    """True if two adjacent strings are pressed at the same fret."""
    return any(a > 0 and a == b for a, b in zip(frets, frets[1:]))


def fret_stretch(frets: Sequence[int]) -> int:
    """Distance in frets between the lowest and highest pressed fret (0 if none)."""
    pressed = [f for f in frets if f > 0]
    if not pressed:
        return 0
    return max(pressed) - min(pressed)


def _position_bonus(max_fret: int) -> int:
    if max_fret <= 3:
        return 15
    if max_fret <= 5:
        return 10
    if max_fret <= 7:
        return 5
    if max_fret > 9:
        return -5
    return 0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def score_ergonomy(voicing: ChordVoicing, tuning: Sequence[str]) -> int:
    """Score how comfortable a voicing is to play, 0 (hard) to 100 (easy).

    Args:
        voicing: Voicing to score; its ergonomy_score field is ignored
        tuning:  Tuning the voicing was built on, one pitch per string

    Returns:
        Integer score clamped to [0, 100]

    Raises:
        ValueError: If the voicing and tuning have different string counts
    """
    frets = voicing.frets
    if len(frets) != len(tuning):
        raise ValueError(
            f"Voicing has {len(frets)} strings but tuning has {len(tuning)}"
        )

    score = BASE_SCORE

    gaps = count_string_gaps(frets)
    score -= gaps * GAP_PENALTY
    if gaps == 0:
        score += CLOSED_BONUS

    pressed = [f for f in frets if f > 0]
    if pressed:
        stretch = max(pressed) - min(pressed)
        if stretch > COMFORT_STRETCH:
            score -= (stretch - COMFORT_STRETCH) * STRETCH_PENALTY
        elif stretch <= COMPACT_STRETCH:
            score += COMPACT_BONUS

        score += _position_bonus(max(pressed))

        distinct = len(set(pressed))
        if distinct <= 2:
            score += 10
        elif distinct > 4:
            score -= (distinct - 4) * FINGER_PENALTY

        if has_barre(frets):
            score -= BARRE_PENALTY

    span = _sounding_span(frets)
    if span is not None:
        first, last = span
        score += sum(DRONE_BONUS for i in voicing.drone_strings if first <= i <= last)

    descriptor = parse_chord_name(voicing.chord)
    if descriptor is not None and voicing.bass_note:
        if pitch_class(voicing.bass_note) == descriptor.root:
            score += ROOT_BASS_BONUS

    if len(voicing.sounding_strings) >= FULL_CHORD_STRINGS:
        score += FULL_CHORD_BONUS

    return max(0, min(100, score))
