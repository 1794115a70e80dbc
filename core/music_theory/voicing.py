"""
core/music_theory/voicing.py — Fretboard voicing search for arbitrary tunings.

search_voicings() walks the strings in tuning order with a depth-first
search. Each string offers, in preference order:

    1. open (only if the open pitch is a chord tone)
    2. frets 1..12 that land on a chord tone, ascending, within ±6 frets of
       the frets already pressed
    3. muted

Only the first 10 options per string are explored, and the search stops
once max_results × 5 valid voicings are collected. Each complete
assignment must sound at least three strings, all chord tones. Survivors
are scored with score_ergonomy() and the best max_results are returned.

Work is bounded by those caps, so the result set is a deterministic
sample of the fretboard, not an exhaustive enumeration.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence

from core.music_theory.chords import parse_chord_name
from core.music_theory.ergonomy import score_ergonomy
from core.music_theory.pitch import midi_to_note, parse_pitch
from core.music_theory.types import ChordVoicing

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_FRET: int = 12
SEARCH_SLACK: int = 6  # frets either side of the already-pressed range
OPTIONS_PER_STRING: int = 10
SEARCH_MULTIPLIER: int = 5
MIN_SOUNDING: int = 3
MAX_FINGERS: int = 4
MUTED: int = -1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _open_midis(tuning: Sequence[str]) -> list[int]:
    midis: list[int] = []
    for note in tuning:
        midi = parse_pitch(note).midi
        if midi is None:
            raise ValueError(f"Tuning pitch {note!r} needs an octave")
        midis.append(midi)
    return midis


def calculate_fingers(frets: Sequence[int]) -> tuple[int, ...]:
    """Assign fingers by fret: the lowest pressed fret gets finger 1, the next
    distinct fret finger 2, and so on, capped at 4. Open and muted strings
    get 0.

    Examples:
        >>> calculate_fingers([-1, 0, 2, 2, 1, 0])
        (0, 0, 2, 2, 1, 0)
    """
    finger_for: dict[int, int] = {}
    for finger, fret in enumerate(sorted({f for f in frets if f > 0}), start=1):
        finger_for[fret] = min(finger, MAX_FINGERS)
    return tuple(finger_for.get(f, 0) for f in frets)


def _string_options(
    open_midi: int,
    chord_pcs: frozenset[int],
    pressed: Sequence[int],
) -> list[int]:
    options: list[int] = []
    if open_midi % 12 in chord_pcs:
        options.append(0)

    low = min(pressed) - SEARCH_SLACK if pressed else 1
    high = max(pressed) + SEARCH_SLACK if pressed else MAX_FRET
    for fret in range(1, MAX_FRET + 1):
        if low <= fret <= high and (open_midi + fret) % 12 in chord_pcs:
            options.append(fret)

    options.append(MUTED)
    return options[:OPTIONS_PER_STRING]


def _build_voicing(
    chord_name: str,
    frets: Sequence[int],
    open_midis: Sequence[int],
    chord_pcs: frozenset[int],
) -> ChordVoicing | None:
    sounding = [(i, open_midis[i] + f) for i, f in enumerate(frets) if f >= 0]
    if len(sounding) < MIN_SOUNDING:
        return None
    if any(midi % 12 not in chord_pcs for _, midi in sounding):
        return None

    notes = tuple(midi_to_note(midi) for _, midi in sounding)
    bass = midi_to_note(min(midi for _, midi in sounding))
    return ChordVoicing(
        chord=chord_name,
        frets=tuple(frets),
        fingers=calculate_fingers(frets),
        ergonomy_score=0,
        drone_strings=tuple(i for i, f in enumerate(frets) if f == 0),
        bass_note=bass,
        notes=notes,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def search_voicings(
    chord_name: str,
    tuning: Sequence[str],
    max_results: int = 10,
) -> list[ChordVoicing]:
    """Find playable voicings of a chord under a tuning, best ergonomy first.

    Args:
        chord_name:  Chord name in the chord grammar, e.g. "Am7", "C/G"
        tuning:      Open-string pitches with octaves, string 0 = highest
        max_results: Maximum number of voicings to return

    Returns:
        Up to max_results voicings sorted by descending ergonomy score
        (ties keep search order); empty for unknown chord names

    Raises:
        ValueError: If a tuning pitch is malformed or has no octave

    Examples:
        >>> best = search_voicings("C", ["E4", "B3", "G3", "D3", "A2", "E2"])[0]
        >>> best.chord
        'C'
    """
    open_midis = _open_midis(tuning)
    descriptor = parse_chord_name(chord_name)
    if descriptor is None or max_results <= 0:
        logger.debug("No voicings searched for %r", chord_name)
        return []

    name = chord_name.strip()
    chord_pcs = descriptor.pitch_classes
    cap = max_results * SEARCH_MULTIPLIER
    found: list[ChordVoicing] = []
    frets: list[int] = []

    def walk(string_idx: int) -> None:
        if len(found) >= cap:
            return
        if string_idx == len(open_midis):
            voicing = _build_voicing(name, frets, open_midis, chord_pcs)
            if voicing is not None:
                found.append(voicing)
            return
        pressed = [f for f in frets if f > 0]
        for fret in _string_options(open_midis[string_idx], chord_pcs, pressed):
            frets.append(fret)
            walk(string_idx + 1)
            frets.pop()

    walk(0)

    scored = [
        dataclasses.replace(v, ergonomy_score=score_ergonomy(v, tuning)) for v in found
    ]
    scored.sort(key=lambda v: v.ergonomy_score, reverse=True)
    logger.debug(
        "search_voicings(%r): %d candidates, returning %d",
        name,
        len(found),
        min(len(scored), max_results),
    )
    return scored[:max_results]
