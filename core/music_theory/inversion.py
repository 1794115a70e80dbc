"""
core/music_theory/inversion.py — Inversion labelling from the lowest sounding note.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from core.music_theory.pitch import interval_between, parse_pitch

ROOT_POSITION = "Root position"

_INVERSION_LABELS: dict[str, str] = {
    "3m": "1st inversion",
    "3M": "1st inversion",
    "5P": "2nd inversion",
    "5d": "2nd inversion",
    "7m": "3rd inversion",
    "7M": "3rd inversion",
}

_DIGIT_RE = re.compile(r"\d")


def has_octave_information(notes: Sequence[str]) -> bool:
    """True if every note string carries an octave number."""
    return bool(notes) and all(_DIGIT_RE.search(note) for note in notes)


def detect_inversion(notes: Sequence[str], root: str) -> str:
    """Label the inversion of a chord from its lowest-pitched note.

    Notes without an octave cannot be placed and are ignored when finding
    the bass.

    Args:
        notes: Note strings with octaves, in any order
        root:  Declared chord root (pitch class or full note)

    Returns:
        "Root position", "1st inversion", "2nd inversion", "3rd inversion",
        "Inversion (<token>)" for any other bass interval, or "" when no
        note has an octave

    Raises:
        ValueError: If root or a note cannot be parsed

    Examples:
        >>> detect_inversion(["C4", "E3", "G3"], "C")
        '1st inversion'
    """
    if not notes or not root:
        return ""

    placed = [(parse_pitch(n).midi, n) for n in notes]
    placed = [(midi, n) for midi, n in placed if midi is not None]
    if not placed:
        return ""

    _, bass = min(placed, key=lambda pair: pair[0])
    token = interval_between(root, bass).token
    if token == "1P":
        return ROOT_POSITION
    return _INVERSION_LABELS.get(token, f"Inversion ({token})")
