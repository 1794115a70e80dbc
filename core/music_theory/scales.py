"""
core/music_theory/scales.py — Keys, scales and diatonic triads.

Exports:
    SCALE_FORMULAS          semitone intervals for each supported mode
    MODE_ALIASES            accepted mode spellings → canonical mode
    DIATONIC_QUALITIES      triad qualities per scale degree, per mode
    ROMAN_NUMERALS          roman numeral labels per degree, per mode

    parse_key(key) → tuple[str, str]
    get_scale_notes(root, mode) → tuple[str, ...]
    get_pitch_classes(root, mode) → frozenset[int]
    get_diatonic_chords(root, mode) → tuple[DiatonicChord, ...]
"""

from __future__ import annotations

from core.music_theory.pitch import parse_pitch
from core.music_theory.types import NOTE_NAMES, DiatonicChord

# ---------------------------------------------------------------------------
# Scale formulas (semitone intervals from root)
# ---------------------------------------------------------------------------

SCALE_FORMULAS: dict[str, tuple[int, ...]] = {
    "major": (0, 2, 4, 5, 7, 9, 11),
    "minor": (0, 2, 3, 5, 7, 8, 10),  # natural minor
}

MODE_ALIASES: dict[str, str] = {
    "major": "major",
    "ionian": "major",
    "minor": "minor",
    "natural minor": "minor",
    "aeolian": "minor",
}

# ---------------------------------------------------------------------------
# Diatonic triad qualities per scale degree (0-indexed)
# ---------------------------------------------------------------------------

DIATONIC_QUALITIES: dict[str, tuple[str, ...]] = {
    "major": ("major", "minor", "minor", "major", "major", "minor", "dim"),
    "minor": ("minor", "dim", "major", "minor", "minor", "major", "major"),
}

ROMAN_NUMERALS: dict[str, tuple[str, ...]] = {
    "major": ("I", "ii", "iii", "IV", "V", "vi", "vii°"),
    "minor": ("i", "ii°", "III", "iv", "v", "VI", "VII"),
}

_TRIAD_SUFFIX: dict[str, str] = {"major": "", "minor": "m", "dim": "dim"}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_key(key: str) -> tuple[str, str]:
    """Split a key string into a canonical root and mode.

    A bare root means major.

    Args:
        key: e.g. "C major", "A minor", "Bb aeolian", "F#"

    Returns:
        (root, mode) with root in canonical sharp spelling and mode
        "major" or "minor"

    Raises:
        ValueError: If the root or mode is unrecognized

    Examples:
        >>> parse_key("Bb natural minor")
        ('A#', 'minor')
        >>> parse_key("G")
        ('G', 'major')
    """
    parts = key.strip().split(maxsplit=1) if isinstance(key, str) else []
    if not parts:
        raise ValueError(f"Unrecognized key {key!r}")

    pitch = parse_pitch(parts[0])
    if pitch.octave is not None:
        raise ValueError(f"Key root must not carry an octave, got {parts[0]!r}")

    mode_text = parts[1].strip().lower() if len(parts) > 1 else "major"
    mode = MODE_ALIASES.get(" ".join(mode_text.split()))
    if mode is None:
        raise ValueError(f"Unknown mode {mode_text!r}. Valid: {sorted(MODE_ALIASES)}")
    return pitch.pc_name, mode


def get_scale_notes(root: str, mode: str = "major") -> tuple[str, ...]:
    """Return ordered note names for a diatonic scale.

    Args:
        root: Root note, e.g. "A", "C#", "Bb"
        mode: Mode name or alias, e.g. "major", "natural minor"

    Returns:
        Tuple of 7 note name strings

    Raises:
        ValueError: If root or mode is unrecognized

    Examples:
        >>> get_scale_notes("A", "minor")
        ('A', 'B', 'C', 'D', 'E', 'F', 'G')
    """
    canonical = MODE_ALIASES.get(mode)
    if canonical is None:
        raise ValueError(f"Unknown mode {mode!r}. Valid: {sorted(MODE_ALIASES)}")
    root_idx = parse_pitch(root).pitch_class
    return tuple(NOTE_NAMES[(root_idx + i) % 12] for i in SCALE_FORMULAS[canonical])


def get_pitch_classes(root: str, mode: str = "major") -> frozenset[int]:
    """Return the set of pitch classes (0–11) in a scale.

    Examples:
        >>> get_pitch_classes("C", "major")
        frozenset({0, 2, 4, 5, 7, 9, 11})
    """
    return frozenset(NOTE_NAMES.index(n) for n in get_scale_notes(root, mode))


def get_diatonic_chords(root: str, mode: str = "major") -> tuple[DiatonicChord, ...]:
    """Return the seven diatonic triads of a key.

    Args:
        root: Root note of the key, e.g. "C", "F#"
        mode: Mode name or alias

    Returns:
        Tuple of 7 DiatonicChord objects, degree I through VII

    Raises:
        ValueError: If root or mode is unrecognized

    Examples:
        >>> [c.name for c in get_diatonic_chords("A", "minor")]
        ['Am', 'Bdim', 'C', 'Dm', 'Em', 'F', 'G']
    """
    canonical = MODE_ALIASES.get(mode)
    if canonical is None:
        raise ValueError(f"Unknown mode {mode!r}. Valid: {sorted(MODE_ALIASES)}")

    notes = get_scale_notes(root, canonical)
    qualities = DIATONIC_QUALITIES[canonical]
    romans = ROMAN_NUMERALS[canonical]

    return tuple(
        DiatonicChord(
            root=note,
            quality=quality,
            name=f"{note}{_TRIAD_SUFFIX[quality]}",
            roman=romans[degree],
            degree=degree,
        )
        for degree, (note, quality) in enumerate(zip(notes, qualities, strict=True))
    )
