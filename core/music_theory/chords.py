"""
core/music_theory/chords.py — Chord-name grammar and pitch-class chord database.

A chord name is ``<root><suffix>[/<bass>]``. The suffix is looked up in
CHORD_FORMULAS after alias normalisation (``Maj7`` → ``maj7``, ``-`` → ``m``,
``ø`` → ``m7b5`` …). Names outside the grammar parse to None instead of
raising, because they arrive from free-form user input.

Exports:
    CHORD_FORMULAS      canonical suffix → semitone intervals above the root
    CHORD_QUALITIES     canonical suffix → quality family
    SUFFIX_ALIASES      alternative suffix spellings → canonical suffix

    parse_chord_name(name) → ChordDescriptor | None
    is_valid_chord_name(name) → bool
    chord_pitch_classes(name) → frozenset[int]
    detect_chords(notes) → list[str]
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from core.music_theory.pitch import parse_pitch
from core.music_theory.types import NOTE_NAMES, ChordDescriptor

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Chord database
# ---------------------------------------------------------------------------

CHORD_FORMULAS: dict[str, tuple[int, ...]] = {
    # Triads, power and sus
    "": (0, 4, 7),
    "m": (0, 3, 7),
    "dim": (0, 3, 6),
    "aug": (0, 4, 8),
    "sus2": (0, 2, 7),
    "sus4": (0, 5, 7),
    "5": (0, 7),
    # Sixths and sevenths
    "6": (0, 4, 7, 9),
    "m6": (0, 3, 7, 9),
    "7": (0, 4, 7, 10),
    "maj7": (0, 4, 7, 11),
    "m7": (0, 3, 7, 10),
    "mMaj7": (0, 3, 7, 11),
    "dim7": (0, 3, 6, 9),
    "m7b5": (0, 3, 6, 10),
    "aug7": (0, 4, 8, 10),
    "7#5": (0, 4, 8, 10),
    "7sus4": (0, 5, 7, 10),
    # Added tones and ninths
    "add9": (0, 4, 7, 14),
    "m(add9)": (0, 3, 7, 14),
    "9": (0, 4, 7, 10, 14),
    "maj9": (0, 4, 7, 11, 14),
    "m9": (0, 3, 7, 10, 14),
    # Elevenths
    "11": (0, 7, 10, 14, 17),
    "m11": (0, 3, 7, 10, 14, 17),
    "add11": (0, 4, 7, 17),
    # Thirteenths
    "13": (0, 4, 7, 10, 14, 21),
    "maj13": (0, 4, 7, 11, 14, 21),
    # Altered dominants
    "7b9": (0, 4, 7, 10, 13),
    "7#9": (0, 4, 7, 10, 15),
    "7#11": (0, 4, 7, 10, 18),
    "7alt": (0, 4, 10, 13, 15, 18, 20),
    # Minor seventh with flat thirteenth
    "m7(b13)": (0, 3, 7, 10, 20),
}

CHORD_QUALITIES: dict[str, str] = {
    "": "major",
    "m": "minor",
    "dim": "diminished",
    "aug": "augmented",
    "sus2": "suspended",
    "sus4": "suspended",
    "5": "power",
    "6": "major",
    "m6": "minor",
    "7": "dominant",
    "maj7": "major",
    "m7": "minor",
    "mMaj7": "minor",
    "dim7": "diminished",
    "m7b5": "diminished",
    "aug7": "augmented",
    "7#5": "augmented",
    "7sus4": "suspended",
    "add9": "major",
    "m(add9)": "minor",
    "9": "dominant",
    "maj9": "major",
    "m9": "minor",
    "11": "dominant",
    "m11": "minor",
    "add11": "major",
    "13": "dominant",
    "maj13": "major",
    "7b9": "dominant",
    "7#9": "dominant",
    "7#11": "dominant",
    "7alt": "dominant",
    "m7(b13)": "minor",
}

SUFFIX_ALIASES: dict[str, str] = {
    "M": "",
    "maj": "",
    "major": "",
    "min": "m",
    "mi": "m",
    "-": "m",
    "minor": "m",
    "°": "dim",
    "o": "dim",
    "+": "aug",
    "#5": "aug",
    "sus": "sus4",
    "2": "sus2",
    "M7": "maj7",
    "Maj7": "maj7",
    "ma7": "maj7",
    "Δ": "maj7",
    "Δ7": "maj7",
    "min7": "m7",
    "mi7": "m7",
    "-7": "m7",
    "mM7": "mMaj7",
    "m(maj7)": "mMaj7",
    "minMaj7": "mMaj7",
    "°7": "dim7",
    "o7": "dim7",
    "ø": "m7b5",
    "ø7": "m7b5",
    "m7-5": "m7b5",
    "+7": "aug7",
    "7sus": "7sus4",
    "add2": "add9",
    "madd9": "m(add9)",
    "m(9)": "m(add9)",
    "M9": "maj9",
    "Maj9": "maj9",
    "min9": "m9",
    "min11": "m11",
    "M13": "maj13",
    "Maj13": "maj13",
    "alt": "7alt",
    "m7b13": "m7(b13)",
}

# root, suffix, optional slash bass
_CHORD_RE = re.compile(r"^([A-Ga-g][#♯b♭x]*)(.*?)(?:/([A-Ga-g][#♯b♭x]*))?$")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _canonical_suffix(suffix: str) -> str | None:
    if suffix in CHORD_FORMULAS:
        return suffix
    return SUFFIX_ALIASES.get(suffix)


def parse_chord_name(name: str) -> ChordDescriptor | None:
    """Parse a chord name into its root, canonical suffix and optional bass.

    Args:
        name: Chord name, e.g. "Am7", "Bbmaj9", "C/G", "F#ø"

    Returns:
        ChordDescriptor, or None when the name is outside the grammar

    Examples:
        >>> parse_chord_name("Bbmaj7").name
        'A#maj7'
        >>> parse_chord_name("C/E").bass
        'E'
        >>> parse_chord_name("Hm") is None
        True
    """
    if not isinstance(name, str):
        return None
    match = _CHORD_RE.match(name.strip())
    if match is None:
        return None

    root_text, suffix_text, bass_text = match.groups()
    suffix = _canonical_suffix(suffix_text)
    if suffix is None:
        return None

    try:
        root = parse_pitch(root_text).pc_name
        bass = parse_pitch(bass_text).pc_name if bass_text else None
    except ValueError:
        return None

    return ChordDescriptor(
        root=root,
        suffix=suffix,
        quality=CHORD_QUALITIES[suffix],
        intervals=CHORD_FORMULAS[suffix],
        bass=bass,
    )


def is_valid_chord_name(name: str) -> bool:
    """True if name belongs to the chord grammar."""
    return parse_chord_name(name) is not None


def chord_pitch_classes(name: str) -> frozenset[int]:
    """Pitch classes of a chord name (slash bass included), empty if unknown.

    Examples:
        >>> sorted(chord_pitch_classes("Am7"))
        [0, 4, 7, 9]
    """
    descriptor = parse_chord_name(name)
    if descriptor is None:
        return frozenset()
    return descriptor.pitch_classes


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def detect_chords(notes: Sequence[str]) -> list[str]:
    """Name every chord whose pitch-class set equals the notes' set.

    The first note is treated as the bass. Each distinct pitch class is tried
    as tonic; a tonic other than the bass yields a slash name. Results are
    ordered root-position first, then shorter names, then alphabetically.

    Args:
        notes: Note strings, bass first, e.g. ["E2", "G2", "B2", "D3"]

    Returns:
        Chord names, possibly empty

    Raises:
        ValueError: If any note cannot be parsed

    Examples:
        >>> detect_chords(["E", "G", "C"])
        ['C/E']
        >>> detect_chords(["A", "C", "E", "G"])[:2]
        ['Am7', 'C6/A']
    """
    if not notes:
        return []

    pcs_in_order: list[int] = []
    for note in notes:
        pc = parse_pitch(note).pitch_class
        if pc not in pcs_in_order:
            pcs_in_order.append(pc)
    note_set = frozenset(pcs_in_order)
    bass = pcs_in_order[0]

    names: set[str] = set()
    for tonic in pcs_in_order:
        for suffix, formula in CHORD_FORMULAS.items():
            formula_pcs = frozenset((tonic + i) % 12 for i in formula)
            if formula_pcs != note_set:
                continue
            name = f"{NOTE_NAMES[tonic]}{suffix}"
            if tonic != bass:
                name = f"{name}/{NOTE_NAMES[bass]}"
            names.add(name)

    ranked = sorted(names, key=lambda n: ("/" in n, len(n), n))
    logger.debug("detect_chords(%s) → %s", list(notes), ranked)
    return ranked
