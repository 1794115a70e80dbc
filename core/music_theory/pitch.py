"""
core/music_theory/pitch.py — Pitch parsing, MIDI conversion and interval naming.

Every other module funnels note strings through here, so enharmonic inputs
(Gb/F#, E#/F, Cb/B, double accidentals) collapse to one pitch class and are
always formatted with the canonical sharp spelling.

Exports:
    NOTE_NAMES          canonical sharp names, index = pitch class
    INTERVAL_TOKENS     simplified interval tokens, index = semitones
    INTERVAL_NAMES      long interval names, index = semitones

    parse_pitch(text) → Pitch
    pitch_class(text) → str
    pitch_class_number(text) → int
    note_to_midi(text) → int | None
    midi_to_note(midi) → str
    frequency(text) → float | None
    simplify_interval(semitones) → str
    interval_between(root, note) → Interval
    transpose(pitch, semitones) → Pitch
"""

from __future__ import annotations

import re

from core.music_theory.types import NOTE_NAMES, Interval, Pitch

__all__ = [
    "NOTE_NAMES",
    "INTERVAL_TOKENS",
    "INTERVAL_NAMES",
    "parse_pitch",
    "pitch_class",
    "pitch_class_number",
    "note_to_midi",
    "midi_to_note",
    "frequency",
    "simplify_interval",
    "interval_between",
    "transpose",
]

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_LETTER_PC: dict[str, int] = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

_ACCIDENTAL_SHIFT: dict[str, int] = {
    "#": 1,
    "♯": 1,
    "x": 2,
    "b": -1,
    "♭": -1,
}

# letter, accidentals, optional (possibly negative) octave
_PITCH_RE = re.compile(r"^([A-Ga-g])([#♯b♭x]*)(-?\d+)?$")

# Semitone 6 is spelled as a diminished fifth, never an augmented fourth.
INTERVAL_TOKENS: tuple[str, ...] = (
    "1P",
    "2m",
    "2M",
    "3m",
    "3M",
    "4P",
    "5d",
    "5P",
    "6m",
    "6M",
    "7m",
    "7M",
)

INTERVAL_NAMES: tuple[str, ...] = (
    "perfect unison",
    "minor second",
    "major second",
    "minor third",
    "major third",
    "perfect fourth",
    "diminished fifth",
    "perfect fifth",
    "minor sixth",
    "major sixth",
    "minor seventh",
    "major seventh",
)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_pitch(text: str) -> Pitch:
    """Parse a note string into a Pitch.

    Accidentals shift through MIDI space, so "B#3" becomes C4 and "Cb4"
    becomes B3.

    Args:
        text: Note name with optional accidentals and octave,
              e.g. "E2", "F#", "Bb3", "Cx4"

    Returns:
        Pitch with canonical pitch class and (normalised) octave

    Raises:
        ValueError: If text is not a recognisable note

    Examples:
        >>> parse_pitch("Gb2").name
        'F#2'
        >>> parse_pitch("B#3").name
        'C4'
    """
    match = _PITCH_RE.match(text.strip()) if isinstance(text, str) else None
    if match is None:
        raise ValueError(f"Unrecognized pitch {text!r}")

    letter, accidentals, octave_text = match.groups()
    shift = sum(_ACCIDENTAL_SHIFT[ch] for ch in accidentals)
    base = _LETTER_PC[letter.upper()] + shift

    if octave_text is None:
        return Pitch(pitch_class=base % 12)

    midi = (int(octave_text) + 1) * 12 + base
    return Pitch(pitch_class=midi % 12, octave=midi // 12 - 1)


def pitch_class(text: str) -> str:
    """Return the canonical pitch-class name of a note string ("Gb2" → "F#")."""
    return parse_pitch(text).pc_name


def pitch_class_number(text: str) -> int:
    """Return the pitch class integer 0–11 of a note string."""
    return parse_pitch(text).pitch_class


def note_to_midi(text: str) -> int | None:
    """Return the MIDI number of a note string, or None if it has no octave.

    Raises:
        ValueError: If text is not a recognisable note
    """
    return parse_pitch(text).midi


def midi_to_note(midi: int) -> str:
    """Format a MIDI number as a canonical note name (40 → "E2")."""
    return Pitch(pitch_class=midi % 12, octave=midi // 12 - 1).name


def frequency(text: str) -> float | None:
    """Equal-tempered frequency of a note string (A4 = 440 Hz)."""
    return parse_pitch(text).frequency


# ---------------------------------------------------------------------------
# Intervals
# ---------------------------------------------------------------------------


def simplify_interval(semitones: int) -> str:
    """Return the single-octave interval token for a semitone distance.

    Examples:
        >>> simplify_interval(7)
        '5P'
        >>> simplify_interval(15)
        '3m'
    """
    return INTERVAL_TOKENS[semitones % 12]


def interval_between(root: str, note: str) -> Interval:
    """Ascending simplified interval from root to note.

    Octaves are ignored: only pitch classes take part, so the result is the
    same whether the note sits above or below the root.

    Raises:
        ValueError: If either argument is not a recognisable note

    Examples:
        >>> interval_between("E", "G3").token
        '3m'
        >>> interval_between("C4", "F3").token
        '4P'
    """
    semitones = (pitch_class_number(note) - pitch_class_number(root)) % 12
    return Interval(
        semitones=semitones,
        token=INTERVAL_TOKENS[semitones],
        name=INTERVAL_NAMES[semitones],
    )


def transpose(pitch: Pitch, semitones: int) -> Pitch:
    """Shift a pitch by a number of semitones, keeping octave absence intact."""
    if pitch.midi is None:
        return Pitch(pitch_class=(pitch.pitch_class + semitones) % 12)
    midi = pitch.midi + semitones
    return Pitch(pitch_class=midi % 12, octave=midi // 12 - 1)
