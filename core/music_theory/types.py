"""
core/music_theory/types.py — Frozen value objects for the fretboard harmony engine.

All types are immutable frozen dataclasses — safe to hash, cache, and use as
dict keys. No I/O, no side effects, no external dependencies beyond stdlib.

Types:
    Pitch               — a pitch class with an optional octave
    Interval            — a simplified (single-octave) interval from a root
    ChordType           — a classifier label + chord-name suffix
    ChordDescriptor     — a parsed chord name (root + suffix + optional bass)
    DiatonicChord       — a chord at a scale degree of a key
    StringGroupAnalysis — a named analysis of a note group against a root
    ChordVoicing        — one playable fingering of a chord under a tuning
    Progression         — an ordered sequence of voicings with aggregate scores
    GenerationRequest   — validated inputs for progression generation
    AdjacentInterval    — the interval between two neighbouring open strings
    TuningMood          — a descriptive mood for a tuning
    TuningProfile       — a whole-tuning summary (open chord, mood, range)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from core.config import DEFAULT_ALGORITHM_OPTIONS, AlgorithmOptions

# Canonical sharp spelling for each pitch class. pitch.py re-exports this.
NOTE_NAMES: tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
)

# Strings below this count cannot hold a triad.
MIN_TUNING_STRINGS: int = 3
MIN_CHORD_COUNT: int = 2

# ---------------------------------------------------------------------------
# Pitch
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pitch:
    """A note identity, optionally anchored to an octave.

    Examples:
        Pitch(pitch_class=4, octave=2)   # E2, MIDI 40
        Pitch(pitch_class=1)             # C# (no octave)
    """

    pitch_class: int  # 0 = C … 11 = B
    octave: int | None = None

    def __post_init__(self) -> None:
        if not (0 <= self.pitch_class <= 11):
            raise ValueError(f"Pitch class must be in [0, 11], got {self.pitch_class}")

    @property
    def pc_name(self) -> str:
        """Canonical pitch-class spelling, e.g. 'F#'."""
        return NOTE_NAMES[self.pitch_class]

    @property
    def name(self) -> str:
        """Scientific name, e.g. 'E2', or the bare pitch class without octave."""
        if self.octave is None:
            return self.pc_name
        return f"{self.pc_name}{self.octave}"

    @property
    def midi(self) -> int | None:
        """MIDI note number (C4 = 60), or None when the octave is unknown."""
        if self.octave is None:
            return None
        return (self.octave + 1) * 12 + self.pitch_class

    @property
    def frequency(self) -> float | None:
        """Equal-tempered frequency in Hz (A4 = 440), or None without octave."""
        midi = self.midi
        if midi is None:
            return None
        return 440.0 * 2 ** ((midi - 69) / 12)


# ---------------------------------------------------------------------------
# Interval
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Interval:
    """A simplified ascending interval.

    Examples:
        Interval(semitones=0, token="1P", name="perfect unison")
        Interval(semitones=7, token="5P", name="perfect fifth")
    """

    semitones: int  # 0–11, always ascending from the root
    token: str  # e.g. "3m"
    name: str  # e.g. "minor third"

    def __post_init__(self) -> None:
        if not (0 <= self.semitones <= 11):
            raise ValueError(f"Interval semitones must be in [0, 11], got {self.semitones}")
        if not self.token:
            raise ValueError("Interval token must not be empty")


# ---------------------------------------------------------------------------
# Chords
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChordType:
    """A chord type recognised by the interval classifier.

    Attributes:
        label:  Descriptive label, e.g. "major-seventh"
        suffix: Chord-name suffix appended to the root, e.g. "maj7"
    """

    label: str
    suffix: str


@dataclass(frozen=True)
class ChordDescriptor:
    """A structured chord name: root + suffix (+ optional slash bass).

    Attributes:
        root:      Root pitch class name, canonical spelling, e.g. "A"
        suffix:    Canonical suffix from the chord grammar, e.g. "m7"
        quality:   "major", "minor", "diminished", "augmented", "dominant",
                   "suspended" or "power"
        intervals: Semitones above the root (may exceed 11 for extensions)
        bass:      Slash bass pitch class name, or None
    """

    root: str
    suffix: str
    quality: str
    intervals: tuple[int, ...]
    bass: str | None = None

    @property
    def name(self) -> str:
        """Canonical chord name, e.g. 'Am7' or 'C/E'."""
        base = f"{self.root}{self.suffix}"
        return f"{base}/{self.bass}" if self.bass else base

    @property
    def root_pitch_class(self) -> int:
        return NOTE_NAMES.index(self.root)

    @property
    def pitch_classes(self) -> frozenset[int]:
        """Pitch classes sounding in the chord, slash bass included."""
        root_pc = self.root_pitch_class
        pcs = {(root_pc + i) % 12 for i in self.intervals}
        if self.bass:
            pcs.add(NOTE_NAMES.index(self.bass))
        return frozenset(pcs)


@dataclass(frozen=True)
class DiatonicChord:
    """A triad built on a scale degree of a key.

    Attributes:
        root:    Root note name, e.g. "A"
        quality: "major", "minor" or "dim"
        name:    Chord name, e.g. "Am", "Bdim"
        roman:   Roman numeral label, e.g. "vi", "vii°"
        degree:  0-based scale degree (0 = I/i)
    """

    root: str
    quality: str
    name: str
    roman: str
    degree: int

    def __post_init__(self) -> None:
        if not (0 <= self.degree <= 6):
            raise ValueError(f"DiatonicChord.degree must be in [0, 6], got {self.degree}")


# ---------------------------------------------------------------------------
# StringGroupAnalysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StringGroupAnalysis:
    """A named analysis of a group of notes against a declared root.

    ``intervals[i]`` is always the simplified ascending interval from ``root``
    to ``notes[i]``.

    Attributes:
        string_indices: Originating string indices, or 0..n-1 for marked notes
        notes:          Notes as supplied, e.g. ("E4", "B3", "G3")
        intervals:      Interval tokens from root, parallel to notes
        chord_name:     Resolved name, e.g. "Em7", "C/G", "E?"
        emotional_tag:  Descriptive flavour tag
        inversion:      Inversion label ("" when octaves are unknown)
        root:           Root pitch class name, e.g. "E"
    """

    string_indices: tuple[int, ...]
    notes: tuple[str, ...]
    intervals: tuple[str, ...]
    chord_name: str
    emotional_tag: str
    inversion: str
    root: str

    def __post_init__(self) -> None:
        if len(self.notes) != len(self.intervals):
            raise ValueError(
                f"notes ({len(self.notes)}) and intervals ({len(self.intervals)}) "
                "must have the same length"
            )
        if not self.root:
            raise ValueError("StringGroupAnalysis.root must not be empty")


# ---------------------------------------------------------------------------
# ChordVoicing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChordVoicing:
    """One playable fingering of a chord.

    Attributes:
        chord:          Chord name, e.g. "Am7"
        frets:          Per-string fret: -1 muted, 0 open, n fretted
        fingers:        Per-string finger number (0 = open/muted)
        ergonomy_score: Playability score 0–100
        drone_strings:  Indices of strings played open
        bass_note:      Lowest sounding pitch, e.g. "A2"
        notes:          Sounding pitches in string order
    """

    chord: str
    frets: tuple[int, ...]
    fingers: tuple[int, ...]
    ergonomy_score: int
    drone_strings: tuple[int, ...]
    bass_note: str
    notes: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.chord:
            raise ValueError("ChordVoicing.chord must not be empty")
        if len(self.frets) != len(self.fingers):
            raise ValueError(
                f"frets ({len(self.frets)}) and fingers ({len(self.fingers)}) "
                "must have the same length"
            )
        if not (0 <= self.ergonomy_score <= 100):
            raise ValueError(
                f"ChordVoicing.ergonomy_score must be in [0, 100], got {self.ergonomy_score}"
            )
        for fret in self.frets:
            if fret < -1:
                raise ValueError(f"Fret must be >= -1, got {fret}")

    @property
    def sounding_strings(self) -> tuple[int, ...]:
        """Indices of strings that sound (open or fretted)."""
        return tuple(i for i, f in enumerate(self.frets) if f >= 0)

    @property
    def pressed_frets(self) -> tuple[int, ...]:
        """Fret numbers of strings pressed behind a fret (> 0)."""
        return tuple(f for f in self.frets if f > 0)


# ---------------------------------------------------------------------------
# Progression
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Progression:
    """An ordered sequence of voicings realising successive chords.

    Attributes:
        id:                  Identifier, e.g. "prog_3f2a9c01d4e7"
        name:                Display name, e.g. "C - G - Am - F"
        voicings:            ChordVoicing objects in playing order
        tuning:              Tuning the voicings were searched against
        ergonomy_avg:        Mean ergonomy score of the voicings
        voice_leading_score: Mean voice-leading score across consecutive pairs
        created_at:          Creation timestamp (UTC)
    """

    id: str
    name: str
    voicings: tuple[ChordVoicing, ...]
    tuning: tuple[str, ...]
    ergonomy_avg: float
    voice_leading_score: float
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def chord_names(self) -> tuple[str, ...]:
        """Tuple of chord names, e.g. ('C', 'G', 'Am', 'F')."""
        return tuple(v.chord for v in self.voicings)

    @property
    def combined_score(self) -> float:
        """Ranking score: equal blend of ergonomy and voice leading."""
        return 0.5 * self.ergonomy_avg + 0.5 * self.voice_leading_score

    def __post_init__(self) -> None:
        if not self.voicings:
            raise ValueError("Progression.voicings must not be empty")
        if not self.tuning:
            raise ValueError("Progression.tuning must not be empty")


# ---------------------------------------------------------------------------
# GenerationRequest
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GenerationRequest:
    """Inputs to generate_progressions().

    Validation happens here so the generator only ever sees a playable
    configuration (>= 3 strings, >= 2 chords).

    Attributes:
        tuning:          Open-string pitches, string 0 = highest
        chord_count:     Number of chords per progression
        key:             Key in "Root mode" form, e.g. "C major", "A minor"
        required_chords: Chord names that must appear in every progression
        continue_from:   Progression whose last voicing seeds voice leading
        result_count:    Number of progressions to return
        algorithm:       Search / selection constraints
        seed:            Seed for pattern shuffling and extension rolls
    """

    tuning: tuple[str, ...]
    chord_count: int = 4
    key: str = "C major"
    required_chords: tuple[str, ...] = ()
    continue_from: Progression | None = None
    result_count: int = 5
    algorithm: AlgorithmOptions = DEFAULT_ALGORITHM_OPTIONS
    seed: int | None = None

    def __post_init__(self) -> None:
        if len(self.tuning) < MIN_TUNING_STRINGS:
            raise ValueError(
                f"tuning must have at least {MIN_TUNING_STRINGS} strings, got {len(self.tuning)}"
            )
        if self.chord_count < MIN_CHORD_COUNT:
            raise ValueError(
                f"chord_count must be >= {MIN_CHORD_COUNT}, got {self.chord_count}"
            )
        if self.result_count < 1:
            raise ValueError(f"result_count must be positive, got {self.result_count}")
        if len(self.required_chords) > self.chord_count:
            raise ValueError(
                f"{len(self.required_chords)} required chords do not fit in "
                f"{self.chord_count} slots"
            )


# ---------------------------------------------------------------------------
# Tuning profile
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AdjacentInterval:
    """Interval between string i and string i + 1, measured upward from the lower.

    Attributes:
        from_string: Index of the higher string
        to_string:   Index of the next (lower) string
        from_note:   Open pitch of from_string, e.g. "E4"
        to_note:     Open pitch of to_string, e.g. "B3"
        token:       Simplified interval token, "8P" for whole octaves
        name:        Long interval name, e.g. "perfect fourth"
        quality:     "stable", "tense", "open", "bright" or "dark"
        semitones:   Absolute distance in semitones
    """

    from_string: int
    to_string: int
    from_note: str
    to_note: str
    token: str
    name: str
    quality: str
    semitones: int


@dataclass(frozen=True)
class TuningMood:
    """A descriptive mood, e.g. primary="Cinematic"."""

    primary: str
    secondary: tuple[str, ...]
    description: str


@dataclass(frozen=True)
class TuningProfile:
    """Whole-tuning summary.

    Attributes:
        open_chord_name:    e.g. "Open D", a complex chord name, or None
        is_open_tuning:     True when the open strings form a simple chord
        adjacent_intervals: One entry per neighbouring string pair
        mood:               First matching mood pattern
        characteristics:    Descriptive traits, ("Balanced",) when none apply
        total_range:        e.g. "E2 - E4 (2 octaves)"
    """

    open_chord_name: str | None
    is_open_tuning: bool
    adjacent_intervals: tuple[AdjacentInterval, ...]
    mood: TuningMood
    characteristics: tuple[str, ...]
    total_range: str
