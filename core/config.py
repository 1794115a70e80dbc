"""
Configuration dataclasses for voicing search and progression assembly.

These immutable config objects decouple the generator's tuning knobs from
function signatures, making it easier to define standard configurations and
reuse them across requests.
"""

from dataclasses import dataclass

# Allowlists kept as module constants so core/ stays free of enum plumbing.
VALID_POSITION_RANGES: frozenset[str] = frozenset({"low", "high", "any"})

VALID_COMPLEXITIES: frozenset[str] = frozenset({"triads", "sevenths", "extended", "jazz"})

# Chord extensions available per complexity tier (suffixes in chord-name grammar).
CHORD_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "triads": (),
    "sevenths": ("7", "maj7", "m7", "dim7", "m7b5"),
    "extended": ("7", "maj7", "m7", "9", "maj9", "m9", "add9", "11", "add11"),
    "jazz": (
        "7",
        "maj7",
        "m7",
        "9",
        "maj9",
        "m9",
        "11",
        "m11",
        "13",
        "maj13",
        "7#9",
        "7b9",
        "7#11",
        "7alt",
    ),
}

# Upper fret bound of the "low" position range.
LOW_POSITION_MAX_FRET: int = 5


@dataclass(frozen=True)
class AlgorithmOptions:
    """
    Constraints and preferences for voicing selection and progression assembly.

    ``max_gaps`` and ``max_open_strings`` are hard limits: the generator never
    relaxes them. Every other field is a soft constraint that may be relaxed
    when a chord has no voicing that satisfies it.

    Attributes:
        max_open_strings: Maximum simultaneous open strings (0 = none).
        max_gaps: Maximum muted strings between the lowest and highest
            sounding strings (0 = fully closed voicings).
        position_range: "low" (highest pressed fret <= 5), "high" (> 5) or "any".
        max_stretch: Maximum distance in frets between the lowest and highest
            pressed fret.
        voice_leading_weight: 0-100, share of voice leading vs. ergonomy when
            choosing among valid voicings.
        bass_is_root: Require the lowest sounding pitch to be the chord root.
        min_notes_per_chord: Minimum number of sounding strings.
        allow_barre_chords: Permit two adjacent strings at the same pressed fret.
        chord_complexity: Extension tier, one of VALID_COMPLEXITIES.
        extension_probability: 0-100, chance of extending each chord.
        allowed_extensions: If non-empty, restricts the tier's extensions.
        prefer_sus: Allow major/dominant chords to become sus2/sus4.

    Example:
        >>> options = AlgorithmOptions(max_gaps=1, voice_leading_weight=80)
        >>> request = GenerationRequest(tuning=STANDARD, algorithm=options)
    """

    max_open_strings: int = 6
    max_gaps: int = 0
    position_range: str = "any"
    max_stretch: int = 4
    voice_leading_weight: int = 50
    bass_is_root: bool = False
    min_notes_per_chord: int = 3
    allow_barre_chords: bool = True
    chord_complexity: str = "triads"
    extension_probability: int = 0
    allowed_extensions: tuple[str, ...] = ()
    prefer_sus: bool = False

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.max_open_strings < 0:
            raise ValueError(f"max_open_strings must be non-negative, got {self.max_open_strings}")
        if self.max_gaps < 0:
            raise ValueError(f"max_gaps must be non-negative, got {self.max_gaps}")
        if self.position_range not in VALID_POSITION_RANGES:
            raise ValueError(
                f"Unknown position_range {self.position_range!r}, "
                f"valid options: {sorted(VALID_POSITION_RANGES)}"
            )
        if self.max_stretch < 0:
            raise ValueError(f"max_stretch must be non-negative, got {self.max_stretch}")
        if not (0 <= self.voice_leading_weight <= 100):
            raise ValueError(
                f"voice_leading_weight must be in [0, 100], got {self.voice_leading_weight}"
            )
        if self.min_notes_per_chord < 1:
            raise ValueError(
                f"min_notes_per_chord must be positive, got {self.min_notes_per_chord}"
            )
        if self.chord_complexity not in VALID_COMPLEXITIES:
            raise ValueError(
                f"Unknown chord_complexity {self.chord_complexity!r}, "
                f"valid options: {sorted(VALID_COMPLEXITIES)}"
            )
        if not (0 <= self.extension_probability <= 100):
            raise ValueError(
                f"extension_probability must be in [0, 100], got {self.extension_probability}"
            )
        if isinstance(self.allowed_extensions, (list, set, frozenset)):
            object.__setattr__(self, "allowed_extensions", tuple(self.allowed_extensions))


# Pre-defined configurations for common use cases

DEFAULT_ALGORITHM_OPTIONS = AlgorithmOptions()
"""Default configuration: closed voicings, any position, stretch 4, 50/50 weighting."""

OPEN_VOICINGS_OPTIONS = AlgorithmOptions(max_gaps=2, position_range="low", max_stretch=5)
"""Tolerates skipped strings; favours first-position shapes with drones."""

SMOOTH_LEADING_OPTIONS = AlgorithmOptions(voice_leading_weight=85, max_stretch=5)
"""Weights voice leading heavily over raw ergonomy."""

JAZZ_OPTIONS = AlgorithmOptions(
    max_open_strings=1,
    chord_complexity="jazz",
    extension_probability=70,
    voice_leading_weight=70,
)
"""Extended harmony with few drones, for jazz-leaning progressions."""
