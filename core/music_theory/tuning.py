"""
core/music_theory/tuning.py — Whole-tuning profile: open chord, mood, range.

analyze_tuning_profile() looks at a tuning as a single object instead of
string groups:

    1. intervals between neighbouring strings, each with a tonal quality
    2. the open chord the strings spell, if any
    3. a mood from an ordered pattern list (first match wins)
    4. descriptive characteristics from the interval mix
    5. the pitch range from lowest to highest string
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from typing import NamedTuple

from core.music_theory.chords import detect_chords, parse_chord_name
from core.music_theory.pitch import INTERVAL_NAMES, note_to_midi, parse_pitch, simplify_interval
from core.music_theory.types import AdjacentInterval, TuningMood, TuningProfile

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Interval qualities
# ---------------------------------------------------------------------------

OCTAVE_TOKEN = "8P"

INTERVAL_QUALITIES: dict[str, str] = {
    "1P": "stable",
    "2m": "tense",
    "2M": "bright",
    "3m": "dark",
    "3M": "bright",
    "4P": "stable",
    "5d": "tense",
    "5P": "stable",
    "6m": "dark",
    "6M": "bright",
    "7m": "dark",
    "7M": "bright",
    OCTAVE_TOKEN: "open",
}

# Chord suffixes that count as a clean open tuning.
OPEN_CHORD_SUFFIXES: frozenset[str] = frozenset(
    {"", "m", "sus2", "sus4", "7", "maj7", "m7", "add9", "m(add9)", "6", "m6", "dim", "aug"}
)

MAX_OPEN_CHORD_CLASSES: int = 4
MAX_OPEN_TUNING_CLASSES: int = 5

# Names that earn the "Open " prefix when supplied by the caller.
_SIMPLE_CHORD_RE = re.compile(r"^[A-G][#b]?(m|sus[24]|5)?$")

# ---------------------------------------------------------------------------
# Moods
# ---------------------------------------------------------------------------


class _MoodPattern(NamedTuple):
    mood: TuningMood
    matches: Callable[[Sequence[str], str], bool]


def _count(tokens: Sequence[str], *wanted: str) -> int:
    return sum(1 for t in tokens if t in wanted)


# Evaluated in order; the last pattern always matches.
MOOD_PATTERNS: tuple[_MoodPattern, ...] = (
    _MoodPattern(
        TuningMood(
            "Cinematic",
            ("Epic", "Atmospheric"),
            "Wide, resonant sound suited to orchestral textures and soundscapes.",
        ),
        lambda ivs, chord: "maj9" in chord or "add9" in chord or _count(ivs, "5P") >= 2,
    ),
    _MoodPattern(
        TuningMood(
            "Jazzy",
            ("Sophisticated", "Neo-Soul"),
            "Complex intervals that suggest extended harmony and chromatic movement.",
        ),
        lambda ivs, chord: "7" in chord or sum(1 for t in ivs if t[-1] in "mM") >= 2,
    ),
    _MoodPattern(
        TuningMood(
            "Folk / Acoustic",
            ("Intimate", "Organic"),
            "Warm fourths and fifths that leave room for open melodies.",
        ),
        lambda ivs, chord: "sus" in chord or _count(ivs, "4P") >= 3,
    ),
    _MoodPattern(
        TuningMood(
            "Midwest Emo",
            ("Nostalgic", "Twinkly"),
            "Ninths and suspensions that evoke melancholy and nostalgia.",
        ),
        lambda ivs, chord: "9" in chord or ("sus" in chord and "2M" in ivs),
    ),
    _MoodPattern(
        TuningMood(
            "Dark / Tense",
            ("Somber", "Dissonant"),
            "Minor and dissonant intervals that build an uneasy atmosphere.",
        ),
        lambda ivs, _: _count(ivs, "2m", "7m", "5d") >= 2,
    ),
    _MoodPattern(
        TuningMood(
            "Open / Drone",
            ("Meditative", "Ambient"),
            "Unisons, octaves and fifths suited to drones and minimal textures.",
        ),
        lambda ivs, _: _count(ivs, "1P", OCTAVE_TOKEN, "5P") >= 3,
    ),
    _MoodPattern(
        TuningMood(
            "Experimental",
            ("Avant-garde", "Math Rock"),
            "An unusual interval mix that sidesteps conventional harmony.",
        ),
        lambda ivs, chord: True,
    ),
)


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


def adjacent_intervals(tuning: Sequence[str]) -> tuple[AdjacentInterval, ...]:
    """Intervals between each pair of neighbouring strings.

    Examples:
        >>> [i.token for i in adjacent_intervals(["E4", "B3", "G3"])]
        ['4P', '3M']
    """
    results: list[AdjacentInterval] = []
    for i in range(len(tuning) - 1):
        upper, lower = parse_pitch(tuning[i]), parse_pitch(tuning[i + 1])
        if upper.midi is not None and lower.midi is not None:
            semitones = abs(upper.midi - lower.midi)
        else:
            semitones = (upper.pitch_class - lower.pitch_class) % 12

        if semitones and semitones % 12 == 0:
            token, name = OCTAVE_TOKEN, "octave"
        else:
            token = simplify_interval(semitones)
            name = INTERVAL_NAMES[semitones % 12]

        results.append(
            AdjacentInterval(
                from_string=i,
                to_string=i + 1,
                from_note=tuning[i],
                to_note=tuning[i + 1],
                token=token,
                name=name,
                quality=INTERVAL_QUALITIES.get(token, "stable"),
                semitones=semitones,
            )
        )
    return tuple(results)


def _unique_pitch_classes(tuning: Sequence[str]) -> list[str]:
    seen: list[str] = []
    for note in tuning:
        pc = parse_pitch(note).pc_name
        if pc not in seen:
            seen.append(pc)
    return seen


def _covers(name: str, pcs: Sequence[str]) -> bool:
    descriptor = parse_chord_name(name)
    if descriptor is None:
        return False
    root = descriptor.root_pitch_class
    chord_notes = {(root + i) % 12 for i in descriptor.intervals}
    coverage = sum(1 for pc in pcs if parse_pitch(pc).pitch_class in chord_notes)
    return coverage >= len(pcs) - 1


def detect_open_chord(tuning: Sequence[str]) -> str | None:
    """Name the chord a tuning spells, e.g. "Open D", or None.

    Only tunings with at most four distinct pitch classes that form a
    simple chord type qualify.
    """
    if len(tuning) < 3:
        return None
    pcs = _unique_pitch_classes(tuning)
    if len(pcs) > MAX_OPEN_CHORD_CLASSES:
        return None

    detected = detect_chords(pcs)
    if not detected:
        return None
    name = next((d for d in detected if "/" not in d), detected[0])

    descriptor = parse_chord_name(name)
    if descriptor is None or descriptor.suffix not in OPEN_CHORD_SUFFIXES:
        return None
    if not _covers(name, pcs):
        return None
    return f"Open {name}"


def is_open_tuning(tuning: Sequence[str]) -> bool:
    """True if the open strings (at most five classes) spell a known chord."""
    pcs = _unique_pitch_classes(tuning)
    if not pcs or len(pcs) > MAX_OPEN_TUNING_CLASSES:
        return False
    detected = detect_chords(pcs)
    return bool(detected) and _covers(detected[0], pcs)


def tuning_mood(intervals: Sequence[AdjacentInterval], open_chord: str | None) -> TuningMood:
    """First mood pattern matching the interval tokens and open chord name."""
    tokens = [i.token for i in intervals]
    chord = open_chord or ""
    for pattern in MOOD_PATTERNS:
        if pattern.matches(tokens, chord):
            return pattern.mood
    return MOOD_PATTERNS[-1].mood


def tuning_characteristics(intervals: Sequence[AdjacentInterval]) -> tuple[str, ...]:
    """Descriptive traits of an interval mix; ("Balanced",) when none apply."""
    qualities = [i.quality for i in intervals]
    tokens = [i.token for i in intervals]

    traits: list[str] = []
    if qualities and qualities.count("stable") >= len(qualities) / 2:
        traits.append("Stable")
    if qualities.count("tense") >= 2:
        traits.append("Tense")
    if qualities.count("bright") >= 2:
        traits.append("Bright")
    if qualities.count("dark") >= 2:
        traits.append("Dark")

    if "5P" in tokens:
        traits.append("Wide")
    if tokens.count("4P") >= 3:
        traits.append("Quartal")
    if "2M" in tokens or "2m" in tokens:
        traits.append("Melodic")
    if OCTAVE_TOKEN in tokens:
        traits.append("Resonant")

    return tuple(traits) if traits else ("Balanced",)


def tuning_range(tuning: Sequence[str]) -> str:
    """Lowest to highest string, e.g. "E2 - E4 (2 octaves)" or "D3 - A3".

    Examples:
        >>> tuning_range(["E4", "B3", "G3", "D3", "A2", "E2"])
        'E2 - E4 (2 octaves)'
    """
    if not tuning:
        return ""
    ordered = sorted(tuning, key=lambda n: note_to_midi(n) or 0)
    lowest, highest = ordered[0], ordered[-1]
    span = (note_to_midi(highest) or 0) - (note_to_midi(lowest) or 0)
    octaves, remaining = divmod(span, 12)

    text = f"{lowest} - {highest}"
    if octaves > 0:
        text += f" ({octaves} octave{'s' if octaves > 1 else ''}"
        if remaining:
            text += f" + {remaining} st"
        text += ")"
    return text


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def analyze_tuning_profile(
    tuning: Sequence[str],
    chord_name: str | None = None,
) -> TuningProfile:
    """Summarise a tuning as a whole.

    Args:
        tuning:     Open-string pitches, string 0 = highest
        chord_name: Chord already resolved for the full string group (e.g.
                    by analyze_tuning_groups). When given it replaces the
                    internal open-chord detection; simple triads, sus and
                    power chords get the "Open " prefix and mark the tuning
                    as open.

    Returns:
        TuningProfile

    Raises:
        ValueError: If any pitch is malformed

    Examples:
        >>> analyze_tuning_profile(["D4", "A3", "F#3", "D3", "A2", "D2"]).open_chord_name
        'Open D'
    """
    intervals = adjacent_intervals(tuning)

    if chord_name:
        is_open = bool(_SIMPLE_CHORD_RE.match(chord_name))
        open_chord = f"Open {chord_name}" if is_open else chord_name
    else:
        open_chord = detect_open_chord(tuning)
        is_open = is_open_tuning(tuning)

    profile = TuningProfile(
        open_chord_name=open_chord,
        is_open_tuning=is_open,
        adjacent_intervals=intervals,
        mood=tuning_mood(intervals, open_chord),
        characteristics=tuning_characteristics(intervals),
        total_range=tuning_range(tuning),
    )
    logger.debug("Tuning %s profiled as %s", list(tuning), profile.mood.primary)
    return profile
