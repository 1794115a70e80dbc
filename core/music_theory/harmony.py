"""
core/music_theory/harmony.py — Playable progression generator.

generate_progressions() is the main algorithm:
    1. Resolve the key to its seven diatonic triads
    2. Shuffle the mode's pattern library; each attempt picks a pattern and
       rotates it by how many times the library has wrapped around
    3. Expand the pattern to chord_count by cycling; splice in required
       chords (50 % per slot, leftovers forced onto free slots)
    4. Optionally extend each chord (sevenths, ninths, …) per the options
    5. Voice each chord: filter by constraints, relax soft constraints if
       nothing survives, pick by ergonomy / voice-leading blend
    6. Aggregate scores, deduplicate, rank by 0.5·ergonomy + 0.5·voice leading

YAML Pattern Library
--------------------
Located in core/music_theory/templates/progressions.yaml.
Loaded lazily on first call and cached.

Design decisions:
    - All randomness flows through one injected random.Random, so a
      request with a seed is fully reproducible.
    - max_gaps and max_open_strings are hard limits and are never relaxed.
      A chord with no voicing under them abandons the whole attempt.
    - Required chords keep the user's spelling and are never extended.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import random
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import yaml

from core.config import (
    CHORD_EXTENSIONS,
    DEFAULT_ALGORITHM_OPTIONS,
    LOW_POSITION_MAX_FRET,
    AlgorithmOptions,
)
from core.music_theory.chords import is_valid_chord_name, parse_chord_name
from core.music_theory.ergonomy import count_string_gaps, fret_stretch, has_barre
from core.music_theory.pitch import parse_pitch, pitch_class
from core.music_theory.scales import get_diatonic_chords, parse_key
from core.music_theory.types import ChordVoicing, DiatonicChord, GenerationRequest, Progression
from core.music_theory.voice_leading import average_voice_leading, score_voice_leading
from core.music_theory.voicing import search_voicings

__all__ = [
    "generate_progressions",
    "replace_chord",
    "select_best_voicing",
    "filter_voicings",
    "apply_chord_extensions",
    "available_extensions",
    "parse_key",
]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VOICING_POOL_SIZE: int = 80
ATTEMPTS_PER_RESULT: int = 4
REQUIRED_INSERT_PROBABILITY: float = 0.5
MAX_RELAXED_STRETCH: int = 6
STRETCH_RELAXATION: int = 2
CONTINUATION_PREFIX = "Continuation: "
NAME_SEPARATOR = " - "

# Extensions each chord quality can take, before the complexity tier filter.
_QUALITY_EXTENSIONS: dict[str, frozenset[str]] = {
    "major": frozenset({"maj7", "add9", "9", "maj9", "6", "maj13", "11", "add11"}),
    "minor": frozenset({"m7", "m9", "m11", "m7b5", "madd9", "7"}),
    "diminished": frozenset({"dim7", "m7b5", "dim"}),
    "augmented": frozenset({"aug7", "7#5"}),
    "dominant": frozenset({"7", "9", "11", "13", "7#9", "7b9", "7#11", "7alt", "sus4", "sus2"}),
}

_SUS_EXTENSIONS: tuple[str, ...] = ("sus2", "sus4")

# ---------------------------------------------------------------------------
# YAML loading (lazy, cached)
# ---------------------------------------------------------------------------

_TEMPLATES_DIR: Path = Path(__file__).parent / "templates"
_PATTERN_FILE: str = "progressions.yaml"


@functools.cache
def _load_patterns() -> dict[str, tuple[tuple[int, ...], ...]]:
    """Load and cache the scale-degree pattern library.

    Returns:
        Mode name → tuple of 1-based degree sequences

    Raises:
        ValueError: If the template file is missing or holds invalid degrees
    """
    template_path = _TEMPLATES_DIR / _PATTERN_FILE
    if not template_path.exists():
        raise ValueError(f"Template file not found: {template_path}")

    with template_path.open() as fh:
        data = yaml.safe_load(fh)

    patterns: dict[str, tuple[tuple[int, ...], ...]] = {}
    for mode, entries in data.items():
        sequences: list[tuple[int, ...]] = []
        for entry in entries:
            degrees = tuple(int(d) for d in entry["degrees"])
            if not degrees or any(not (1 <= d <= 7) for d in degrees):
                raise ValueError(f"Pattern {entry.get('name')!r} has degrees outside 1..7")
            sequences.append(degrees)
        patterns[mode] = tuple(sequences)
    return patterns


def available_modes() -> list[str]:
    """Return the modes the pattern library covers."""
    return sorted(_load_patterns())


# ---------------------------------------------------------------------------
# Extensions
# ---------------------------------------------------------------------------


def available_extensions(quality: str, options: AlgorithmOptions) -> list[str]:
    """Extensions a chord of the given quality may take under the options.

    An explicit allowed_extensions list narrows the complexity tier and
    replaces the per-quality filter. prefer_sus adds sus2/sus4 for major
    and dominant-family chords.

    Examples:
        >>> available_extensions("minor", AlgorithmOptions(chord_complexity="sevenths"))
        ['7', 'm7', 'm7b5']
    """
    tier = CHORD_EXTENSIONS[options.chord_complexity]
    if options.allowed_extensions:
        return [ext for ext in tier if ext in options.allowed_extensions]

    family = quality if quality in _QUALITY_EXTENSIONS else "dominant"
    extensions = [ext for ext in tier if ext in _QUALITY_EXTENSIONS[family]]
    if options.prefer_sus and family in ("major", "dominant"):
        extensions.extend(ext for ext in _SUS_EXTENSIONS if ext not in extensions)
    return extensions


def _extended_name(root: str, quality: str, extension: str) -> str:
    if quality == "major":
        return f"{root}maj9" if extension == "9" else f"{root}{extension}"
    if quality == "minor":
        if extension in ("m7", "7"):
            return f"{root}m7"
        if extension.startswith("m"):
            return f"{root}{extension}"
        return f"{root}m{extension}"
    if quality == "diminished":
        return f"{root}{extension}" if extension in ("dim7", "m7b5") else f"{root}dim"
    return f"{root}{extension}"


def apply_chord_extensions(
    base_chord: str,
    options: AlgorithmOptions,
    rng: random.Random,
) -> str:
    """Maybe replace a chord by an extended version of itself.

    Args:
        base_chord: Chord name, e.g. "Am"
        options:    Complexity tier, probability and allowed extensions
        rng:        Random source for the probability roll and the choice

    Returns:
        Extended chord name, e.g. "Am7", or base_chord when no extension
        applies or the extended name is outside the chord grammar
    """
    if options.chord_complexity == "triads" and options.extension_probability == 0:
        return base_chord
    if rng.random() * 100 >= options.extension_probability:
        return base_chord

    descriptor = parse_chord_name(base_chord)
    if descriptor is None:
        return base_chord

    choices = available_extensions(descriptor.quality, options)
    if not choices:
        return base_chord

    extension = rng.choice(choices)
    extended = _extended_name(descriptor.root, descriptor.quality, extension)
    if not is_valid_chord_name(extended):
        logger.debug("Extension %r of %r is not a known chord", extension, base_chord)
        return base_chord
    return extended


# ---------------------------------------------------------------------------
# Voicing selection
# ---------------------------------------------------------------------------


def _bass_is_root(voicing: ChordVoicing) -> bool:
    descriptor = parse_chord_name(voicing.chord)
    if descriptor is None:
        return True
    return pitch_class(voicing.bass_note) == descriptor.root


def _passes(voicing: ChordVoicing, options: AlgorithmOptions) -> bool:
    if count_string_gaps(voicing.frets) > options.max_gaps:
        return False
    if len(voicing.drone_strings) > options.max_open_strings:
        return False
    if len(voicing.sounding_strings) < options.min_notes_per_chord:
        return False

    pressed = voicing.pressed_frets
    if pressed:
        highest = max(pressed)
        if options.position_range == "low" and highest > LOW_POSITION_MAX_FRET:
            return False
        if options.position_range == "high" and highest <= LOW_POSITION_MAX_FRET:
            return False
        if fret_stretch(voicing.frets) > options.max_stretch:
            return False

    if options.bass_is_root and not _bass_is_root(voicing):
        return False
    if not options.allow_barre_chords and has_barre(voicing.frets):
        return False
    return True


def filter_voicings(
    voicings: Sequence[ChordVoicing],
    options: AlgorithmOptions,
) -> list[ChordVoicing]:
    """Keep the voicings that satisfy every constraint in options, in order."""
    return [v for v in voicings if _passes(v, options)]


def _relaxation_chain(options: AlgorithmOptions) -> tuple[AlgorithmOptions, ...]:
    """Progressively looser option sets; the hard limits survive every step."""
    stretch = max(
        options.max_stretch,
        min(options.max_stretch + STRETCH_RELAXATION, MAX_RELAXED_STRETCH),
    )
    wider_stretch = dataclasses.replace(options, max_stretch=stretch)
    any_position = dataclasses.replace(wider_stretch, position_range="any")
    minimal = dataclasses.replace(
        DEFAULT_ALGORITHM_OPTIONS,
        max_gaps=options.max_gaps,
        max_open_strings=options.max_open_strings,
        voice_leading_weight=options.voice_leading_weight,
    )
    return (options, wider_stretch, any_position, minimal)


def select_best_voicing(
    chord_name: str,
    tuning: Sequence[str],
    previous: ChordVoicing | None,
    options: AlgorithmOptions,
) -> ChordVoicing | None:
    """Choose one voicing of a chord under the options.

    Without a previous voicing the most ergonomic candidate wins. With one,
    candidates are ranked by ergonomy × (1 − w) + voice leading × w, where
    w = voice_leading_weight / 100.

    Args:
        chord_name: Chord to voice
        tuning:     Open-string pitches with octaves
        previous:   Voicing played just before, or None
        options:    Constraints; soft ones are relaxed if nothing fits

    Returns:
        The chosen ChordVoicing, or None if no voicing satisfies even the
        hard limits
    """
    pool = search_voicings(chord_name, tuning, VOICING_POOL_SIZE)
    if not pool:
        logger.debug("No voicings at all for %r", chord_name)
        return None

    candidates: list[ChordVoicing] = []
    for stage, stage_options in enumerate(_relaxation_chain(options)):
        candidates = filter_voicings(pool, stage_options)
        if candidates:
            if stage:
                logger.debug("Voiced %r after %d relaxation step(s)", chord_name, stage)
            break

    if not candidates:
        logger.warning(
            "No voicing for %s with max_gaps=%d, max_open_strings=%d",
            chord_name,
            options.max_gaps,
            options.max_open_strings,
        )
        return None

    if previous is None:
        return candidates[0]

    weight = options.voice_leading_weight / 100
    return max(
        candidates,
        key=lambda v: v.ergonomy_score * (1 - weight) + score_voice_leading(previous, v) * weight,
    )


# ---------------------------------------------------------------------------
# Progression assembly
# ---------------------------------------------------------------------------


def _rotated_pattern(
    patterns: Sequence[tuple[int, ...]],
    slot: int,
) -> tuple[int, ...]:
    pattern = patterns[slot % len(patterns)]
    shift = (slot // len(patterns)) % len(pattern)
    return pattern[shift:] + pattern[:shift]


def _chord_plan(
    pattern: Sequence[int],
    diatonic: Sequence[DiatonicChord],
    chord_count: int,
    required: Sequence[str],
    rng: random.Random,
) -> tuple[list[str], set[int]]:
    """Expand a pattern to chord_count names and splice in required chords.

    Returns:
        (chord names, indices holding required chords)
    """
    remaining = list(required)
    names: list[str] = []
    required_slots: set[int] = set()

    for i in range(chord_count):
        if remaining and rng.random() < REQUIRED_INSERT_PROBABILITY:
            names.append(remaining.pop(rng.randrange(len(remaining))))
            required_slots.add(i)
        else:
            names.append(diatonic[pattern[i % len(pattern)] - 1].name)

    free = [i for i in range(chord_count) if i not in required_slots]
    for chord in remaining:
        slot = free.pop(rng.randrange(len(free)))
        names[slot] = chord
        required_slots.add(slot)

    return names, required_slots


def _progression_name(voicings: Sequence[ChordVoicing], continuation: bool) -> str:
    chords = NAME_SEPARATOR.join(v.chord for v in voicings)
    return f"{CONTINUATION_PREFIX}{chords}" if continuation else chords


def _build_progression(
    voicings: Sequence[ChordVoicing],
    tuning: Sequence[str],
    continuation: bool,
    rng: random.Random,
) -> Progression:
    ergonomy_avg = sum(v.ergonomy_score for v in voicings) / len(voicings)
    return Progression(
        id=f"prog_{rng.getrandbits(48):012x}",
        name=_progression_name(voicings, continuation),
        voicings=tuple(voicings),
        tuning=tuple(tuning),
        ergonomy_avg=round(ergonomy_avg, 2),
        voice_leading_score=round(average_voice_leading(voicings), 2),
        created_at=datetime.now(UTC),
    )


def _generate_single(
    request: GenerationRequest,
    pattern: Sequence[int],
    diatonic: Sequence[DiatonicChord],
    rng: random.Random,
) -> Progression | None:
    names, required_slots = _chord_plan(
        pattern, diatonic, request.chord_count, request.required_chords, rng
    )

    previous = request.continue_from.voicings[-1] if request.continue_from else None
    voicings: list[ChordVoicing] = []
    for idx, base in enumerate(names):
        name = base if idx in required_slots else apply_chord_extensions(base, request.algorithm, rng)
        voicing = select_best_voicing(name, request.tuning, previous, request.algorithm)
        if voicing is None:
            logger.debug("Abandoning attempt %s: %r has no voicing", names, name)
            return None
        voicings.append(voicing)
        previous = voicing

    return _build_progression(voicings, request.tuning, request.continue_from is not None, rng)


def _validate_request(request: GenerationRequest) -> None:
    for note in request.tuning:
        if parse_pitch(note).octave is None:
            raise ValueError(f"Tuning pitch {note!r} needs an octave")
    for chord in request.required_chords:
        if not is_valid_chord_name(chord):
            raise ValueError(f"Unknown required chord {chord!r}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_progressions(
    request: GenerationRequest,
    rng: random.Random | None = None,
) -> list[Progression]:
    """Generate ranked, playable progressions for a tuning and key.

    Args:
        request: Tuning, key, chord count, required chords, continuation and
                 algorithm options
        rng:     Random source; defaults to random.Random(request.seed)

    Returns:
        Up to request.result_count unique progressions, best first. May be
        shorter (or empty) when the constraints leave too few playable
        attempts.

    Raises:
        ValueError: If the key, a tuning pitch or a required chord is invalid

    Examples:
        >>> request = GenerationRequest(tuning=STANDARD, key="A minor", seed=7)
        >>> progressions = generate_progressions(request)
        >>> all(len(p.voicings) == 4 for p in progressions)
        True
    """
    root, mode = parse_key(request.key)
    _validate_request(request)
    rng = rng if rng is not None else random.Random(request.seed)

    diatonic = get_diatonic_chords(root, mode)
    patterns = list(_load_patterns()[mode])
    rng.shuffle(patterns)
    offset = rng.randrange(100)

    results: list[Progression] = []
    seen: set[tuple[str, ...]] = set()
    attempts = request.result_count * ATTEMPTS_PER_RESULT
    for attempt in range(attempts):
        if len(results) >= request.result_count:
            break
        pattern = _rotated_pattern(patterns, attempt + offset)
        progression = _generate_single(request, pattern, diatonic, rng)
        if progression is None or progression.chord_names in seen:
            continue
        seen.add(progression.chord_names)
        results.append(progression)

    results.sort(key=lambda p: p.combined_score, reverse=True)
    logger.info(
        "Generated %d/%d progressions in %s %s (%d strings)",
        len(results),
        request.result_count,
        root,
        mode,
        len(request.tuning),
    )
    return results[: request.result_count]


def replace_chord(
    progression: Progression,
    index: int,
    chord_name: str,
    algorithm: AlgorithmOptions = DEFAULT_ALGORITHM_OPTIONS,
) -> Progression | None:
    """Revoice one slot of a progression with a different chord.

    The new voicing is led from the preceding voicing. All other voicings,
    the id and the creation time are kept; name and aggregate scores are
    recomputed.

    Args:
        progression: Progression to edit (left untouched)
        index:       Slot to replace, 0-based
        chord_name:  New chord name
        algorithm:   Constraints for the new voicing

    Returns:
        A new Progression, or None when the chord has no valid voicing

    Raises:
        ValueError: If index is out of range
    """
    if not (0 <= index < len(progression.voicings)):
        raise ValueError(
            f"index must be in [0, {len(progression.voicings) - 1}], got {index}"
        )

    previous = progression.voicings[index - 1] if index > 0 else None
    voicing = select_best_voicing(chord_name, progression.tuning, previous, algorithm)
    if voicing is None:
        return None

    voicings = list(progression.voicings)
    voicings[index] = voicing
    ergonomy_avg = sum(v.ergonomy_score for v in voicings) / len(voicings)
    return dataclasses.replace(
        progression,
        name=_progression_name(voicings, progression.name.startswith(CONTINUATION_PREFIX)),
        voicings=tuple(voicings),
        ergonomy_avg=round(ergonomy_avg, 2),
        voice_leading_score=round(average_voice_leading(voicings), 2),
    )
