"""
core/music_theory/analysis.py — Harmonic analysis of string groups and marked notes.

Three entry points share one naming pipeline:

    1. intervals from the declared root to every note
    2. classify() on the interval set (first-match decision list)
    3. fallback to database detection when no rule matches
    4. emotional tag + inversion label

Nothing here raises on bad input. Unresolvable names come back as a bare
root, an "<root>?" marker or a slash label; unparseable note strings are
skipped with a warning.

Exports:
    analyze_tuning_groups(pitches) → list[StringGroupAnalysis]
    analyze_marked_pitch_set(pitch_classes) → list[StringGroupAnalysis]
    reanalyze(analysis, new_root) → StringGroupAnalysis
    emotional_tag(chord_name, intervals) → str
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Sequence

from core.music_theory.chords import detect_chords, parse_chord_name
from core.music_theory.classifier import classify
from core.music_theory.inversion import detect_inversion, has_octave_information
from core.music_theory.pitch import interval_between, note_to_midi, parse_pitch, pitch_class
from core.music_theory.types import StringGroupAnalysis

logger = logging.getLogger(__name__)

MIN_GROUP_SIZE: int = 3
MIN_MARKED_NOTES: int = 2

DEFAULT_TAG = "Experimental"

# ---------------------------------------------------------------------------
# Emotional tags
# ---------------------------------------------------------------------------

_TagRule = tuple[Callable[[str, Sequence[str]], bool], str]

# Evaluated in order; the first predicate that holds decides the tag.
_TAG_RULES: tuple[_TagRule, ...] = (
    (lambda name, _: "7sus4" in name, "Tension Dominant / Bluesy / Funk"),
    (lambda name, _: "sus4" in name, "Open / Folk / Spiritual"),
    (lambda name, _: "sus2" in name, "Dreamy / Nostalgic / Modern"),
    (lambda name, _: "maj9" in name or "add9" in name, "Nostalgic / Midwest Emo"),
    (lambda name, _: "m9" in name or "m11" in name, "Deep / Neo-Soul"),
    (lambda name, _: "sus" in name, "Ethereal / Soundscape"),
    (lambda name, _: "dim" in name or "b5" in name, "Tense / Dark"),
    (lambda name, ivs: "/" in name and "3m" in ivs, "Dramatic / Romantic (Minor Inversion)"),
    (lambda name, ivs: "/" in name and "3M" in ivs, "Warm / Pastoral (Major Inversion)"),
    (lambda name, _: "maj7" in name, "Dreamy / Jazz"),
    (lambda name, _: "m7" in name, "Elegant / Lo-Fi"),
)


def emotional_tag(chord_name: str, intervals: Sequence[str]) -> str:
    """Return a descriptive flavour tag for a resolved chord name.

    Args:
        chord_name: Resolved chord name, e.g. "Cmaj9", "E/G#"
        intervals:  Interval tokens from the analysis root

    Returns:
        Tag string; "Experimental" when no rule applies

    Examples:
        >>> emotional_tag("Dsus2", ["1P", "2M", "5P"])
        'Dreamy / Nostalgic / Modern'
        >>> emotional_tag("C", ["1P", "3M", "5P"])
        'Experimental'
    """
    name = chord_name or ""
    for predicate, tag in _TAG_RULES:
        if predicate(name, intervals):
            return tag
    return DEFAULT_TAG


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _intervals_from(root: str, notes: Sequence[str]) -> tuple[str, ...]:
    return tuple(interval_between(root, note).token for note in notes)


def _classified_name(root_pc: str, intervals: Sequence[str]) -> str | None:
    chord_type = classify(intervals)
    if chord_type is None:
        return None
    return f"{root_pc}{chord_type.suffix}"


def _parses(note: str) -> bool:
    try:
        parse_pitch(note)
    except ValueError:
        return False
    return True


def _tonic_of(name: str) -> str | None:
    descriptor = parse_chord_name(name)
    return descriptor.root if descriptor else None


def _inversion_for(notes: Sequence[str], root_pc: str) -> str:
    if not has_octave_information(notes):
        return ""
    return detect_inversion(notes, root_pc)


def _build(
    indices: Sequence[int],
    notes: Sequence[str],
    intervals: tuple[str, ...],
    chord_name: str,
    root_pc: str,
) -> StringGroupAnalysis:
    return StringGroupAnalysis(
        string_indices=tuple(indices),
        notes=tuple(notes),
        intervals=intervals,
        chord_name=chord_name,
        emotional_tag=emotional_tag(chord_name, intervals),
        inversion=_inversion_for(notes, root_pc),
        root=root_pc,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def analyze_tuning_groups(pitches: Sequence[str]) -> list[StringGroupAnalysis]:
    """Analyse every contiguous group of strings starting at string 0.

    Groups are the prefixes of size 3..N. The root of each group is its last
    (lowest) string. Unparseable strings are left out of every group they
    fall in, so a group's string_indices may skip them. A prefix ending on an
    unparseable string, or left with fewer than three readable strings,
    produces no analysis.

    Args:
        pitches: Open-string pitches, string 0 = highest, e.g.
                 ["E4", "B3", "G3", "D3", "A2", "E2"]

    Returns:
        One StringGroupAnalysis per analysable prefix, shortest first; empty
        when the tuning has fewer than three readable strings

    Examples:
        >>> [a.chord_name for a in analyze_tuning_groups(["E4", "B3", "G3"])]
        ['Em/G']
    """
    readable = [_parses(p) for p in pitches]
    for p, ok in zip(pitches, readable):
        if not ok:
            logger.warning("Skipping unparseable tuning pitch %r", p)

    results: list[StringGroupAnalysis] = []
    for size in range(MIN_GROUP_SIZE, len(pitches) + 1):
        indices = [i for i in range(size) if readable[i]]
        if not readable[size - 1] or len(indices) < MIN_GROUP_SIZE:
            continue
        notes = [pitches[i] for i in indices]
        root_pc = pitch_class(notes[-1])
        intervals = _intervals_from(root_pc, notes)

        chord_name = _classified_name(root_pc, intervals)
        if chord_name is None:
            by_pitch = sorted(notes, key=lambda n: note_to_midi(n) or 0)
            detected = detect_chords(by_pitch)
            chord_name = detected[0] if detected else root_pc
            logger.debug("Group %s unclassified; fallback name %r", notes, chord_name)

        results.append(_build(indices, notes, intervals, chord_name, root_pc))
    return results


def analyze_marked_pitch_set(pitch_classes: Sequence[str]) -> list[StringGroupAnalysis]:
    """Analyse a marked note set once per note, each taken as candidate root.

    Unparseable entries are dropped with a warning. Inversions are only
    labelled when every remaining note carries an octave.

    Input order matters for the database fallback: the first note is taken
    as the bass, which decides the slash names a candidate root can match.

    Args:
        pitch_classes: Marked notes, with or without octaves, e.g. ["C", "E", "G"]

    Returns:
        One analysis per (valid) input note, or [] for fewer than two notes

    Examples:
        >>> [a.chord_name for a in analyze_marked_pitch_set(["C", "E", "G"])]
        ['C', 'E?', 'G?']
    """
    notes: list[str] = []
    for entry in pitch_classes:
        if not _parses(entry):
            logger.warning("Dropping unparseable marked note %r", entry)
            continue
        notes.append(entry.strip())

    if len(notes) < MIN_MARKED_NOTES:
        return []

    indices = list(range(len(notes)))
    pcs_only = [pitch_class(n) for n in notes]
    detected: list[str] | None = None

    results: list[StringGroupAnalysis] = []
    for candidate in notes:
        root_pc = pitch_class(candidate)
        intervals = _intervals_from(root_pc, notes)

        chord_name = _classified_name(root_pc, intervals)
        if chord_name is None:
            if detected is None:
                detected = detect_chords(pcs_only)
            match = next((d for d in detected if _tonic_of(d) == root_pc), None)
            chord_name = match if match is not None else f"{root_pc}?"

        results.append(_build(indices, notes, intervals, chord_name, root_pc))
    return results


def reanalyze(analysis: StringGroupAnalysis, new_root: str) -> StringGroupAnalysis:
    """Re-derive an analysis against a different root.

    Notes and string indices are kept; intervals, name, tag and inversion
    are recomputed. When no rule matches, a detected name rooted on the new
    root is preferred, otherwise a slash label "<base>/<new_root>" is built.

    An unparseable new_root (or note) leaves the analysis as it was, with
    its name marked unresolved as "<root>?".

    Args:
        analysis: Existing analysis
        new_root: Root to analyse against, e.g. "G" or "G3"

    Returns:
        A new StringGroupAnalysis; the input is untouched

    Examples:
        >>> base = analyze_tuning_groups(["E4", "B3", "G3"])[0]
        >>> reanalyze(base, "E").chord_name
        'Em'
        >>> reanalyze(base, "Q").chord_name
        'G?'
    """
    if not _parses(new_root) or not all(_parses(n) for n in analysis.notes):
        logger.warning("Cannot reanalyze %s against %r", list(analysis.notes), new_root)
        unresolved = f"{analysis.root}?"
        return dataclasses.replace(
            analysis,
            chord_name=unresolved,
            emotional_tag=emotional_tag(unresolved, analysis.intervals),
        )

    root_pc = pitch_class(new_root)
    intervals = _intervals_from(root_pc, analysis.notes)

    chord_name = _classified_name(root_pc, intervals)
    if chord_name is None:
        detected = detect_chords(analysis.notes)
        match = next((d for d in detected if _tonic_of(d) == root_pc), None)
        if match is not None:
            chord_name = match
        else:
            base = detected[0] if detected else analysis.chord_name
            chord_name = f"{base.split('/')[0]}/{root_pc}"

    return dataclasses.replace(
        analysis,
        intervals=intervals,
        chord_name=chord_name,
        emotional_tag=emotional_tag(chord_name, intervals),
        inversion=_inversion_for(analysis.notes, root_pc),
        root=root_pc,
    )
