"""
core/music_theory/classifier.py — Interval-pattern chord classification.

An ordered decision list over simplified interval tokens. Extended and
seventh chords are tested before triads, so the first matching rule is the
most specific name. Triad rules require a perfect fifth, which keeps
inversions of other chords from being misread as plain triads.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from core.music_theory.types import ChordType


class _Rule(NamedTuple):
    requires: frozenset[str]
    excludes: frozenset[str]
    chord_type: ChordType


def _rule(requires: str, excludes: str, label: str, suffix: str) -> _Rule:
    return _Rule(
        requires=frozenset(requires.split()),
        excludes=frozenset(excludes.split()),
        chord_type=ChordType(label=label, suffix=suffix),
    )


# Order matters: first match wins.
CLASSIFICATION_RULES: tuple[_Rule, ...] = (
    _rule("1P 3M 7M 2M", "", "major-ninth", "maj9"),
    _rule("1P 3M 7M", "", "major-seventh", "maj7"),
    _rule("1P 3M 7m 2M", "", "dominant-ninth", "9"),
    _rule("1P 3M 2M", "7m 7M", "added-ninth", "add9"),
    _rule("1P 3M 7m", "", "dominant-seventh", "7"),
    _rule("1P 3M 5P", "3m 7m 7M", "major-triad", ""),
    _rule("1P 3m 7m 6m", "", "minor-seventh-flat13", "m7(b13)"),
    _rule("1P 3m 7m 2M", "", "minor-ninth", "m9"),
    _rule("1P 3m 7m", "", "minor-seventh", "m7"),
    _rule("1P 3m 2M", "7m 7M", "minor-added-ninth", "m(add9)"),
    _rule("1P 3m 5P", "3M 7m 7M", "minor-triad", "m"),
    _rule("1P 4P 7m", "3m 3M", "seven-sus-four", "7sus4"),
    _rule("1P 4P 5P", "3m 3M 7m 7M", "sus-four", "sus4"),
    _rule("1P 2M 5P", "3m 3M", "sus-two", "sus2"),
    _rule("1P 3m 5d", "", "diminished", "dim"),
    _rule("1P 5P", "3m 3M 4P 2M", "power-chord", "5"),
)

# Alternative spellings folded onto the tokens the rules use.
_TOKEN_ALIASES: dict[str, str] = {"8P": "1P", "d5": "5d"}


def classify(intervals: Iterable[str]) -> ChordType | None:
    """Classify a collection of interval tokens measured from a root.

    Args:
        intervals: Simplified interval tokens, e.g. ["1P", "3m", "5P", "7m"].
                   "8P" counts as the root and "d5" as "5d".

    Returns:
        The first matching ChordType, or None when no rule matches

    Examples:
        >>> classify(["1P", "3m", "5P", "7m", "4P"]).suffix
        'm7'
        >>> classify(["1P", "3M", "6M"]) is None
        True
    """
    present = frozenset(_TOKEN_ALIASES.get(token, token) for token in intervals)
    for rule in CLASSIFICATION_RULES:
        if rule.requires <= present and not (rule.excludes & present):
            return rule.chord_type
    return None
