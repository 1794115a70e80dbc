"""
Tests for core/music_theory/chords.py — chord grammar and database detection.

Validates:
    - parse_chord_name: roots, suffix aliases, slash basses, rejection
    - chord_pitch_classes: formula expansion
    - detect_chords: exact set match, slash naming, ordering
"""

import pytest

from core.music_theory.chords import (
    CHORD_FORMULAS,
    CHORD_QUALITIES,
    SUFFIX_ALIASES,
    chord_pitch_classes,
    detect_chords,
    is_valid_chord_name,
    parse_chord_name,
)

# ---------------------------------------------------------------------------
# Database consistency
# ---------------------------------------------------------------------------


class TestChordDatabase:
    def test_every_formula_has_quality(self):
        assert set(CHORD_FORMULAS) == set(CHORD_QUALITIES)

    def test_aliases_point_at_known_suffixes(self):
        for alias, target in SUFFIX_ALIASES.items():
            assert target in CHORD_FORMULAS, alias

    def test_formulas_start_at_root(self):
        for suffix, formula in CHORD_FORMULAS.items():
            assert formula[0] == 0, suffix


# ---------------------------------------------------------------------------
# parse_chord_name
# ---------------------------------------------------------------------------


class TestParseChordName:
    def test_major_triad(self):
        d = parse_chord_name("C")
        assert d.root == "C"
        assert d.suffix == ""
        assert d.quality == "major"
        assert d.bass is None

    def test_minor_seventh(self):
        d = parse_chord_name("Am7")
        assert d.root == "A"
        assert d.suffix == "m7"
        assert d.quality == "minor"

    def test_flat_root_normalised(self):
        assert parse_chord_name("Bbmaj7").name == "A#maj7"

    def test_slash_bass(self):
        d = parse_chord_name("C/G")
        assert d.bass == "G"
        assert d.name == "C/G"

    def test_slash_bass_with_accidental(self):
        assert parse_chord_name("D/F#").bass == "F#"

    @pytest.mark.parametrize(
        ("name", "suffix"),
        [
            ("Cmaj", ""),
            ("Cmin", "m"),
            ("C-7", "m7"),
            ("CΔ7", "maj7"),
            ("Bø", "m7b5"),
            ("Bdim", "dim"),
            ("Dsus", "sus4"),
            ("Amadd9", "m(add9)"),
            ("Em7b13", "m7(b13)"),
            ("G7sus", "7sus4"),
            ("Calt", "7alt"),
        ],
    )
    def test_aliases(self, name, suffix):
        assert parse_chord_name(name).suffix == suffix

    def test_quality_families(self):
        assert parse_chord_name("G7").quality == "dominant"
        assert parse_chord_name("Dsus2").quality == "suspended"
        assert parse_chord_name("E5").quality == "power"
        assert parse_chord_name("Caug").quality == "augmented"

    @pytest.mark.parametrize("bad", ["", "Hm", "Cblah", "C/H", "m7", "  "])
    def test_rejects_outside_grammar(self, bad):
        assert parse_chord_name(bad) is None
        assert not is_valid_chord_name(bad)

    def test_non_string_returns_none(self):
        assert parse_chord_name(None) is None  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# chord_pitch_classes
# ---------------------------------------------------------------------------


class TestChordPitchClasses:
    def test_minor_seventh(self):
        assert sorted(chord_pitch_classes("Am7")) == [0, 4, 7, 9]

    def test_extension_folds_into_octave(self):
        # Cadd9: C E G D
        assert chord_pitch_classes("Cadd9") == frozenset({0, 2, 4, 7})

    def test_slash_bass_included(self):
        # C/B adds B to C E G
        assert chord_pitch_classes("C/B") == frozenset({0, 4, 7, 11})

    def test_unknown_is_empty(self):
        assert chord_pitch_classes("Xyz") == frozenset()


# ---------------------------------------------------------------------------
# detect_chords
# ---------------------------------------------------------------------------


class TestDetectChords:
    def test_root_position_triad(self):
        assert detect_chords(["C", "E", "G"])[0] == "C"

    def test_first_note_is_bass(self):
        assert detect_chords(["E", "G", "C"]) == ["C/E"]

    def test_octaves_ignored(self):
        assert detect_chords(["G3", "B3", "E4"]) == ["Em/G"]

    def test_root_position_ranked_first(self):
        assert detect_chords(["A", "C", "E", "G"])[:2] == ["Am7", "C6/A"]

    def test_exact_match_only(self):
        # C E G B is Cmaj7, never plain C
        names = detect_chords(["C", "E", "G", "B"])
        assert "Cmaj7" in names
        assert "C" not in names

    def test_duplicate_pitch_classes_collapse(self):
        assert detect_chords(["E2", "B2", "E3", "G3", "B3", "E4"])[0] == "Em"

    def test_no_match_is_empty(self):
        assert detect_chords(["C", "C#", "D"]) == []

    def test_empty_input(self):
        assert detect_chords([]) == []

    def test_invalid_note_raises(self):
        with pytest.raises(ValueError):
            detect_chords(["C", "Q"])
