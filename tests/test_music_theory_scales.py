"""
Tests for core/music_theory/scales.py — keys, scales and diatonic triads.

Validates:
    - parse_key: root normalisation, mode aliases, bare roots, errors
    - get_scale_notes / get_pitch_classes
    - get_diatonic_chords: names, qualities, roman numerals, degrees
"""

import pytest

from core.music_theory.scales import (
    DIATONIC_QUALITIES,
    ROMAN_NUMERALS,
    SCALE_FORMULAS,
    get_diatonic_chords,
    get_pitch_classes,
    get_scale_notes,
    parse_key,
)

# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


class TestParseKey:
    def test_major(self):
        assert parse_key("C major") == ("C", "major")

    def test_minor(self):
        assert parse_key("A minor") == ("A", "minor")

    def test_flat_root_to_sharp(self):
        assert parse_key("Bb natural minor") == ("A#", "minor")

    def test_mode_aliases(self):
        assert parse_key("D ionian") == ("D", "major")
        assert parse_key("E aeolian") == ("E", "minor")

    def test_case_and_whitespace(self):
        assert parse_key("  f#   MINOR ") == ("F#", "minor")

    def test_bare_root_is_major(self):
        assert parse_key("G") == ("G", "major")

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError, match="Unknown mode"):
            parse_key("C lydian")

    def test_bad_root_raises(self):
        with pytest.raises(ValueError):
            parse_key("H major")

    def test_root_with_octave_raises(self):
        with pytest.raises(ValueError, match="octave"):
            parse_key("C4 major")

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            parse_key("   ")


# ---------------------------------------------------------------------------
# Scales
# ---------------------------------------------------------------------------


class TestScaleNotes:
    def test_formulas_have_seven_degrees(self):
        for mode, formula in SCALE_FORMULAS.items():
            assert len(formula) == 7, mode

    def test_c_major(self):
        assert get_scale_notes("C", "major") == ("C", "D", "E", "F", "G", "A", "B")

    def test_a_minor(self):
        assert get_scale_notes("A", "minor") == ("A", "B", "C", "D", "E", "F", "G")

    def test_flat_root_sharp_spelling(self):
        assert get_scale_notes("Eb", "major")[0] == "D#"

    def test_alias_mode(self):
        assert get_scale_notes("A", "natural minor") == get_scale_notes("A", "minor")

    def test_pitch_classes(self):
        assert get_pitch_classes("C", "major") == frozenset({0, 2, 4, 5, 7, 9, 11})

    def test_relative_keys_share_pitch_classes(self):
        assert get_pitch_classes("C", "major") == get_pitch_classes("A", "minor")

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError, match="Unknown mode"):
            get_scale_notes("C", "dorian")


# ---------------------------------------------------------------------------
# Diatonic chords
# ---------------------------------------------------------------------------


class TestDiatonicChords:
    def test_tables_have_seven_entries(self):
        for mode in SCALE_FORMULAS:
            assert len(DIATONIC_QUALITIES[mode]) == 7
            assert len(ROMAN_NUMERALS[mode]) == 7

    def test_c_major_names(self):
        names = [c.name for c in get_diatonic_chords("C", "major")]
        assert names == ["C", "Dm", "Em", "F", "G", "Am", "Bdim"]

    def test_a_minor_names(self):
        names = [c.name for c in get_diatonic_chords("A", "minor")]
        assert names == ["Am", "Bdim", "C", "Dm", "Em", "F", "G"]

    def test_roman_numerals(self):
        romans = [c.roman for c in get_diatonic_chords("G", "major")]
        assert romans == ["I", "ii", "iii", "IV", "V", "vi", "vii°"]

    def test_degrees_sequential(self):
        degrees = [c.degree for c in get_diatonic_chords("E", "minor")]
        assert degrees == list(range(7))

    def test_sharp_key(self):
        chords = get_diatonic_chords("F#", "minor")
        assert chords[0].name == "F#m"
        assert chords[2].name == "A"
