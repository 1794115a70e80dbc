"""
Tests for core/music_theory/harmony.py — playable progression generator.

Validates:
    - _load_patterns / available_modes: YAML pattern library loads
    - available_extensions / apply_chord_extensions: tiers, families, sus
    - filter_voicings / select_best_voicing: constraints and relaxation
    - generate_progressions: shape, ranking, determinism, required chords,
      continuation, extensions
    - replace_chord: slot swap, preserved identity, failures
"""

import random

import pytest

from core.config import AlgorithmOptions
from core.music_theory.chords import parse_chord_name
from core.music_theory.ergonomy import count_string_gaps
from core.music_theory.harmony import (
    CONTINUATION_PREFIX,
    _load_patterns,
    apply_chord_extensions,
    available_extensions,
    available_modes,
    filter_voicings,
    generate_progressions,
    replace_chord,
    select_best_voicing,
)
from core.music_theory.scales import get_diatonic_chords
from core.music_theory.types import GenerationRequest
from core.music_theory.voicing import search_voicings

STANDARD = ("E4", "B3", "G3", "D3", "A2", "E2")


def _request(**overrides) -> GenerationRequest:
    params = {"tuning": STANDARD, "seed": 7}
    params.update(overrides)
    return GenerationRequest(**params)


# ---------------------------------------------------------------------------
# Pattern library
# ---------------------------------------------------------------------------


class TestPatternLibrary:
    def test_modes(self):
        assert available_modes() == ["major", "minor"]

    def test_degrees_in_range(self):
        for mode, patterns in _load_patterns().items():
            assert patterns, mode
            for pattern in patterns:
                assert all(1 <= d <= 7 for d in pattern)

    def test_cached(self):
        assert _load_patterns() is _load_patterns()


# ---------------------------------------------------------------------------
# Extensions
# ---------------------------------------------------------------------------


class TestExtensions:
    def test_minor_sevenths_tier(self):
        options = AlgorithmOptions(chord_complexity="sevenths")
        assert available_extensions("minor", options) == ["7", "m7", "m7b5"]

    def test_allowed_extensions_narrow_tier(self):
        options = AlgorithmOptions(chord_complexity="sevenths", allowed_extensions=("maj7",))
        assert available_extensions("minor", options) == ["maj7"]

    def test_prefer_sus_adds_suspensions(self):
        options = AlgorithmOptions(chord_complexity="sevenths", prefer_sus=True)
        assert available_extensions("major", options) == ["maj7", "sus2", "sus4"]
        assert "sus2" not in available_extensions("minor", options)

    def test_triads_never_extend(self, rng):
        assert apply_chord_extensions("Am", AlgorithmOptions(), rng) == "Am"

    def test_zero_probability_never_extends(self, rng):
        options = AlgorithmOptions(chord_complexity="jazz", extension_probability=0)
        assert all(apply_chord_extensions("C", options, rng) == "C" for _ in range(20))

    def test_full_probability_always_extends(self, rng):
        options = AlgorithmOptions(chord_complexity="sevenths", extension_probability=100)
        for _ in range(20):
            assert apply_chord_extensions("Am", options, rng) in ("Am7", "Am7b5")

    def test_major_ninth_spelling(self, rng):
        options = AlgorithmOptions(
            chord_complexity="extended",
            extension_probability=100,
            allowed_extensions=("9",),
        )
        assert apply_chord_extensions("C", options, rng) == "Cmaj9"

    def test_diminished_keeps_family(self, rng):
        options = AlgorithmOptions(chord_complexity="sevenths", extension_probability=100)
        for _ in range(20):
            assert apply_chord_extensions("Bdim", options, rng) in ("Bdim7", "Bm7b5")

    def test_unknown_base_unchanged(self, rng):
        options = AlgorithmOptions(chord_complexity="sevenths", extension_probability=100)
        assert apply_chord_extensions("Hm", options, rng) == "Hm"


# ---------------------------------------------------------------------------
# Voicing selection
# ---------------------------------------------------------------------------


class TestVoicingSelection:
    def test_filter_respects_gaps(self):
        pool = search_voicings("C", STANDARD, 80)
        closed = filter_voicings(pool, AlgorithmOptions(max_gaps=0))
        assert closed
        assert all(count_string_gaps(v.frets) == 0 for v in closed)

    def test_filter_respects_open_strings(self):
        pool = search_voicings("G", STANDARD, 80)
        for v in filter_voicings(pool, AlgorithmOptions(max_open_strings=0, max_gaps=6)):
            assert v.drone_strings == ()

    def test_filter_low_position(self):
        pool = search_voicings("Am", STANDARD, 80)
        for v in filter_voicings(pool, AlgorithmOptions(position_range="low", max_gaps=6)):
            assert not v.pressed_frets or max(v.pressed_frets) <= 5

    def test_filter_bass_is_root(self):
        pool = search_voicings("D", STANDARD, 80)
        for v in filter_voicings(pool, AlgorithmOptions(bass_is_root=True, max_gaps=6)):
            assert v.bass_note.rstrip("0123456789") == "D"

    def test_first_chord_is_most_ergonomic(self):
        options = AlgorithmOptions()
        chosen = select_best_voicing("C", STANDARD, None, options)
        candidates = filter_voicings(search_voicings("C", STANDARD, 80), options)
        assert chosen == candidates[0]

    def test_voice_leading_weight_shapes_choice(self):
        previous = select_best_voicing("C", STANDARD, None, AlgorithmOptions())
        options = AlgorithmOptions(voice_leading_weight=100)
        smooth = select_best_voicing("G", STANDARD, previous, options)
        assert smooth is not None
        assert smooth.chord == "G"

    def test_soft_constraints_relaxed(self):
        # six sounding strings, root bass, no barre and no stretch in a high
        # position: only the fully relaxed option set can voice it
        options = AlgorithmOptions(
            min_notes_per_chord=6,
            bass_is_root=True,
            allow_barre_chords=False,
            max_stretch=0,
            position_range="high",
        )
        assert select_best_voicing("Bdim", STANDARD, None, options) is not None

    def test_unknown_chord_is_none(self):
        assert select_best_voicing("Hx", STANDARD, None, AlgorithmOptions()) is None


# ---------------------------------------------------------------------------
# generate_progressions
# ---------------------------------------------------------------------------


class TestGenerateProgressions:
    def test_shape(self):
        progressions = generate_progressions(_request())
        assert 1 <= len(progressions) <= 5
        for p in progressions:
            assert len(p.voicings) == 4
            assert p.tuning == STANDARD
            assert p.id.startswith("prog_")
            assert p.name == " - ".join(p.chord_names)

    def test_ranked_by_combined_score(self):
        progressions = generate_progressions(_request(result_count=8))
        scores = [p.combined_score for p in progressions]
        assert scores == sorted(scores, reverse=True)

    def test_unique_chord_sequences(self):
        progressions = generate_progressions(_request(result_count=8))
        names = [p.chord_names for p in progressions]
        assert len(names) == len(set(names))

    def test_triads_stay_diatonic(self):
        diatonic = {c.name for c in get_diatonic_chords("A", "minor")}
        for p in generate_progressions(_request(key="A minor")):
            assert set(p.chord_names) <= diatonic

    def test_chord_count_respected(self):
        for p in generate_progressions(_request(chord_count=7)):
            assert len(p.voicings) == 7

    def test_scores_in_range(self):
        for p in generate_progressions(_request()):
            assert 0 <= p.ergonomy_avg <= 100
            assert 0 <= p.voice_leading_score <= 100

    def test_seed_is_reproducible(self):
        first = generate_progressions(_request(seed=123))
        second = generate_progressions(_request(seed=123))
        assert [(p.id, p.chord_names) for p in first] == [(p.id, p.chord_names) for p in second]

    def test_injected_rng(self):
        first = generate_progressions(_request(seed=None), rng=random.Random(5))
        second = generate_progressions(_request(seed=None), rng=random.Random(5))
        assert [p.chord_names for p in first] == [p.chord_names for p in second]

    def test_required_chord_in_every_progression(self):
        progressions = generate_progressions(_request(key="A minor", required_chords=("E7",)))
        assert progressions
        for p in progressions:
            assert "E7" in p.chord_names

    def test_required_chords_fill_every_slot(self):
        required = ("C", "G")
        for p in generate_progressions(_request(chord_count=2, required_chords=required)):
            assert sorted(p.chord_names) == ["C", "G"]

    def test_continuation_prefix(self):
        seed = generate_progressions(_request(result_count=1))[0]
        progressions = generate_progressions(_request(continue_from=seed, seed=99))
        assert progressions
        for p in progressions:
            assert p.name.startswith(CONTINUATION_PREFIX)

    def test_extensions_applied(self):
        options = AlgorithmOptions(chord_complexity="sevenths", extension_probability=100)
        progressions = generate_progressions(_request(algorithm=options))
        assert progressions
        for p in progressions:
            for name in p.chord_names:
                assert parse_chord_name(name).suffix in {"maj7", "m7", "m7b5", "dim7"}

    def test_hard_limits_hold(self):
        options = AlgorithmOptions(max_gaps=0, max_open_strings=1)
        for p in generate_progressions(_request(algorithm=options)):
            for v in p.voicings:
                assert count_string_gaps(v.frets) == 0
                assert len(v.drone_strings) <= 1

    def test_invalid_key_raises(self):
        with pytest.raises(ValueError, match="Unknown mode"):
            generate_progressions(_request(key="C phrygian"))

    def test_tuning_without_octave_raises(self):
        with pytest.raises(ValueError, match="needs an octave"):
            generate_progressions(_request(tuning=("E", "B", "G")))

    def test_invalid_required_chord_raises(self):
        with pytest.raises(ValueError, match="Unknown required chord"):
            generate_progressions(_request(required_chords=("Hmaj7",)))


class TestGenerationRequest:
    def test_too_few_strings(self):
        with pytest.raises(ValueError, match="at least 3 strings"):
            GenerationRequest(tuning=("E4", "B3"))

    def test_chord_count_minimum(self):
        with pytest.raises(ValueError, match="chord_count"):
            GenerationRequest(tuning=STANDARD, chord_count=1)

    def test_result_count_positive(self):
        with pytest.raises(ValueError, match="result_count"):
            GenerationRequest(tuning=STANDARD, result_count=0)

    def test_required_chords_must_fit(self):
        with pytest.raises(ValueError, match="do not fit"):
            GenerationRequest(tuning=STANDARD, chord_count=2, required_chords=("C", "F", "G"))


# ---------------------------------------------------------------------------
# replace_chord
# ---------------------------------------------------------------------------


class TestReplaceChord:
    @pytest.fixture()
    def progression(self):
        return generate_progressions(_request(result_count=1))[0]

    def test_replaces_one_slot(self, progression):
        updated = replace_chord(progression, 1, "A7")
        assert updated is not None
        assert updated.chord_names[1] == "A7"
        assert updated.voicings[0] == progression.voicings[0]
        assert updated.voicings[2:] == progression.voicings[2:]

    def test_identity_preserved(self, progression):
        updated = replace_chord(progression, 0, "Dm")
        assert updated.id == progression.id
        assert updated.created_at == progression.created_at

    def test_name_and_scores_recomputed(self, progression):
        updated = replace_chord(progression, 3, "E7")
        assert updated.name == " - ".join(updated.chord_names)
        expected = sum(v.ergonomy_score for v in updated.voicings) / len(updated.voicings)
        assert updated.ergonomy_avg == pytest.approx(round(expected, 2))

    def test_original_untouched(self, progression):
        names = progression.chord_names
        replace_chord(progression, 0, "E7")
        assert progression.chord_names == names

    def test_continuation_prefix_kept(self, progression):
        continued = generate_progressions(_request(continue_from=progression, result_count=1))[0]
        updated = replace_chord(continued, 0, "C")
        assert updated.name.startswith(CONTINUATION_PREFIX)

    def test_unknown_chord_returns_none(self, progression):
        assert replace_chord(progression, 0, "Hx") is None

    @pytest.mark.parametrize("index", [-1, 4, 10])
    def test_index_out_of_range(self, progression, index):
        with pytest.raises(ValueError, match="index"):
            replace_chord(progression, index, "C")
