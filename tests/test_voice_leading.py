"""Tests for core/music_theory/voice_leading.py — movement between voicings."""

import pytest

from core.music_theory.types import ChordVoicing
from core.music_theory.voice_leading import average_voice_leading, score_voice_leading


def _voicing(*notes: str) -> ChordVoicing:
    frets = (0,) * len(notes) if notes else (-1, -1, -1)
    return ChordVoicing(
        chord="C",
        frets=frets,
        fingers=(0,) * len(frets),
        ergonomy_score=50,
        drone_strings=(),
        bass_note=notes[-1] if notes else "",
        notes=notes,
    )


class TestScoreVoiceLeading:
    def test_identical_voicings_score_100(self):
        c = _voicing("G4", "E4", "C4")
        assert score_voice_leading(c, c) == 100.0

    def test_one_semitone_average(self):
        # pairs from the end: C4→C4 0, E4→F4 1, G4→A4 2 → mean 1
        a = _voicing("G4", "E4", "C4")
        b = _voicing("A4", "F4", "C4")
        assert score_voice_leading(a, b) == pytest.approx(90.0)

    def test_aligned_from_bass_end(self):
        # only the two lowest voices pair up; both stay put
        a = _voicing("E4", "C3")
        b = _voicing("D4", "E4", "C3")
        assert score_voice_leading(a, b) == 100.0

    def test_floor_at_zero(self):
        a = _voicing("C2", "C2")
        b = _voicing("C6", "C6")
        assert score_voice_leading(a, b) == 0.0

    def test_empty_voicing_scores_zero(self):
        assert score_voice_leading(_voicing(), _voicing("C4")) == 0.0
        assert score_voice_leading(_voicing("C4"), _voicing()) == 0.0

    def test_symmetric(self):
        a = _voicing("G4", "E4", "C4")
        b = _voicing("B4", "D4", "G3")
        assert score_voice_leading(a, b) == score_voice_leading(b, a)


class TestAverageVoiceLeading:
    def test_single_voicing_is_100(self):
        assert average_voice_leading([_voicing("C4")]) == 100.0

    def test_empty_is_100(self):
        assert average_voice_leading([]) == 100.0

    def test_mean_of_pairs(self):
        a = _voicing("G4", "E4", "C4")
        b = _voicing("A4", "F4", "C4")
        # a→b 90, b→a 90, a→a 100
        assert average_voice_leading([a, b, a, a]) == pytest.approx((90 + 90 + 100) / 3)
