"""
core/music_theory/ — Pure fretboard harmony engine.

Exports:
    Types:        Pitch, Interval, ChordType, ChordDescriptor, DiatonicChord,
                  StringGroupAnalysis, ChordVoicing, Progression,
                  GenerationRequest, TuningProfile
    Analysis:     analyze_tuning_groups, analyze_marked_pitch_set, reanalyze
    Classifier:   classify
    Chords:       parse_chord_name, detect_chords
    Voicing:      search_voicings, score_ergonomy, score_voice_leading
    Progressions: generate_progressions, replace_chord
    Tuning:       analyze_tuning_profile
"""

from core.music_theory.analysis import (
    analyze_marked_pitch_set,
    analyze_tuning_groups,
    emotional_tag,
    reanalyze,
)
from core.music_theory.chords import detect_chords, is_valid_chord_name, parse_chord_name
from core.music_theory.classifier import classify
from core.music_theory.ergonomy import score_ergonomy
from core.music_theory.harmony import generate_progressions, replace_chord
from core.music_theory.inversion import detect_inversion
from core.music_theory.pitch import interval_between, parse_pitch
from core.music_theory.scales import get_diatonic_chords, get_scale_notes, parse_key
from core.music_theory.tuning import analyze_tuning_profile
from core.music_theory.types import (
    ChordDescriptor,
    ChordType,
    ChordVoicing,
    DiatonicChord,
    GenerationRequest,
    Interval,
    Pitch,
    Progression,
    StringGroupAnalysis,
    TuningProfile,
)
from core.music_theory.voice_leading import score_voice_leading
from core.music_theory.voicing import search_voicings

__all__ = [
    # Types
    "Pitch",
    "Interval",
    "ChordType",
    "ChordDescriptor",
    "DiatonicChord",
    "StringGroupAnalysis",
    "ChordVoicing",
    "Progression",
    "GenerationRequest",
    "TuningProfile",
    # Pitch / chords
    "parse_pitch",
    "interval_between",
    "parse_chord_name",
    "is_valid_chord_name",
    "detect_chords",
    "classify",
    "detect_inversion",
    # Scales
    "parse_key",
    "get_scale_notes",
    "get_diatonic_chords",
    # Analysis
    "analyze_tuning_groups",
    "analyze_marked_pitch_set",
    "reanalyze",
    "emotional_tag",
    # Voicing
    "search_voicings",
    "score_ergonomy",
    "score_voice_leading",
    # Progressions
    "generate_progressions",
    "replace_chord",
    # Tuning
    "analyze_tuning_profile",
]
