"""
api/schemas/music.py — Pydantic request/response schemas for fretboard endpoints.

Covers:
    /analyze/tuning              — TuningAnalysisRequest / TuningAnalysisResponse
    /analyze/marked              — MarkedNotesRequest / MarkedAnalysisResponse
    /analyze/reanalyze           — ReanalyzeRequest / StringGroupAnalysisOut
    /voicings/search             — VoicingSearchRequest / VoicingSearchResponse
    /voicings/score              — ErgonomyScoreRequest / ErgonomyScoreResponse
    /voicings/voice-leading      — VoiceLeadingRequest / VoiceLeadingResponse
    /generate/progressions       — ProgressionsRequest / ProgressionsResponse
    /generate/replace-chord      — ReplaceChordRequest / ReplaceChordResponse

Voicing and progression records round-trip losslessly: frets, fingers and
drone strings are plain integer lists, created_at is ISO-8601.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from core.config import VALID_COMPLEXITIES, VALID_POSITION_RANGES, AlgorithmOptions
from core.music_theory.types import (
    ChordVoicing,
    Progression,
    StringGroupAnalysis,
    TuningProfile,
)

MAX_STRINGS: int = 12
MAX_CHORDS: int = 16
MAX_RESULTS: int = 20
MAX_VOICINGS: int = 50


def _strip_notes(values: list[str]) -> list[str]:
    cleaned = [v.strip() for v in values]
    if any(not v for v in cleaned):
        raise ValueError("note names must not be empty")
    return cleaned


# ---------------------------------------------------------------------------
# Shared sub-schemas
# ---------------------------------------------------------------------------


class StringGroupAnalysisOut(BaseModel):
    """One named analysis of a note group against a root."""

    string_indices: list[int]
    notes: list[str]
    intervals: list[str]
    chord_name: str
    emotional_tag: str
    inversion: str
    root: str

    @classmethod
    def from_analysis(cls, analysis: StringGroupAnalysis) -> StringGroupAnalysisOut:
        return cls(
            string_indices=list(analysis.string_indices),
            notes=list(analysis.notes),
            intervals=list(analysis.intervals),
            chord_name=analysis.chord_name,
            emotional_tag=analysis.emotional_tag,
            inversion=analysis.inversion,
            root=analysis.root,
        )

    def to_analysis(self) -> StringGroupAnalysis:
        return StringGroupAnalysis(
            string_indices=tuple(self.string_indices),
            notes=tuple(self.notes),
            intervals=tuple(self.intervals),
            chord_name=self.chord_name,
            emotional_tag=self.emotional_tag,
            inversion=self.inversion,
            root=self.root,
        )


class VoicingOut(BaseModel):
    """A single playable fingering."""

    chord: str
    frets: list[int]
    fingers: list[int]
    ergonomy_score: int = Field(..., ge=0, le=100)
    drone_strings: list[int]
    bass_note: str
    notes: list[str]

    @classmethod
    def from_voicing(cls, voicing: ChordVoicing) -> VoicingOut:
        return cls(
            chord=voicing.chord,
            frets=list(voicing.frets),
            fingers=list(voicing.fingers),
            ergonomy_score=voicing.ergonomy_score,
            drone_strings=list(voicing.drone_strings),
            bass_note=voicing.bass_note,
            notes=list(voicing.notes),
        )

    def to_voicing(self) -> ChordVoicing:
        return ChordVoicing(
            chord=self.chord,
            frets=tuple(self.frets),
            fingers=tuple(self.fingers),
            ergonomy_score=self.ergonomy_score,
            drone_strings=tuple(self.drone_strings),
            bass_note=self.bass_note,
            notes=tuple(self.notes),
        )


class ProgressionOut(BaseModel):
    """A generated progression."""

    id: str
    name: str
    voicings: list[VoicingOut] = Field(..., min_length=1)
    tuning: list[str] = Field(..., min_length=1)
    ergonomy_avg: float
    voice_leading_score: float
    created_at: datetime

    @classmethod
    def from_progression(cls, progression: Progression) -> ProgressionOut:
        return cls(
            id=progression.id,
            name=progression.name,
            voicings=[VoicingOut.from_voicing(v) for v in progression.voicings],
            tuning=list(progression.tuning),
            ergonomy_avg=progression.ergonomy_avg,
            voice_leading_score=progression.voice_leading_score,
            created_at=progression.created_at,
        )

    def to_progression(self) -> Progression:
        return Progression(
            id=self.id,
            name=self.name,
            voicings=tuple(v.to_voicing() for v in self.voicings),
            tuning=tuple(self.tuning),
            ergonomy_avg=self.ergonomy_avg,
            voice_leading_score=self.voice_leading_score,
            created_at=self.created_at,
        )


class AlgorithmOptionsIn(BaseModel):
    """Voicing and progression constraints; mirrors core.config.AlgorithmOptions."""

    max_open_strings: int = Field(default=6, ge=0)
    max_gaps: int = Field(default=0, ge=0)
    position_range: str = "any"
    max_stretch: int = Field(default=4, ge=0, le=12)
    voice_leading_weight: int = Field(default=50, ge=0, le=100)
    bass_is_root: bool = False
    min_notes_per_chord: int = Field(default=3, ge=1)
    allow_barre_chords: bool = True
    chord_complexity: str = "triads"
    extension_probability: int = Field(default=0, ge=0, le=100)
    allowed_extensions: list[str] = Field(default_factory=list)
    prefer_sus: bool = False

    @field_validator("position_range")
    @classmethod
    def validate_position_range(cls, v: str) -> str:
        """Normalise and validate position range."""
        normalised = v.lower().strip()
        if normalised not in VALID_POSITION_RANGES:
            raise ValueError(
                f"Unknown position_range {v!r}. Valid: {sorted(VALID_POSITION_RANGES)}"
            )
        return normalised

    @field_validator("chord_complexity")
    @classmethod
    def validate_complexity(cls, v: str) -> str:
        """Normalise and validate complexity tier."""
        normalised = v.lower().strip()
        if normalised not in VALID_COMPLEXITIES:
            raise ValueError(
                f"Unknown chord_complexity {v!r}. Valid: {sorted(VALID_COMPLEXITIES)}"
            )
        return normalised

    def to_options(self) -> AlgorithmOptions:
        return AlgorithmOptions(
            max_open_strings=self.max_open_strings,
            max_gaps=self.max_gaps,
            position_range=self.position_range,
            max_stretch=self.max_stretch,
            voice_leading_weight=self.voice_leading_weight,
            bass_is_root=self.bass_is_root,
            min_notes_per_chord=self.min_notes_per_chord,
            allow_barre_chords=self.allow_barre_chords,
            chord_complexity=self.chord_complexity,
            extension_probability=self.extension_probability,
            allowed_extensions=tuple(self.allowed_extensions),
            prefer_sus=self.prefer_sus,
        )


# ---------------------------------------------------------------------------
# /analyze/tuning
# ---------------------------------------------------------------------------


class TuningAnalysisRequest(BaseModel):
    """Request body for POST /analyze/tuning."""

    tuning: list[str] = Field(
        ...,
        min_length=1,
        max_length=MAX_STRINGS,
        description="Open-string pitches, string 0 = highest, e.g. ['E4', 'B3', …, 'E2'].",
    )

    @field_validator("tuning")
    @classmethod
    def validate_tuning(cls, v: list[str]) -> list[str]:
        """Strip whitespace and reject empty note names."""
        return _strip_notes(v)


class AdjacentIntervalOut(BaseModel):
    """Interval between two neighbouring strings."""

    from_string: int
    to_string: int
    from_note: str
    to_note: str
    token: str
    name: str
    quality: str
    semitones: int


class TuningMoodOut(BaseModel):
    """Mood of a tuning."""

    primary: str
    secondary: list[str]
    description: str


class TuningProfileOut(BaseModel):
    """Whole-tuning summary."""

    open_chord_name: str | None
    is_open_tuning: bool
    adjacent_intervals: list[AdjacentIntervalOut]
    mood: TuningMoodOut
    characteristics: list[str]
    total_range: str

    @classmethod
    def from_profile(cls, profile: TuningProfile) -> TuningProfileOut:
        return cls(
            open_chord_name=profile.open_chord_name,
            is_open_tuning=profile.is_open_tuning,
            adjacent_intervals=[
                AdjacentIntervalOut(
                    from_string=i.from_string,
                    to_string=i.to_string,
                    from_note=i.from_note,
                    to_note=i.to_note,
                    token=i.token,
                    name=i.name,
                    quality=i.quality,
                    semitones=i.semitones,
                )
                for i in profile.adjacent_intervals
            ],
            mood=TuningMoodOut(
                primary=profile.mood.primary,
                secondary=list(profile.mood.secondary),
                description=profile.mood.description,
            ),
            characteristics=list(profile.characteristics),
            total_range=profile.total_range,
        )


class TuningAnalysisResponse(BaseModel):
    """Response body for POST /analyze/tuning."""

    tuning: list[str]
    groups: list[StringGroupAnalysisOut]
    profile: TuningProfileOut
    cached: bool = False


# ---------------------------------------------------------------------------
# /analyze/marked and /analyze/reanalyze
# ---------------------------------------------------------------------------


class MarkedNotesRequest(BaseModel):
    """Request body for POST /analyze/marked."""

    notes: list[str] = Field(
        ...,
        max_length=MAX_STRINGS * 2,
        description="Marked notes, with or without octave, e.g. ['C', 'E', 'G'].",
    )


class MarkedAnalysisResponse(BaseModel):
    """Response body for POST /analyze/marked."""

    analyses: list[StringGroupAnalysisOut]
    count: int
    cached: bool = False


class ReanalyzeRequest(BaseModel):
    """Request body for POST /analyze/reanalyze."""

    analysis: StringGroupAnalysisOut
    new_root: str = Field(..., min_length=1, description="Root to analyse against, e.g. 'G'.")


# ---------------------------------------------------------------------------
# /voicings/*
# ---------------------------------------------------------------------------


class VoicingSearchRequest(BaseModel):
    """Request body for POST /voicings/search."""

    chord_name: str = Field(..., min_length=1, description="Chord name, e.g. 'Am7', 'C/G'.")
    tuning: list[str] = Field(..., min_length=3, max_length=MAX_STRINGS)
    max_results: int = Field(default=10, ge=1, le=MAX_VOICINGS)

    @field_validator("tuning")
    @classmethod
    def validate_tuning(cls, v: list[str]) -> list[str]:
        """Strip whitespace and reject empty note names."""
        return _strip_notes(v)


class VoicingSearchResponse(BaseModel):
    """Response body for POST /voicings/search."""

    chord_name: str
    voicings: list[VoicingOut]
    count: int


class ErgonomyScoreRequest(BaseModel):
    """Request body for POST /voicings/score."""

    voicing: VoicingOut
    tuning: list[str] = Field(..., min_length=1, max_length=MAX_STRINGS)


class ErgonomyScoreResponse(BaseModel):
    """Response body for POST /voicings/score."""

    ergonomy_score: int = Field(..., ge=0, le=100)


class VoiceLeadingRequest(BaseModel):
    """Request body for POST /voicings/voice-leading."""

    voicings: list[VoicingOut] = Field(..., min_length=1)


class VoiceLeadingResponse(BaseModel):
    """Response body for POST /voicings/voice-leading."""

    pair_scores: list[float]
    average: float


# ---------------------------------------------------------------------------
# /generate/progressions
# ---------------------------------------------------------------------------


class ProgressionsRequest(BaseModel):
    """Request body for POST /generate/progressions."""

    tuning: list[str] = Field(..., min_length=3, max_length=MAX_STRINGS)
    chord_count: int = Field(default=4, ge=2, le=MAX_CHORDS)
    key: str = Field(default="C major", description="Key, e.g. 'C major', 'A minor'.")
    required_chords: list[str] = Field(default_factory=list)
    continue_from: ProgressionOut | None = None
    result_count: int = Field(default=5, ge=1, le=MAX_RESULTS)
    algorithm: AlgorithmOptionsIn = Field(default_factory=AlgorithmOptionsIn)
    seed: int | None = Field(
        default=None,
        description="Random seed for reproducibility. None = random.",
    )

    @field_validator("tuning")
    @classmethod
    def validate_tuning(cls, v: list[str]) -> list[str]:
        """Strip whitespace and reject empty note names."""
        return _strip_notes(v)


class ProgressionsResponse(BaseModel):
    """Response body for POST /generate/progressions."""

    key: str
    progressions: list[ProgressionOut]
    count: int


# ---------------------------------------------------------------------------
# /generate/replace-chord
# ---------------------------------------------------------------------------


class ReplaceChordRequest(BaseModel):
    """Request body for POST /generate/replace-chord."""

    progression: ProgressionOut
    index: int = Field(..., ge=0)
    chord_name: str = Field(..., min_length=1)
    algorithm: AlgorithmOptionsIn = Field(default_factory=AlgorithmOptionsIn)


class ReplaceChordResponse(BaseModel):
    """Response body for POST /generate/replace-chord.

    progression is null when the chord has no voicing under the constraints.
    """

    progression: ProgressionOut | None
