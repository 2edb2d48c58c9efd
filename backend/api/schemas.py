"""Pydantic schemas for API request/response models.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from backend.exercises import CamelModel, CefrLevel, CorrectAnswer, ExerciseSet, ExerciseType, Provider

# --- Exercises ---


class ExerciseLookupResponse(CamelModel):
    """A cached exercise set together with what it was generated for."""

    exercise: ExerciseSet
    exercise_type: ExerciseType
    cefr_level: CefrLevel
    theme: str | None
    created_at: datetime


class NextExerciseRequest(CamelModel):
    exercise_type: ExerciseType
    cefr_level: CefrLevel
    theme: str | None = None
    provider: Provider | None = None
    api_key: str | None = Field(default=None, repr=False)


class WorksheetProgressResponse(CamelModel):
    completed: int
    total: int
    progress_text: str


class NextExerciseResponse(CamelModel):
    source: Literal["static", "generated"]
    exercise: ExerciseSet
    title: str | None = None
    progress: WorksheetProgressResponse | None = None


# --- Answers ---


class CheckAnswerRequest(CamelModel):
    question_id: str
    user_answer: str


class CheckAnswerResponse(CamelModel):
    correct: bool
    explanation: str
    correct_answer: CorrectAnswer | None = None  # Only revealed when wrong
    diacritic_warning: bool = False
    matched_answer: str | None = None


# --- Progress ---


class CompletedExercisesResponse(CamelModel):
    completed_exercises: list[str]
    record_count: int


# --- Cache ---


class CacheOverviewResponse(CamelModel):
    total_cached_exercises: int
    by_type: dict[str, int]
    keys: dict[str, int]
