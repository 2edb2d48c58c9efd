"""Per-learner completion records.

The acquisition core only ever reads completed exercise ids. Records are
kept in process; a deployment with real accounts would back this with the
user store instead.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime

from pydantic import Field

from backend.cache.base import DEFAULT_THEME
from backend.config import utcnow
from backend.exercises import CamelModel, CefrLevel, ExerciseType

logger = logging.getLogger(__name__)


class CompletionRecord(CamelModel):
    """One finished attempt at an exercise set."""

    exercise_id: str
    exercise_type: ExerciseType
    cefr_level: CefrLevel
    theme: str | None = None
    completed_at: datetime = Field(default_factory=utcnow)
    score: dict[str, int] | None = None
    attempt_number: int = 1
    title: str | None = None


def _theme_matches(record_theme: str | None, theme: str | None) -> bool:
    return (record_theme or DEFAULT_THEME) == (theme or DEFAULT_THEME)


class InMemoryProgressStore:
    """Completion records keyed by user id."""

    def __init__(self) -> None:
        self._records: dict[str, list[CompletionRecord]] = defaultdict(list)

    def mark_exercise_completed(self, user_id: str, record: CompletionRecord) -> CompletionRecord:
        """Store ``record``, numbering it after earlier attempts at the same set."""
        previous = sum(1 for r in self._records[user_id] if r.exercise_id == record.exercise_id)
        stored = record.model_copy(update={"attempt_number": previous + 1})
        self._records[user_id].append(stored)
        logger.debug(
            "User %s completed %s (attempt %d)", user_id, record.exercise_id, stored.attempt_number
        )
        return stored

    def records_for(
        self,
        user_id: str,
        exercise_type: ExerciseType,
        cefr_level: CefrLevel,
        theme: str | None = None,
    ) -> list[CompletionRecord]:
        return [
            r
            for r in self._records.get(user_id, [])
            if r.exercise_type == exercise_type
            and r.cefr_level == cefr_level
            and _theme_matches(r.theme, theme)
        ]

    def get_completed_exercises(
        self,
        user_id: str,
        exercise_type: ExerciseType,
        cefr_level: CefrLevel,
        theme: str | None = None,
    ) -> list[str]:
        """Distinct completed exercise ids for one type, level and theme, in completion order."""
        records = self.records_for(user_id, exercise_type, cefr_level, theme)
        return list(dict.fromkeys(r.exercise_id for r in records))

    def get_records(self, user_id: str) -> list[CompletionRecord]:
        return list(self._records.get(user_id, []))
