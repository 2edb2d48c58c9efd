"""Rotation through the static worksheet bank for one learner."""

from __future__ import annotations

from dataclasses import dataclass

from acquisition.progress import InMemoryProgressStore
from backend.exercises import CefrLevel, ExerciseType
from backend.worksheets import Worksheet, WorksheetBank


@dataclass
class WorksheetProgress:
    completed: int
    total: int

    @property
    def progress_text(self) -> str:
        return f"{self.completed}/{self.total}"


class StaticWorksheetRotator:
    """Hands out the next static worksheet a learner has not completed.

    Worksheets are served in bank order. An anonymous learner (no user id)
    has no progress, so always gets the first worksheet for the level.
    """

    def __init__(
        self,
        bank: WorksheetBank,
        progress_store: InMemoryProgressStore,
        user_id: str | None = None,
    ) -> None:
        self.bank = bank
        self.progress_store = progress_store
        self.user_id = user_id

    def _completed(
        self, exercise_type: ExerciseType, cefr_level: CefrLevel, theme: str | None
    ) -> set[str]:
        if self.user_id is None:
            return set()
        return set(
            self.progress_store.get_completed_exercises(self.user_id, exercise_type, cefr_level, theme)
        )

    def next_worksheet(
        self, exercise_type: ExerciseType, cefr_level: CefrLevel, theme: str | None = None
    ) -> Worksheet | None:
        """First worksheet for the level not yet completed, or None when exhausted."""
        completed = self._completed(exercise_type, cefr_level, theme)
        for worksheet in self.bank.for_level(exercise_type, cefr_level):
            if worksheet.id not in completed:
                return worksheet
        return None

    def has_remaining(
        self, exercise_type: ExerciseType, cefr_level: CefrLevel, theme: str | None = None
    ) -> bool:
        return self.next_worksheet(exercise_type, cefr_level, theme) is not None

    def progress(
        self, exercise_type: ExerciseType, cefr_level: CefrLevel, theme: str | None = None
    ) -> WorksheetProgress:
        worksheets = self.bank.for_level(exercise_type, cefr_level)
        completed = self._completed(exercise_type, cefr_level, theme)
        done = sum(1 for w in worksheets if w.id in completed)
        return WorksheetProgress(completed=done, total=len(worksheets))
