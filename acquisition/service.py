"""Static-first serving of the next exercise for a learner."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from acquisition.orchestrator import ExerciseOrchestrator
from acquisition.progress import InMemoryProgressStore
from acquisition.request import ExerciseRequest
from acquisition.worksheets import StaticWorksheetRotator, WorksheetProgress
from backend.errors import AuthRequiredError, StageResult
from backend.exercises import CefrLevel, ExerciseType, Provider
from backend.worksheets import WorksheetBank

logger = logging.getLogger(__name__)


@dataclass
class ServedExercise:
    source: Literal["static", "generated"]
    exercise: object
    title: str | None = None
    progress: WorksheetProgress | None = None


async def serve_next_exercise(
    *,
    orchestrator: ExerciseOrchestrator,
    bank: WorksheetBank,
    progress_store: InMemoryProgressStore,
    user_id: str | None,
    exercise_type: ExerciseType,
    cefr_level: CefrLevel,
    theme: str | None = None,
    api_key: str | None = None,
    provider: Provider | None = None,
) -> StageResult[ServedExercise]:
    """Serve a static worksheet while any remain, then fall back to generation.

    Generation is only attempted for a learner with a session or an explicit
    API key; anyone else gets ``AuthRequiredError`` once the static
    worksheets run out.
    """
    rotator = StaticWorksheetRotator(bank, progress_store, user_id)
    worksheet = rotator.next_worksheet(exercise_type, cefr_level, theme)
    if worksheet is not None:
        return StageResult.success(
            ServedExercise(
                source="static",
                exercise=worksheet.to_exercise_set(),
                title=worksheet.title,
                progress=rotator.progress(exercise_type, cefr_level, theme),
            )
        )

    if not api_key and user_id is None:
        logger.info("Static worksheets exhausted for %s/%s and no session", exercise_type, cefr_level)
        return StageResult.failure(AuthRequiredError("Authentication required"))

    completed = (
        progress_store.get_completed_exercises(user_id, exercise_type, cefr_level, theme)
        if user_id is not None
        else []
    )
    request = ExerciseRequest(
        exercise_type=exercise_type,
        cefr_level=cefr_level,
        theme=theme,
        api_key=api_key,
        provider=provider,
        user_completed_exercises=completed,
    )
    result = await orchestrator.acquire(request)
    if not result.ok:
        return StageResult.failure(result.error)
    return StageResult.success(ServedExercise(source="generated", exercise=result.value))
