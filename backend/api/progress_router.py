"""API routes for a learner's completed exercises."""

import logging

from fastapi import APIRouter, Depends, Query

from acquisition.progress import CompletionRecord, InMemoryProgressStore
from backend.api.deps import get_progress_store, require_user_id
from backend.api.schemas import CompletedExercisesResponse
from backend.exercises import CefrLevel, ExerciseType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user/progress", tags=["progress"])


@router.get("/completed", response_model=CompletedExercisesResponse)
async def get_completed(
    exercise_type: ExerciseType = Query(alias="exerciseType"),
    cefr_level: CefrLevel = Query(alias="cefrLevel"),
    theme: str | None = Query(default=None),
    user_id: str = Depends(require_user_id),
    progress_store: InMemoryProgressStore = Depends(get_progress_store),
) -> CompletedExercisesResponse:
    """Completed exercise ids for one exercise type, level and theme."""
    completed = progress_store.get_completed_exercises(user_id, exercise_type, cefr_level, theme)
    records = progress_store.records_for(user_id, exercise_type, cefr_level, theme)
    return CompletedExercisesResponse(completed_exercises=completed, record_count=len(records))


@router.post("/completed", response_model=CompletionRecord)
async def mark_completed(
    record: CompletionRecord,
    user_id: str = Depends(require_user_id),
    progress_store: InMemoryProgressStore = Depends(get_progress_store),
) -> CompletionRecord:
    """Record a finished exercise set; returns it with its attempt number."""
    return progress_store.mark_exercise_completed(user_id, record)
