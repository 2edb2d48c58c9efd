"""API routes for acquiring exercise sets."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from acquisition.orchestrator import ExerciseOrchestrator
from acquisition.progress import InMemoryProgressStore
from acquisition.request import ExerciseRequest
from acquisition.service import serve_next_exercise
from backend.api.deps import (
    get_bank,
    get_cache_store,
    get_current_user_id,
    get_orchestrator,
    get_progress_store,
    get_settings,
    http_error,
)
from backend.api.schemas import (
    ExerciseLookupResponse,
    NextExerciseRequest,
    NextExerciseResponse,
    WorksheetProgressResponse,
)
from backend.cache.base import CacheStore
from backend.config import Settings
from backend.exercises import ExerciseSet
from backend.worksheets import WorksheetBank

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["exercises"])


@router.post(
    "/generate-exercise-set",
    response_model=ExerciseSet,
    response_model_exclude_none=True,
)
async def generate_exercise_set(
    request: ExerciseRequest,
    orchestrator: ExerciseOrchestrator = Depends(get_orchestrator),
    user_id: str | None = Depends(get_current_user_id),
    config: Settings = Depends(get_settings),
):
    """Serve a cached exercise set or generate a new one."""
    logger.info(
        "Exercise set requested: %s %s theme=%r force=%s key_provided=%s",
        request.exercise_type,
        request.cefr_level,
        request.theme,
        request.force_regenerate,
        bool(request.api_key),
    )
    if config.require_auth and user_id is None and not request.api_key:
        raise HTTPException(status_code=401, detail="Authentication required")

    result = await orchestrator.acquire(request)
    if not result.ok:
        raise http_error(result.error)
    return result.value


@router.get("/exercise/{exercise_id}", response_model=ExerciseLookupResponse)
async def get_exercise(
    exercise_id: str,
    cache: CacheStore = Depends(get_cache_store),
) -> ExerciseLookupResponse:
    """Look up a cached exercise set by its own id or its cache entry id."""
    entry = await cache.get_exercise_by_id(exercise_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return ExerciseLookupResponse(
        exercise=entry.data,
        exercise_type=entry.exercise_type,
        cefr_level=entry.cefr_level,
        theme=entry.theme,
        created_at=entry.created_at,
    )


@router.post(
    "/next-exercise",
    response_model=NextExerciseResponse,
    response_model_exclude_none=True,
)
async def next_exercise(
    request: NextExerciseRequest,
    orchestrator: ExerciseOrchestrator = Depends(get_orchestrator),
    bank: WorksheetBank = Depends(get_bank),
    progress_store: InMemoryProgressStore = Depends(get_progress_store),
    user_id: str | None = Depends(get_current_user_id),
) -> NextExerciseResponse:
    """Serve the learner's next static worksheet, or a generated set once they run out."""
    result = await serve_next_exercise(
        orchestrator=orchestrator,
        bank=bank,
        progress_store=progress_store,
        user_id=user_id,
        exercise_type=request.exercise_type,
        cefr_level=request.cefr_level,
        theme=request.theme,
        api_key=request.api_key,
        provider=request.provider,
    )
    if not result.ok:
        raise http_error(result.error)

    served = result.value
    progress = None
    if served.progress is not None:
        progress = WorksheetProgressResponse(
            completed=served.progress.completed,
            total=served.progress.total,
            progress_text=served.progress.progress_text,
        )
    return NextExerciseResponse(
        source=served.source,
        exercise=served.exercise,
        title=served.title,
        progress=progress,
    )
