"""API routes for checking learners' answers."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.answers import check_answer
from backend.api.deps import get_bank, get_cache_store
from backend.api.schemas import CheckAnswerRequest, CheckAnswerResponse
from backend.cache.base import CacheStore
from backend.worksheets import WorksheetBank

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["answers"])


@router.post("/check-answer", response_model=CheckAnswerResponse, response_model_exclude_none=True)
async def check_answer_route(
    request: CheckAnswerRequest,
    cache: CacheStore = Depends(get_cache_store),
    bank: WorksheetBank = Depends(get_bank),
) -> CheckAnswerResponse:
    """Check one answer against a cached or static question."""
    found = await cache.find_question(request.question_id)
    item = found[1] if found is not None else bank.find_question(request.question_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Question not found")

    result = check_answer(request.user_answer, item.correct_answer)
    if result.diacritic_warning:
        logger.debug("Diacritic-only match for question %s", request.question_id)
    return CheckAnswerResponse(
        correct=result.correct,
        explanation=item.explanation,
        correct_answer=None if result.correct else item.correct_answer,
        diacritic_warning=result.diacritic_warning,
        matched_answer=result.matched_answer,
    )
