"""Validation of untrusted LLM output.

Raw model text is parsed, checked against the payload schema for its
exercise type, and only then converted into the canonical exercise model.
Any ids the model supplied are discarded and replaced with fresh UUIDs.
"""

import json
import logging
import uuid
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StringConstraints, ValidationError
from pydantic.alias_generators import to_camel

from backend.errors import InvalidJsonError, SchemaViolationError, StageResult, Violation
from backend.exercises import (
    AspectOptions,
    ExerciseType,
    ParagraphExerciseSet,
    ParagraphQuestion,
    PlainSentenceExercise,
    SentenceExerciseSet,
    VerbAspectExercise,
)
from generation.constants import MAX_ANSWER_LENGTH, MAX_ANSWER_VARIANTS
from generation.utils import strip_code_fences

logger = logging.getLogger(__name__)

AnswerText = Annotated[str, StringConstraints(min_length=1, max_length=MAX_ANSWER_LENGTH)]
AnswerPayload = AnswerText | Annotated[list[AnswerText], Field(min_length=1, max_length=MAX_ANSWER_VARIANTS)]
Explanation = Annotated[str, StringConstraints(min_length=10, max_length=500)]


class _Payload(BaseModel):
    # Unknown keys (including model-supplied ids) are dropped
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ParagraphQuestionPayload(_Payload):
    blank_number: StrictInt = Field(ge=1, le=50)
    base_form: Annotated[str, StringConstraints(min_length=1, max_length=100)]
    correct_answer: AnswerPayload
    explanation: Explanation
    is_plural: StrictBool | None = None


class ParagraphResponsePayload(_Payload):
    paragraph: Annotated[str, StringConstraints(min_length=50, max_length=2000)]
    questions: list[ParagraphQuestionPayload] = Field(min_length=3, max_length=15)


class SentenceExercisePayload(_Payload):
    text: Annotated[str, StringConstraints(min_length=10, max_length=300)]
    correct_answer: AnswerPayload
    explanation: Explanation
    is_plural: StrictBool | None = None


class AspectOptionsPayload(_Payload):
    imperfective: AnswerText
    perfective: AnswerText


class VerbAspectExercisePayload(SentenceExercisePayload):
    exercise_sub_type: Literal["verb-aspect"]
    options: AspectOptionsPayload
    correct_aspect: Literal["imperfective", "perfective"]


class SentenceResponsePayload(_Payload):
    exercises: list[SentenceExercisePayload] = Field(min_length=3, max_length=15)


class VerbAspectResponsePayload(SentenceResponsePayload):
    """Same envelope as plain sentences, with each exercise refined."""

    exercises: list[VerbAspectExercisePayload] = Field(min_length=3, max_length=15)


RESPONSE_SCHEMAS: dict[ExerciseType, type[_Payload]] = {
    ExerciseType.VERB_TENSES: ParagraphResponsePayload,
    ExerciseType.NOUN_DECLENSION: ParagraphResponsePayload,
    ExerciseType.VERB_ASPECT: VerbAspectResponsePayload,
    ExerciseType.RELATIVE_PRONOUNS: SentenceResponsePayload,
}


def new_id() -> str:
    return str(uuid.uuid4())


def _violations(error: ValidationError) -> list[Violation]:
    return [
        Violation(path=".".join(str(part) for part in err["loc"]), message=err["msg"])
        for err in error.errors()
    ]


def _to_exercise_set(payload: _Payload) -> ParagraphExerciseSet | SentenceExerciseSet:
    if isinstance(payload, ParagraphResponsePayload):
        return ParagraphExerciseSet(
            id=new_id(),
            paragraph=payload.paragraph,
            questions=[
                ParagraphQuestion(
                    id=new_id(),
                    blank_number=q.blank_number,
                    base_form=q.base_form,
                    correct_answer=q.correct_answer,
                    explanation=q.explanation,
                    is_plural=q.is_plural,
                )
                for q in payload.questions
            ],
        )

    exercises: list[PlainSentenceExercise | VerbAspectExercise] = []
    for ex in payload.exercises:
        if isinstance(ex, VerbAspectExercisePayload):
            exercises.append(
                VerbAspectExercise(
                    id=new_id(),
                    text=ex.text,
                    correct_answer=ex.correct_answer,
                    explanation=ex.explanation,
                    is_plural=ex.is_plural,
                    options=AspectOptions(
                        imperfective=ex.options.imperfective,
                        perfective=ex.options.perfective,
                    ),
                    correct_aspect=ex.correct_aspect,
                )
            )
        else:
            exercises.append(
                PlainSentenceExercise(
                    id=new_id(),
                    text=ex.text,
                    correct_answer=ex.correct_answer,
                    explanation=ex.explanation,
                    is_plural=ex.is_plural,
                )
            )
    return SentenceExerciseSet(id=new_id(), exercises=exercises)


def validate_response(
    raw_text: str, exercise_type: ExerciseType
) -> StageResult[ParagraphExerciseSet | SentenceExerciseSet]:
    """Parse and validate raw provider output for ``exercise_type``.

    Returns a failed result carrying ``InvalidJsonError`` when the text is not
    JSON, or ``SchemaViolationError`` listing every violation otherwise.
    """
    exercise_type = ExerciseType(exercise_type)
    text = strip_code_fences(raw_text)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug("Unparseable response: %s", text[:500])
        error = InvalidJsonError("Invalid JSON response from AI")
        error.__cause__ = e
        return StageResult.failure(error)

    schema = RESPONSE_SCHEMAS[exercise_type]
    try:
        payload = schema.model_validate(data)
        exercise_set = _to_exercise_set(payload)
    except ValidationError as e:
        violations = _violations(e)
        logger.warning("%s response failed validation: %d violations", exercise_type, len(violations))
        error = SchemaViolationError(violations)
        error.__cause__ = e
        return StageResult.failure(error)

    return StageResult.success(exercise_set)
