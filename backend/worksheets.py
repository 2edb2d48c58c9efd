"""Static worksheet bank: pre-authored exercise sets shipped with the app.

Worksheets are read once from ``worksheet_data/*.json`` and shared by every
learner. They also provide the worked examples embedded in generation
prompts.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field

from backend.exercises import (
    AspectOptions,
    CamelModel,
    CefrLevel,
    ExerciseType,
    ParagraphExerciseSet,
    ParagraphQuestion,
    PlainSentenceExercise,
    SentenceExerciseSet,
    VerbAspectExercise,
    iter_items,
)

logger = logging.getLogger(__name__)

WORKSHEET_DIR = Path(__file__).parent / "worksheet_data"

WORKSHEET_FILES = {
    ExerciseType.VERB_TENSES: "verb-tenses-worksheets.json",
    ExerciseType.NOUN_DECLENSION: "noun-declension-worksheets.json",
    ExerciseType.VERB_ASPECT: "verb-aspect-worksheets.json",
    ExerciseType.RELATIVE_PRONOUNS: "relative-pronouns-worksheets.json",
}


class WorksheetQuestion(CamelModel):
    id: str
    blank_number: int
    base_form: str = ""
    correct_answer: str | list[str]
    explanation: str
    is_plural: bool | None = None


class WorksheetExercise(CamelModel):
    id: str
    text: str
    correct_answer: str | list[str]
    explanation: str
    is_plural: bool | None = None
    exercise_sub_type: str | None = None
    options: AspectOptions | None = None
    correct_aspect: str | None = None


class Worksheet(CamelModel):
    """A worksheet as authored; only the fields the app reads are modelled."""

    id: str
    source: str = "static"
    exercise_type: ExerciseType
    cefr_level: CefrLevel
    title: str | None = None
    paragraph: str | None = None
    questions: list[WorksheetQuestion] = Field(default_factory=list)
    exercises: list[WorksheetExercise] = Field(default_factory=list)

    def to_exercise_set(self) -> ParagraphExerciseSet | SentenceExerciseSet:
        """Convert to the canonical shape served to learners."""
        if self.exercise_type.is_paragraph:
            return ParagraphExerciseSet(
                id=self.id,
                paragraph=self.paragraph or "",
                questions=[
                    ParagraphQuestion(
                        id=q.id,
                        blank_number=q.blank_number,
                        base_form=q.base_form,
                        correct_answer=_as_list(q.correct_answer),
                        explanation=q.explanation,
                        is_plural=q.is_plural,
                    )
                    for q in self.questions
                ],
            )

        exercises = []
        for ex in self.exercises:
            if self.exercise_type == ExerciseType.VERB_ASPECT and ex.options is not None:
                exercises.append(
                    VerbAspectExercise(
                        id=ex.id,
                        text=ex.text,
                        correct_answer=_as_list(ex.correct_answer),
                        explanation=ex.explanation,
                        is_plural=ex.is_plural,
                        options=ex.options,
                        correct_aspect=ex.correct_aspect,
                    )
                )
            else:
                exercises.append(
                    PlainSentenceExercise(
                        id=ex.id,
                        text=ex.text,
                        correct_answer=_as_list(ex.correct_answer),
                        explanation=ex.explanation,
                        is_plural=ex.is_plural,
                    )
                )
        return SentenceExerciseSet(id=self.id, exercises=exercises)


def _as_list(answer: str | list[str]) -> list[str]:
    return answer if isinstance(answer, list) else [answer]


class WorksheetBank:
    """All static worksheets, grouped by exercise type in file order."""

    def __init__(self, worksheets: dict[ExerciseType, list[Worksheet]]) -> None:
        self._worksheets = worksheets

    @classmethod
    def from_directory(cls, directory: Path = WORKSHEET_DIR) -> "WorksheetBank":
        worksheets: dict[ExerciseType, list[Worksheet]] = {}
        for exercise_type, filename in WORKSHEET_FILES.items():
            path = directory / filename
            if not path.is_file():
                logger.warning("No worksheet file for %s at %s", exercise_type, path)
                worksheets[exercise_type] = []
                continue
            raw = json.loads(path.read_text(encoding="utf-8"))
            worksheets[exercise_type] = [Worksheet.model_validate(w) for w in raw]
        logger.debug(
            "Loaded worksheets: %s",
            {str(t): len(ws) for t, ws in worksheets.items()},
        )
        return cls(worksheets)

    def for_type(self, exercise_type: ExerciseType) -> list[Worksheet]:
        return list(self._worksheets.get(exercise_type, []))

    def for_level(self, exercise_type: ExerciseType, cefr_level: CefrLevel) -> list[Worksheet]:
        return [w for w in self.for_type(exercise_type) if w.cefr_level == cefr_level]

    def example_for(self, exercise_type: ExerciseType) -> Worksheet | None:
        """The worksheet used as a worked example in generation prompts."""
        worksheets = self.for_type(exercise_type)
        return worksheets[0] if worksheets else None

    def find_question(self, question_id: str) -> object | None:
        for worksheets in self._worksheets.values():
            for worksheet in worksheets:
                for item in iter_items(worksheet.to_exercise_set()):
                    if item.id == question_id:
                        return item
        return None


@lru_cache
def get_worksheet_bank() -> WorksheetBank:
    """Return the shared bank, loading it on first call."""
    return WorksheetBank.from_directory()
