"""Canonical exercise shapes shared by the cache, generator and API.

Every exercise set carries a ``kind`` discriminant and every sentence
exercise carries an ``exerciseSubType`` discriminant, so callers never have
to guess a payload's shape from the fields it happens to contain.
Serialized field names are camelCase to match the public JSON contract.
"""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from backend.config import utcnow


class ExerciseType(StrEnum):
    """The grammatical skill an exercise set drills."""

    VERB_TENSES = "verbTenses"
    NOUN_DECLENSION = "nounDeclension"
    VERB_ASPECT = "verbAspect"
    RELATIVE_PRONOUNS = "relativePronouns"

    @property
    def is_paragraph(self) -> bool:
        """Paragraph types fill numbered blanks in one connected story."""
        return self in PARAGRAPH_TYPES


class CefrLevel(StrEnum):
    A1 = "A1"
    A2_1 = "A2.1"
    A2_2 = "A2.2"
    B1_1 = "B1.1"


class Provider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


PARAGRAPH_TYPES = frozenset({ExerciseType.VERB_TENSES, ExerciseType.NOUN_DECLENSION})

CorrectAnswer = str | list[str]


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Paragraph exercises ---


class ParagraphQuestion(CamelModel):
    id: str
    blank_number: int
    base_form: str
    correct_answer: CorrectAnswer
    explanation: str
    is_plural: bool | None = None


class ParagraphExerciseSet(CamelModel):
    """A story with numbered blanks (``___1___``) and one question per blank."""

    kind: Literal["paragraph"] = "paragraph"
    id: str
    paragraph: str
    questions: list[ParagraphQuestion]

    @model_validator(mode="after")
    def _unique_blank_numbers(self) -> "ParagraphExerciseSet":
        numbers = [q.blank_number for q in self.questions]
        if len(numbers) != len(set(numbers)):
            raise ValueError("blankNumber values must be unique within a set")
        return self


# --- Sentence exercises ---


class AspectOptions(CamelModel):
    imperfective: str
    perfective: str


class PlainSentenceExercise(CamelModel):
    exercise_sub_type: Literal["plain"] = "plain"
    id: str
    text: str
    correct_answer: CorrectAnswer
    explanation: str
    is_plural: bool | None = None


class VerbAspectExercise(CamelModel):
    exercise_sub_type: Literal["verb-aspect"] = "verb-aspect"
    id: str
    text: str
    correct_answer: CorrectAnswer
    explanation: str
    is_plural: bool | None = None
    options: AspectOptions
    correct_aspect: Literal["imperfective", "perfective"]


SentenceExercise = Annotated[
    PlainSentenceExercise | VerbAspectExercise,
    Field(discriminator="exercise_sub_type"),
]


class SentenceExerciseSet(CamelModel):
    """Independent sentences, each with a single blank."""

    kind: Literal["sentence"] = "sentence"
    id: str
    exercises: list[SentenceExercise]


ExerciseSet = Annotated[
    ParagraphExerciseSet | SentenceExerciseSet,
    Field(discriminator="kind"),
]


def iter_items(exercise_set: ParagraphExerciseSet | SentenceExerciseSet) -> list:
    """Return the questions or sentence exercises of a set."""
    if isinstance(exercise_set, ParagraphExerciseSet):
        return list(exercise_set.questions)
    return list(exercise_set.exercises)


# --- Cache wrapper ---


class CachedExercise(CamelModel):
    """A generated exercise set as stored in the shared cache.

    ``id`` identifies the cache slot; ``data.id`` identifies the exercise set
    itself and is what learners' completion records reference.
    """

    id: str
    exercise_type: ExerciseType
    cefr_level: CefrLevel
    theme: str | None = None
    data: ExerciseSet
    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _distinct_identity(self) -> "CachedExercise":
        if self.id == self.data.id:
            raise ValueError("cache wrapper id must differ from the exercise set id")
        return self
