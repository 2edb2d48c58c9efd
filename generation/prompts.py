"""Prompt builders for exercise generation.

Each exercise type has its own builder. The system prompt only depends on
the CEFR level; the user prompt is type-specific, embeds a worked example
from the static worksheet bank, and asks for every acceptable answer form.
Prompt text is provider-agnostic: both adapters receive the same pair.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass

from backend.exercises import ExerciseType
from backend.worksheets import WorksheetBank, get_worksheet_bank


SYSTEM_PROMPT = """\
You are a Croatian language teacher creating exercises for {cefr_level} CEFR level students. \
Always respond with valid JSON only, no additional text."""

# Number of worked example sentences shown for sentence-based types
SENTENCE_EXAMPLE_COUNT = 3


@dataclass(frozen=True)
class PromptPair:
    """The canonical prompt sent to any provider."""

    system_prompt: str
    user_prompt: str
    exercise_type: ExerciseType


@dataclass(frozen=True)
class MultipleAnswersInstructions:
    description: str
    requirements: tuple[str, ...]

    def render(self) -> str:
        lines = "\n".join(f"- {req}" for req in self.requirements)
        return f"\n\nIMPORTANT: {self.description}:\n{lines}"


_ARRAY_ANSWER = (
    'Provide "correctAnswer" as an array of strings containing ALL grammatically acceptable variations'
)
_PLURAL_FLAG = 'Set "isPlural" to true when the correct answer requires a plural form'
_AT_LEAST = "Provide at least 2-3 acceptable variations where possible, but include ALL that are truly correct"

MULTIPLE_ANSWERS_INSTRUCTIONS = {
    ExerciseType.VERB_TENSES: MultipleAnswersInstructions(
        "Provide multiple acceptable variations for verb tenses",
        (
            _ARRAY_ANSWER,
            "Include different verb forms when multiple aspects/tenses are contextually appropriate",
            "Include alternative word orders when Croatian grammar allows flexibility",
            "Include gender variations (masculine/feminine) when both are possible",
            "Include regional or stylistic variations that are grammatically correct",
            _PLURAL_FLAG,
            _AT_LEAST,
        ),
    ),
    ExerciseType.NOUN_DECLENSION: MultipleAnswersInstructions(
        "Provide multiple acceptable variations for noun declension",
        (
            _ARRAY_ANSWER,
            "Include different case forms when context allows multiple interpretations",
            "Include alternative adjective declensions that agree with the noun",
            "Include word order variations when Croatian grammar permits flexibility",
            "Include regional variations that are grammatically correct",
            _PLURAL_FLAG,
            _AT_LEAST,
        ),
    ),
    ExerciseType.VERB_ASPECT: MultipleAnswersInstructions(
        "Provide multiple acceptable variations for verb aspect",
        (
            _ARRAY_ANSWER,
            "Include both perfective and imperfective forms when context allows either",
            "Include different gender/person forms when applicable",
            "Include alternative verb forms that express the same meaning",
            "Include regional or stylistic variations that are grammatically correct",
            _PLURAL_FLAG,
            _AT_LEAST,
        ),
    ),
    ExerciseType.RELATIVE_PRONOUNS: MultipleAnswersInstructions(
        "Provide multiple acceptable variations for relative pronouns",
        (
            _ARRAY_ANSWER,
            "Include alternative case forms when context permits multiple interpretations",
            "Include both long and short forms where applicable (e.g., kojeg vs kojega)",
            "Include regional variations that are grammatically correct",
            "Include different word orders when Croatian grammar allows flexibility",
            _PLURAL_FLAG,
            _AT_LEAST,
        ),
    ),
}


def format_theme(theme: str | None) -> str:
    return f" The theme should be: {theme}." if theme else ""


class PromptBuilder(ABC):
    """Builds the system and user prompt for one exercise type."""

    exercise_type: ExerciseType

    def __init__(self, bank: WorksheetBank | None = None) -> None:
        self.bank = bank or get_worksheet_bank()

    def build_system_prompt(self, cefr_level: str) -> str:
        return SYSTEM_PROMPT.format(cefr_level=cefr_level)

    @abstractmethod
    def build_user_prompt(self, cefr_level: str, theme: str | None = None) -> str:
        ...

    def multiple_answers_instructions(self) -> str:
        return MULTIPLE_ANSWERS_INSTRUCTIONS[self.exercise_type].render()

    def _example_json(self) -> str:
        """Worked example from the static bank, stripped to what the model should emit."""
        worksheet = self.bank.example_for(self.exercise_type)
        if worksheet is None:
            return "{}"
        if self.exercise_type.is_paragraph:
            example = worksheet.model_dump(
                by_alias=True, exclude_none=True, include={"id", "paragraph", "questions"}
            )
        else:
            example = {
                "exercises": [
                    ex.model_dump(by_alias=True, exclude_none=True)
                    for ex in worksheet.exercises[:SENTENCE_EXAMPLE_COUNT]
                ]
            }
        return json.dumps(example, ensure_ascii=False, indent=2)


class VerbTensesPromptBuilder(PromptBuilder):
    exercise_type = ExerciseType.VERB_TENSES

    def build_user_prompt(self, cefr_level: str, theme: str | None = None) -> str:
        return f"""\
Create a Croatian verb tenses paragraph exercise. Generate a connected story with 6 blanks where \
students fill in correct verb forms.{format_theme(theme)}

Here's an example of the quality and style expected:

{self._example_json()}

Key requirements:
- Create a coherent, engaging story that flows naturally
- Use a variety of verb tenses (present, past, future, conditional)
- Include both perfective and imperfective verbs where appropriate
- Provide clear, educational explanations for each answer
- Maintain appropriate {cefr_level} difficulty level
- {_PLURAL_FLAG}

CRITICAL: Avoid reflexive pronoun duplication!
- If a reflexive pronoun (se/si) appears in the visible text, do NOT include it in the expected answer
- For reflexive verbs, either put the reflexive pronoun in the blank OR in the visible text, never both

Return JSON in this exact format:
{{
  "paragraph": "Story text with ___1___ (baseForm) blanks...",
  "questions": [
    {{
      "blankNumber": 1,
      "baseForm": "infinitive",
      "correctAnswer": ["primary correct form", "alternative acceptable form"],
      "explanation": "explanation of why these forms are correct, including any grammatical variations",
      "isPlural": false
    }}
  ]
}}{self.multiple_answers_instructions()}"""


class NounDeclensionPromptBuilder(PromptBuilder):
    exercise_type = ExerciseType.NOUN_DECLENSION

    def build_user_prompt(self, cefr_level: str, theme: str | None = None) -> str:
        return f"""\
Create a Croatian noun-adjective declension paragraph exercise. Generate a connected story with 6 \
blanks where students fill in correctly declined noun-adjective pairs.{format_theme(theme)}

Here's an example of the quality and style expected:

{self._example_json()}

Key requirements:
- Create a coherent, engaging story that flows naturally
- Use a variety of cases (nominative, accusative, genitive, dative, locative, instrumental)
- Include masculine, feminine, and neuter declensions
- Provide clear explanations mentioning the case and reasoning
- Maintain appropriate {cefr_level} difficulty level

Return JSON in this exact format:
{{
  "paragraph": "Story text with ___1___ (baseForm) blanks...",
  "questions": [
    {{
      "blankNumber": 1,
      "baseForm": "nominative form",
      "correctAnswer": ["primary declined form", "alternative acceptable form"],
      "explanation": "explanation of case and acceptable variations",
      "isPlural": false
    }}
  ]
}}{self.multiple_answers_instructions()}"""


class VerbAspectPromptBuilder(PromptBuilder):
    exercise_type = ExerciseType.VERB_ASPECT

    def build_user_prompt(self, cefr_level: str, theme: str | None = None) -> str:
        return f"""\
Create 5 Croatian verb aspect exercises. Each should be a sentence with one blank where students \
choose between perfective/imperfective verb forms.{format_theme(theme)}

Here are examples of the quality and style expected:

{self._example_json()}

Key requirements:
- Create natural, realistic sentences that Croatian speakers would actually use
- Focus on proper verb tense and aspect usage
- Include a variety of contexts (daily activities, past events, future plans)
- Provide clear explanations about tense and person
- Maintain appropriate {cefr_level} difficulty level
- Every exercise MUST include "exerciseSubType": "verb-aspect", both "options" and "correctAspect"

Return JSON in this exact format:
{{
  "exercises": [
    {{
      "text": "Sentence with _____ blank",
      "exerciseSubType": "verb-aspect",
      "options": {{
        "imperfective": "imperfective verb form",
        "perfective": "perfective verb form"
      }},
      "correctAspect": "imperfective or perfective",
      "correctAnswer": ["correct verb form"],
      "explanation": "explanation of aspect choice and reasoning",
      "isPlural": false
    }}
  ]
}}{self.multiple_answers_instructions()}"""


class RelativePronounsPromptBuilder(PromptBuilder):
    exercise_type = ExerciseType.RELATIVE_PRONOUNS

    def build_user_prompt(self, cefr_level: str, theme: str | None = None) -> str:
        return f"""\
Create 5 Croatian relative pronoun exercises. Each should be a sentence with one blank where \
students fill in the correct form of koji/koja/koje ONLY.{format_theme(theme)}

Here are examples of the quality and style expected:

{self._example_json()}

IMPORTANT: Use ONLY forms of "koji". Do NOT use other pronouns like "tko", "što", "čiji", etc.

Declension table for "koji":
SINGULAR:
- Masculine: koji (N), kojeg(a) (G), kojem(u) (D), koji/kojeg(a) (A), kojem(u) (L), kojim (I)
- Feminine: koja (N), koje (G), kojoj (D), koju (A), kojoj (L), kojom (I)
- Neuter: koje (N), kojeg(a) (G), kojem(u) (D), koje (A), kojem(u) (L), kojim (I)

PLURAL:
- Masculine: koji (N), kojih (G), kojima (D), koje (A), kojima (L), kojima (I)
- Feminine: koje (N), kojih (G), kojima (D), koje (A), kojima (L), kojima (I)
- Neuter: koja (N), kojih (G), kojima (D), koja (A), kojima (L), kojima (I)

Key requirements:
- Create natural, realistic sentences that Croatian speakers would actually use
- Include a variety of cases, genders, and both singular and plural forms
- Provide clear explanations mentioning case, gender, number, and reasoning
- Maintain appropriate {cefr_level} difficulty level

Return JSON in this exact format:
{{
  "exercises": [
    {{
      "text": "Sentence with _____ blank",
      "correctAnswer": ["primary correct pronoun", "alternative acceptable form"],
      "explanation": "explanation of why these pronouns are correct and their variations",
      "isPlural": false
    }}
  ]
}}{self.multiple_answers_instructions()}"""


PROMPT_BUILDERS: dict[ExerciseType, type[PromptBuilder]] = {
    ExerciseType.VERB_TENSES: VerbTensesPromptBuilder,
    ExerciseType.NOUN_DECLENSION: NounDeclensionPromptBuilder,
    ExerciseType.VERB_ASPECT: VerbAspectPromptBuilder,
    ExerciseType.RELATIVE_PRONOUNS: RelativePronounsPromptBuilder,
}


def create_prompt_builder(exercise_type: ExerciseType, bank: WorksheetBank | None = None) -> PromptBuilder:
    try:
        builder_cls = PROMPT_BUILDERS[ExerciseType(exercise_type)]
    except (KeyError, ValueError) as e:
        raise ValueError(f"Unknown exercise type: {exercise_type}") from e
    return builder_cls(bank)


def build_prompts(
    exercise_type: ExerciseType,
    cefr_level: str,
    theme: str | None = None,
    bank: WorksheetBank | None = None,
) -> PromptPair:
    """Build the provider-agnostic prompt pair for one generation request."""
    builder = create_prompt_builder(exercise_type, bank)
    return PromptPair(
        system_prompt=builder.build_system_prompt(cefr_level),
        user_prompt=builder.build_user_prompt(cefr_level, theme),
        exercise_type=builder.exercise_type,
    )
