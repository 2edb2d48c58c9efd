"""LLM provider adapters.

Each adapter turns a ``PromptPair`` into raw response text using one
vendor's SDK. Adapters make exactly one request: SDK retries are disabled
and nothing here retries on failure. Vendor errors are re-raised as
``ProviderError`` with the SDK exception chained as the cause.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import anthropic
import openai

from backend.config import Settings, settings
from backend.errors import ProviderError
from backend.exercises import ExerciseType, Provider
from generation.constants import OPENAI_SCHEMA_NAMES
from generation.prompts import PromptPair

logger = logging.getLogger(__name__)


# --- OpenAI strict JSON schemas ---
# Strict mode requires every property to be listed as required, so optional
# fields are expressed as nullable instead.

_ANSWER_SCHEMA = {
    "anyOf": [
        {"type": "string"},
        {"type": "array", "items": {"type": "string"}},
    ]
}

_PARAGRAPH_QUESTION_SCHEMA = {
    "type": "object",
    "properties": {
        "blankNumber": {"type": "integer"},
        "baseForm": {"type": "string"},
        "correctAnswer": _ANSWER_SCHEMA,
        "explanation": {"type": "string"},
        "isPlural": {"type": ["boolean", "null"]},
    },
    "required": ["blankNumber", "baseForm", "correctAnswer", "explanation", "isPlural"],
    "additionalProperties": False,
}

PARAGRAPH_SCHEMA = {
    "type": "object",
    "properties": {
        "paragraph": {"type": "string"},
        "questions": {"type": "array", "items": _PARAGRAPH_QUESTION_SCHEMA},
    },
    "required": ["paragraph", "questions"],
    "additionalProperties": False,
}

_SENTENCE_EXERCISE_SCHEMA = {
    "type": "object",
    "properties": {
        "text": {"type": "string"},
        "correctAnswer": _ANSWER_SCHEMA,
        "explanation": {"type": "string"},
        "isPlural": {"type": ["boolean", "null"]},
    },
    "required": ["text", "correctAnswer", "explanation", "isPlural"],
    "additionalProperties": False,
}

SENTENCE_SCHEMA = {
    "type": "object",
    "properties": {
        "exercises": {"type": "array", "items": _SENTENCE_EXERCISE_SCHEMA},
    },
    "required": ["exercises"],
    "additionalProperties": False,
}

_VERB_ASPECT_EXERCISE_SCHEMA = {
    "type": "object",
    "properties": {
        **_SENTENCE_EXERCISE_SCHEMA["properties"],
        "exerciseSubType": {"type": "string", "enum": ["verb-aspect"]},
        "options": {
            "type": "object",
            "properties": {
                "imperfective": {"type": "string"},
                "perfective": {"type": "string"},
            },
            "required": ["imperfective", "perfective"],
            "additionalProperties": False,
        },
        "correctAspect": {"type": "string", "enum": ["imperfective", "perfective"]},
    },
    "required": [
        *_SENTENCE_EXERCISE_SCHEMA["required"],
        "exerciseSubType",
        "options",
        "correctAspect",
    ],
    "additionalProperties": False,
}

VERB_ASPECT_SCHEMA = {
    "type": "object",
    "properties": {
        "exercises": {"type": "array", "items": _VERB_ASPECT_EXERCISE_SCHEMA},
    },
    "required": ["exercises"],
    "additionalProperties": False,
}


def openai_response_format(exercise_type: ExerciseType) -> dict[str, Any]:
    """Build the ``response_format`` argument for one exercise type."""
    exercise_type = ExerciseType(exercise_type)
    if exercise_type.is_paragraph:
        name, schema = OPENAI_SCHEMA_NAMES["paragraph"], PARAGRAPH_SCHEMA
    elif exercise_type == ExerciseType.VERB_ASPECT:
        name, schema = OPENAI_SCHEMA_NAMES["verb_aspect"], VERB_ASPECT_SCHEMA
    else:
        name, schema = OPENAI_SCHEMA_NAMES["sentence"], SENTENCE_SCHEMA
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "strict": True, "schema": schema},
    }


# --- Adapters ---


class ProviderAdapter(ABC):
    """Sends one prompt pair to an LLM and returns its raw text."""

    name: Provider

    @abstractmethod
    async def generate(self, prompts: PromptPair, api_key: str) -> str:
        ...


class OpenAIAdapter(ProviderAdapter):
    name = Provider.OPENAI

    def __init__(
        self,
        model: str,
        temperature: float,
        max_tokens: int,
        client_factory: Callable[..., Any] = openai.AsyncOpenAI,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client_factory = client_factory

    async def generate(self, prompts: PromptPair, api_key: str) -> str:
        # A client per call: the key can differ on every request
        try:
            async with self._client_factory(api_key=api_key, max_retries=0) as client:
                response = await client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": prompts.system_prompt},
                        {"role": "user", "content": prompts.user_prompt},
                    ],
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    response_format=openai_response_format(prompts.exercise_type),
                )
        except openai.OpenAIError as e:
            raise ProviderError(f"OpenAI request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ProviderError("No response from OpenAI")
        logger.debug("OpenAI returned %d chars for %s", len(content), prompts.exercise_type)
        return content


class AnthropicAdapter(ProviderAdapter):
    name = Provider.ANTHROPIC

    def __init__(
        self,
        model: str,
        temperature: float,
        max_tokens: int,
        client_factory: Callable[..., Any] = anthropic.AsyncAnthropic,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client_factory = client_factory

    async def generate(self, prompts: PromptPair, api_key: str) -> str:
        try:
            async with self._client_factory(api_key=api_key, max_retries=0) as client:
                response = await client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                    system=prompts.system_prompt,
                    messages=[{"role": "user", "content": prompts.user_prompt}],
                )
        except anthropic.AnthropicError as e:
            raise ProviderError(f"Anthropic request failed: {e}") from e

        if not response.content or response.content[0].type != "text":
            raise ProviderError("No text response from Anthropic")
        logger.debug(
            "Tokens used: %d in, %d out",
            response.usage.input_tokens,
            response.usage.output_tokens,
        )
        return response.content[0].text


class ProviderRegistry:
    """Maps provider names to adapters."""

    def __init__(self, adapters: dict[Provider, ProviderAdapter]) -> None:
        self._adapters = dict(adapters)

    def get(self, provider: Provider | str) -> ProviderAdapter:
        try:
            return self._adapters[Provider(provider)]
        except (KeyError, ValueError) as e:
            raise ProviderError(f"Unsupported provider: {provider}") from e


def default_registry(config: Settings = settings) -> ProviderRegistry:
    """Registry with both vendor adapters configured from settings."""
    return ProviderRegistry(
        {
            Provider.OPENAI: OpenAIAdapter(
                model=config.openai_model,
                temperature=config.openai_temperature,
                max_tokens=config.generation_max_tokens,
            ),
            Provider.ANTHROPIC: AnthropicAdapter(
                model=config.anthropic_model,
                temperature=config.anthropic_temperature,
                max_tokens=config.generation_max_tokens,
            ),
        }
    )
