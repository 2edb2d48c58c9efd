"""Tests for the OpenAI and Anthropic adapters (SDK clients mocked)."""

from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import openai
import pytest

from backend.errors import ErrorKind, ProviderError
from backend.exercises import ExerciseType, Provider
from generation.prompts import PromptPair
from generation.providers import (
    AnthropicAdapter,
    OpenAIAdapter,
    ProviderRegistry,
    default_registry,
    openai_response_format,
)


# --- Helpers ---


def _make_prompts(exercise_type: ExerciseType = ExerciseType.VERB_TENSES) -> PromptPair:
    return PromptPair(system_prompt="system", user_prompt="user", exercise_type=exercise_type)


def _make_openai_factory(content: str | None = '{"paragraph": "x"}') -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response)
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    return MagicMock(return_value=client)


def _make_anthropic_factory(block_type: str = "text", text: str = '{"exercises": []}') -> MagicMock:
    block = MagicMock()
    block.type = block_type
    block.text = text
    response = MagicMock()
    response.content = [block]
    response.usage.input_tokens = 10
    response.usage.output_tokens = 20
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=response)
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    return MagicMock(return_value=client)


def _schema_of(response_format: dict) -> dict:
    return response_format["json_schema"]["schema"]


# --- Response formats ---


class TestOpenAIResponseFormat:
    def test_paragraph_types_share_schema(self) -> None:
        tenses = openai_response_format(ExerciseType.VERB_TENSES)
        nouns = openai_response_format(ExerciseType.NOUN_DECLENSION)
        assert tenses == nouns
        assert tenses["type"] == "json_schema"
        assert tenses["json_schema"]["strict"] is True
        assert _schema_of(tenses)["required"] == ["paragraph", "questions"]

    def test_verb_aspect_requires_aspect_fields(self) -> None:
        schema = _schema_of(openai_response_format(ExerciseType.VERB_ASPECT))
        item = schema["properties"]["exercises"]["items"]
        for name in ("exerciseSubType", "options", "correctAspect"):
            assert name in item["required"]
        assert item["properties"]["correctAspect"]["enum"] == ["imperfective", "perfective"]

    def test_relative_pronouns_plain_sentences(self) -> None:
        schema = _schema_of(openai_response_format(ExerciseType.RELATIVE_PRONOUNS))
        item = schema["properties"]["exercises"]["items"]
        assert "correctAspect" not in item["properties"]

    @pytest.mark.parametrize("exercise_type", list(ExerciseType))
    def test_strict_schema_lists_every_property(self, exercise_type: ExerciseType) -> None:
        def check(node: dict) -> None:
            if node.get("type") == "object":
                assert set(node["required"]) == set(node["properties"])
                assert node["additionalProperties"] is False
                for child in node["properties"].values():
                    check(child)
            elif node.get("type") == "array":
                check(node["items"])

        check(_schema_of(openai_response_format(exercise_type)))


# --- OpenAI ---


class TestOpenAIAdapter:
    @pytest.mark.asyncio
    async def test_returns_content(self) -> None:
        factory = _make_openai_factory()
        adapter = OpenAIAdapter("gpt-4o-mini", 0.8, 2048, client_factory=factory)

        text = await adapter.generate(_make_prompts(), "sk-test")

        assert text == '{"paragraph": "x"}'
        factory.assert_called_once_with(api_key="sk-test", max_retries=0)
        kwargs = factory.return_value.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"][0] == {"role": "system", "content": "system"}
        assert kwargs["messages"][1] == {"role": "user", "content": "user"}
        assert kwargs["response_format"] == openai_response_format(ExerciseType.VERB_TENSES)

    @pytest.mark.asyncio
    async def test_empty_content_is_error(self) -> None:
        adapter = OpenAIAdapter("m", 0.8, 2048, client_factory=_make_openai_factory(content=None))
        with pytest.raises(ProviderError, match="No response from OpenAI"):
            await adapter.generate(_make_prompts(), "sk-test")

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self) -> None:
        factory = _make_openai_factory()
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        cause = openai.APIConnectionError(request=request)
        factory.return_value.chat.completions.create.side_effect = cause
        adapter = OpenAIAdapter("m", 0.8, 2048, client_factory=factory)

        with pytest.raises(ProviderError) as exc_info:
            await adapter.generate(_make_prompts(), "sk-test")
        assert exc_info.value.kind == ErrorKind.PROVIDER
        assert exc_info.value.__cause__ is cause
        assert factory.return_value.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_client_closed_after_call(self) -> None:
        factory = _make_openai_factory()
        adapter = OpenAIAdapter("m", 0.8, 2048, client_factory=factory)

        await adapter.generate(_make_prompts(), "sk-test")

        assert factory.return_value.__aexit__.await_count == 1

    @pytest.mark.asyncio
    async def test_client_closed_on_error(self) -> None:
        factory = _make_openai_factory()
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        factory.return_value.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
        adapter = OpenAIAdapter("m", 0.8, 2048, client_factory=factory)

        with pytest.raises(ProviderError):
            await adapter.generate(_make_prompts(), "sk-test")
        assert factory.return_value.__aexit__.await_count == 1


# --- Anthropic ---


class TestAnthropicAdapter:
    @pytest.mark.asyncio
    async def test_returns_text(self) -> None:
        factory = _make_anthropic_factory()
        adapter = AnthropicAdapter("claude-test", 1.0, 2048, client_factory=factory)

        text = await adapter.generate(_make_prompts(ExerciseType.RELATIVE_PRONOUNS), "ak-test")

        assert text == '{"exercises": []}'
        factory.assert_called_once_with(api_key="ak-test", max_retries=0)
        kwargs = factory.return_value.messages.create.call_args.kwargs
        assert kwargs["system"] == "system"
        assert kwargs["messages"] == [{"role": "user", "content": "user"}]
        assert kwargs["model"] == "claude-test"

    @pytest.mark.asyncio
    async def test_non_text_block_is_error(self) -> None:
        adapter = AnthropicAdapter("m", 1.0, 2048, client_factory=_make_anthropic_factory("tool_use"))
        with pytest.raises(ProviderError, match="No text response from Anthropic"):
            await adapter.generate(_make_prompts(), "ak-test")

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self) -> None:
        factory = _make_anthropic_factory()
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        cause = anthropic.APIConnectionError(request=request)
        factory.return_value.messages.create.side_effect = cause
        adapter = AnthropicAdapter("m", 1.0, 2048, client_factory=factory)

        with pytest.raises(ProviderError) as exc_info:
            await adapter.generate(_make_prompts(), "ak-test")
        assert exc_info.value.__cause__ is cause
        assert factory.return_value.__aexit__.await_count == 1

    @pytest.mark.asyncio
    async def test_client_closed_after_call(self) -> None:
        factory = _make_anthropic_factory()
        adapter = AnthropicAdapter("m", 1.0, 2048, client_factory=factory)

        await adapter.generate(_make_prompts(), "ak-test")

        assert factory.return_value.__aexit__.await_count == 1


# --- Registry ---


class TestProviderRegistry:
    def test_default_registry_has_both(self) -> None:
        registry = default_registry()
        assert isinstance(registry.get("openai"), OpenAIAdapter)
        assert isinstance(registry.get(Provider.ANTHROPIC), AnthropicAdapter)

    def test_unknown_provider(self) -> None:
        registry = ProviderRegistry({})
        with pytest.raises(ProviderError, match="Unsupported provider"):
            registry.get("openai")
        with pytest.raises(ProviderError):
            registry.get("gemini")
