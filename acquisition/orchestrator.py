"""Orchestrator: decides between the shared cache and fresh generation.

For each request the orchestrator:
- Reads the cache pool for the request's key (unless regeneration is forced)
- Drops sets the learner has already completed
- Serves a uniformly random remaining set, or
- Resolves a provider and credential, generates a new set, appends it to the
  cache and serves it

Failures come back as ``StageResult`` errors; nothing is retried.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass

from acquisition.completion import filter_available
from acquisition.request import ExerciseRequest
from backend.cache.base import CacheStore, cache_key
from backend.config import Settings, settings
from backend.errors import (
    AcquisitionError,
    GenerationFailedError,
    MissingCredentialError,
    StageResult,
)
from backend.exercises import CachedExercise, Provider
from generation.generator import ExerciseGenerator

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = Provider.OPENAI


@dataclass(frozen=True)
class Credentials:
    """The provider to call and the key to call it with."""

    provider: Provider
    api_key: str

    def __repr__(self) -> str:
        return f"Credentials(provider={self.provider!r}, api_key=<redacted>)"


def resolve_credentials(request: ExerciseRequest, config: Settings = settings) -> StageResult[Credentials]:
    """Pick the provider and API key for a generation request.

    Provider: request, then the configured site provider, then OpenAI.
    Key: request, then the provider's own configured key, then the shared
    site key.
    """
    provider = Provider(request.provider or config.site_api_provider or DEFAULT_PROVIDER)
    provider_key = {
        Provider.OPENAI: config.openai_api_key,
        Provider.ANTHROPIC: config.anthropic_api_key,
    }[provider]
    api_key = request.api_key or provider_key or config.site_api_key
    if not api_key:
        return StageResult.failure(MissingCredentialError("No API key available"))
    return StageResult.success(Credentials(provider=provider, api_key=api_key))


class ExerciseOrchestrator:
    """Serves exercise sets from the cache or generates and caches new ones."""

    def __init__(
        self,
        cache: CacheStore,
        generator: ExerciseGenerator,
        config: Settings = settings,
        rng: random.Random | None = None,
    ) -> None:
        self.cache = cache
        self.generator = generator
        self.config = config
        self._rng = rng or random.Random()

    async def acquire(self, request: ExerciseRequest) -> StageResult:
        """Return an exercise set for ``request``.

        Errors are ``MissingCredentialError`` when generation is needed but
        no key can be found, or ``GenerationFailedError`` wrapping whatever
        went wrong during generation. A failed generation writes nothing.
        """
        key = cache_key(request.exercise_type, request.cefr_level, request.theme)

        if not request.force_regenerate:
            entries = await self.cache.get_cached_exercises(key)
            available = filter_available(entries, request.user_completed_exercises)
            logger.debug(
                "Cache %s: %d cached, %d available", key, len(entries), len(available)
            )
            if available:
                selected = self._rng.choice(available)
                logger.info("Serving cached exercise %s (set %s)", selected.id, selected.data.id)
                return StageResult.success(selected.data)
            logger.info("No available cached exercises for %s, generating", key)
        else:
            logger.info("Forced regeneration for %s", key)

        credentials = resolve_credentials(request, self.config)
        if not credentials.ok:
            return credentials
        creds = credentials.value

        result = await self.generator.generate(
            request.exercise_type,
            request.cefr_level,
            request.theme,
            creds.provider,
            creds.api_key,
        )
        if not result.ok:
            return StageResult.failure(self._generation_failed(result.error, key, creds.provider))

        exercise_set = result.value
        entry = CachedExercise(
            id=str(uuid.uuid4()),
            exercise_type=request.exercise_type,
            cefr_level=request.cefr_level,
            theme=request.theme,
            data=exercise_set,
        )
        await self.cache.set_cached_exercise(key, entry)
        logger.info("Cached new exercise %s (set %s) under %s", entry.id, exercise_set.id, key)
        return StageResult.success(exercise_set)

    def _generation_failed(
        self, cause: AcquisitionError, key: str, provider: Provider
    ) -> GenerationFailedError:
        logger.error(
            "Exercise generation failed for %s via %s: %s",
            key,
            provider,
            cause.message,
            exc_info=cause,
        )
        return GenerationFailedError(cause)
