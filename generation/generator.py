"""Exercise generation: prompt -> provider -> validated exercise set."""

import logging

from backend.errors import AcquisitionError, StageResult
from backend.exercises import CefrLevel, ExerciseType, Provider
from backend.worksheets import WorksheetBank
from generation.prompts import build_prompts
from generation.providers import ProviderRegistry
from generation.validator import validate_response

logger = logging.getLogger(__name__)


class ExerciseGenerator:
    """Runs one generation attempt against a provider from the registry."""

    def __init__(self, registry: ProviderRegistry, bank: WorksheetBank | None = None) -> None:
        self.registry = registry
        self.bank = bank

    async def generate(
        self,
        exercise_type: ExerciseType,
        cefr_level: CefrLevel,
        theme: str | None,
        provider: Provider,
        api_key: str,
    ) -> StageResult:
        """Generate and validate one exercise set.

        Provider and validation failures come back as a failed result; the
        request is made exactly once.
        """
        try:
            adapter = self.registry.get(provider)
            prompts = build_prompts(exercise_type, cefr_level, theme, bank=self.bank)
            logger.info(
                "Generating %s exercises at %s via %s (theme=%r)",
                exercise_type,
                cefr_level,
                provider,
                theme,
            )
            raw_text = await adapter.generate(prompts, api_key)
        except AcquisitionError as e:
            return StageResult.failure(e)

        return validate_response(raw_text, exercise_type)
