"""The request accepted by the acquisition core."""

from pydantic import Field, field_validator

from backend.exercises import CamelModel, CefrLevel, ExerciseType, Provider


class ExerciseRequest(CamelModel):
    """One request for an exercise set.

    ``user_completed_exercises`` holds exercise set ids (``data.id``) the
    learner has already finished; they are never served from the cache.
    """

    exercise_type: ExerciseType
    cefr_level: CefrLevel
    provider: Provider | None = None
    api_key: str | None = Field(default=None, repr=False)
    theme: str | None = None
    user_completed_exercises: list[str] = Field(default_factory=list)
    force_regenerate: bool = False

    @field_validator("theme")
    @classmethod
    def _blank_theme_is_absent(cls, value: str | None) -> str | None:
        # "" would otherwise key a separate pool from the default theme
        return value or None
