"""SQLAlchemy ORM models for the exercise cache database."""

from backend.models.base import Base
from backend.models.cached_exercise import CachedExerciseRow

__all__ = ["Base", "CachedExerciseRow"]
