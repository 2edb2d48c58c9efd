from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class CachedExerciseRow(Base, TimestampMixin):
    """One cached exercise set; one row per append so writes never collide."""

    __tablename__ = "cached_exercises"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)  # insertion order
    id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)  # wrapper id
    cache_key: Mapped[str] = mapped_column(String(300), index=True, nullable=False)
    data_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    exercise_type: Mapped[str] = mapped_column(String(50), nullable=False)
    cefr_level: Mapped[str] = mapped_column(String(10), nullable=False)
    theme: Mapped[str | None] = mapped_column(String(200), nullable=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)  # ExerciseSet JSON
