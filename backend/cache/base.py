"""Cache store interface for generated exercise sets.

A cache key names one pool of interchangeable exercise sets:
``exerciseType:cefrLevel:theme`` with ``default`` standing in for no theme.
Stores are append-only from the request path: reads never remove entries
and writes never overwrite. Removal only happens through an explicit
``prune_older_than`` sweep.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from backend.exercises import CachedExercise, iter_items

DEFAULT_THEME = "default"


def cache_key(exercise_type: str, cefr_level: str, theme: str | None = None) -> str:
    """Build the cache key; theme text is used verbatim, never normalized."""
    return f"{exercise_type}:{cefr_level}:{theme if theme is not None else DEFAULT_THEME}"


class CacheStore(ABC):
    """Key -> ordered list of ``CachedExercise`` entries."""

    @abstractmethod
    async def get_cached_exercises(self, key: str) -> list[CachedExercise]:
        """Return entries for ``key`` in insertion order (possibly empty)."""
        ...

    @abstractmethod
    async def set_cached_exercise(self, key: str, entry: CachedExercise) -> None:
        """Append ``entry`` to the list for ``key``."""
        ...

    @abstractmethod
    async def keys(self) -> list[str]:
        ...

    @abstractmethod
    async def prune_older_than(self, cutoff: datetime) -> int:
        """Delete entries created before ``cutoff``; return how many went."""
        ...

    async def get_exercise_by_id(self, exercise_id: str) -> CachedExercise | None:
        """Find an entry by wrapper id or by the wrapped set's own id."""
        for key in await self.keys():
            for entry in await self.get_cached_exercises(key):
                if entry.id == exercise_id or entry.data.id == exercise_id:
                    return entry
        return None

    async def find_question(self, question_id: str) -> tuple[CachedExercise, object] | None:
        """Find the entry holding a question/sentence exercise by its id."""
        for key in await self.keys():
            for entry in await self.get_cached_exercises(key):
                for item in iter_items(entry.data):
                    if item.id == question_id:
                        return entry, item
        return None

    async def counts(self) -> dict[str, int]:
        """Number of entries per key."""
        return {key: len(await self.get_cached_exercises(key)) for key in await self.keys()}
