"""In-process cache store, used for development and tests."""

from datetime import datetime

from backend.cache.base import CacheStore
from backend.exercises import CachedExercise


class InMemoryCacheStore(CacheStore):
    def __init__(self) -> None:
        self._entries: dict[str, list[CachedExercise]] = {}

    async def get_cached_exercises(self, key: str) -> list[CachedExercise]:
        # Copy so callers can't mutate the stored list
        return list(self._entries.get(key, []))

    async def set_cached_exercise(self, key: str, entry: CachedExercise) -> None:
        self._entries.setdefault(key, []).append(entry)

    async def keys(self) -> list[str]:
        return list(self._entries)

    async def prune_older_than(self, cutoff: datetime) -> int:
        removed = 0
        for key, entries in list(self._entries.items()):
            kept = [e for e in entries if e.created_at >= cutoff]
            removed += len(entries) - len(kept)
            if kept:
                self._entries[key] = kept
            else:
                del self._entries[key]
        return removed
