"""Filtering of cached exercise sets a learner has already completed."""

from collections.abc import Collection, Iterable

from backend.exercises import CachedExercise


def filter_available(
    entries: Iterable[CachedExercise], completed: Collection[str]
) -> list[CachedExercise]:
    """Keep entries whose exercise set id is not in ``completed``.

    Completion records reference ``data.id``, never the cache wrapper id.
    Order is preserved.
    """
    completed = set(completed)
    return [entry for entry in entries if entry.data.id not in completed]
