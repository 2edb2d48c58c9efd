"""SQLAlchemy-backed cache store.

Each append is a single-row INSERT, so concurrent writers for the same key
can't lose each other's entries. Reads order by the autoincrement sequence
to preserve insertion order.
"""

import json
import logging
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.cache.base import CacheStore
from backend.exercises import CachedExercise
from backend.models.cached_exercise import CachedExerciseRow

logger = logging.getLogger(__name__)


def _row_to_entry(row: CachedExerciseRow) -> CachedExercise:
    return CachedExercise(
        id=row.id,
        exercise_type=row.exercise_type,
        cefr_level=row.cefr_level,
        theme=row.theme,
        data=json.loads(row.payload),
        created_at=row.created_at,
    )


class SqlCacheStore(CacheStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_cached_exercises(self, key: str) -> list[CachedExercise]:
        stmt = (
            select(CachedExerciseRow)
            .where(CachedExerciseRow.cache_key == key)
            .order_by(CachedExerciseRow.seq.asc())
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_row_to_entry(row) for row in result.scalars().all()]

    async def set_cached_exercise(self, key: str, entry: CachedExercise) -> None:
        row = CachedExerciseRow(
            id=entry.id,
            cache_key=key,
            data_id=entry.data.id,
            exercise_type=str(entry.exercise_type),
            cefr_level=str(entry.cefr_level),
            theme=entry.theme,
            payload=json.dumps(entry.data.to_json_dict(), ensure_ascii=False),
            created_at=entry.created_at,
        )
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
        logger.debug("Appended cache entry %s under %s", entry.id, key)

    async def get_exercise_by_id(self, exercise_id: str) -> CachedExercise | None:
        stmt = select(CachedExerciseRow).where(
            (CachedExerciseRow.id == exercise_id) | (CachedExerciseRow.data_id == exercise_id)
        ).limit(1)
        async with self._session_factory() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        return _row_to_entry(row) if row is not None else None

    async def keys(self) -> list[str]:
        stmt = select(CachedExerciseRow.cache_key).distinct().order_by(CachedExerciseRow.cache_key)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [row[0] for row in result.all()]

    async def prune_older_than(self, cutoff: datetime) -> int:
        stmt = delete(CachedExerciseRow).where(CachedExerciseRow.created_at < cutoff)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
        logger.info("Pruned %d cache entries older than %s", result.rowcount, cutoff)
        return result.rowcount
