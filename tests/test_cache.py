"""Tests for cache keys and both cache store backends."""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from backend.cache.base import cache_key
from backend.cache.memory import InMemoryCacheStore
from backend.cache.sql import SqlCacheStore
from backend.exercises import (
    AspectOptions,
    CachedExercise,
    CefrLevel,
    ExerciseType,
    ParagraphExerciseSet,
    ParagraphQuestion,
    SentenceExerciseSet,
    VerbAspectExercise,
)
from backend.models import Base


# --- Helpers ---


def _make_paragraph_set(set_id: str = "set-1", question_id: str = "q-1") -> ParagraphExerciseSet:
    return ParagraphExerciseSet(
        id=set_id,
        paragraph="Jučer sam ___1___ (ići) u kino.",
        questions=[
            ParagraphQuestion(
                id=question_id,
                blank_number=1,
                base_form="ići",
                correct_answer=["išao", "išla"],
                explanation="Perfect tense.",
            )
        ],
    )


def _make_entry(
    entry_id: str = "entry-1",
    set_id: str = "set-1",
    created_at: datetime | None = None,
    theme: str | None = None,
) -> CachedExercise:
    kwargs = {"created_at": created_at} if created_at else {}
    return CachedExercise(
        id=entry_id,
        exercise_type=ExerciseType.VERB_TENSES,
        cefr_level=CefrLevel.A1,
        theme=theme,
        data=_make_paragraph_set(set_id, question_id=f"{set_id}-q1"),
        **kwargs,
    )


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield SqlCacheStore(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))
    await engine.dispose()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryCacheStore()
        return
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield SqlCacheStore(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))
    await engine.dispose()


# --- Keys ---


class TestCacheKey:
    def test_format(self) -> None:
        assert cache_key("verbTenses", "A1", "hrana") == "verbTenses:A1:hrana"

    def test_no_theme_is_default(self) -> None:
        assert cache_key("verbAspect", "B1.1") == "verbAspect:B1.1:default"
        assert cache_key("verbAspect", "B1.1", None) == cache_key("verbAspect", "B1.1", "default")

    def test_theme_case_preserved(self) -> None:
        assert cache_key("verbTenses", "A1", "Hrana") != cache_key("verbTenses", "A1", "hrana")

    def test_enum_values(self) -> None:
        key = cache_key(ExerciseType.NOUN_DECLENSION, CefrLevel.A2_1)
        assert key == "nounDeclension:A2.1:default"


# --- Model ---


class TestCachedExercise:
    def test_wrapper_id_must_differ(self) -> None:
        with pytest.raises(ValueError):
            _make_entry(entry_id="same", set_id="same")

    def test_round_trips_through_camel_json(self) -> None:
        entry = _make_entry()
        dumped = entry.to_json_dict()
        assert dumped["exerciseType"] == "verbTenses"
        assert dumped["data"]["kind"] == "paragraph"
        restored = CachedExercise.model_validate(dumped)
        assert restored.data == entry.data

    def test_sentence_subtype_survives_json(self) -> None:
        exercise_set = SentenceExerciseSet(
            id="s-1",
            exercises=[
                VerbAspectExercise(
                    id="e-1",
                    text="Sutra ću _____ knjigu.",
                    correct_answer="pročitati",
                    explanation="Completed future action.",
                    options=AspectOptions(imperfective="čitati", perfective="pročitati"),
                    correct_aspect="perfective",
                )
            ],
        )
        entry = CachedExercise(
            id="w-1",
            exercise_type=ExerciseType.VERB_ASPECT,
            cefr_level=CefrLevel.A2_2,
            data=exercise_set,
        )
        restored = CachedExercise.model_validate(entry.to_json_dict())
        assert isinstance(restored.data.exercises[0], VerbAspectExercise)


# --- Stores (run against both backends) ---


class TestCacheStore:
    @pytest.mark.asyncio
    async def test_empty_key(self, store) -> None:
        assert await store.get_cached_exercises("verbTenses:A1:default") == []

    @pytest.mark.asyncio
    async def test_insertion_order_and_no_dedup(self, store) -> None:
        key = "verbTenses:A1:default"
        entries = [_make_entry(f"entry-{i}", f"set-{i}") for i in range(3)]
        for entry in entries:
            await store.set_cached_exercise(key, entry)
        # Same entry twice is kept twice
        await store.set_cached_exercise(key, entries[0])

        stored = await store.get_cached_exercises(key)
        assert [e.id for e in stored] == ["entry-0", "entry-1", "entry-2", "entry-0"]

    @pytest.mark.asyncio
    async def test_reads_do_not_remove(self, store) -> None:
        key = "verbTenses:A1:default"
        await store.set_cached_exercise(key, _make_entry())
        await store.get_cached_exercises(key)
        assert len(await store.get_cached_exercises(key)) == 1

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, store) -> None:
        await store.set_cached_exercise("verbTenses:A1:default", _make_entry("a", "set-a"))
        await store.set_cached_exercise("verbTenses:A1:hrana", _make_entry("b", "set-b", theme="hrana"))
        assert [e.id for e in await store.get_cached_exercises("verbTenses:A1:hrana")] == ["b"]
        assert sorted(await store.keys()) == ["verbTenses:A1:default", "verbTenses:A1:hrana"]

    @pytest.mark.asyncio
    @pytest.mark.filterwarnings("error::sqlalchemy.exc.SAWarning")
    async def test_keys_distinct_and_sorted(self, store) -> None:
        await store.set_cached_exercise("verbTenses:B1.1:default", _make_entry("a", "set-a"))
        await store.set_cached_exercise("verbTenses:A1:default", _make_entry("b", "set-b"))
        await store.set_cached_exercise("verbTenses:A1:default", _make_entry("c", "set-c"))
        keys = await store.keys()
        assert sorted(keys) == ["verbTenses:A1:default", "verbTenses:B1.1:default"]
        assert len(keys) == len(set(keys))

    @pytest.mark.asyncio
    async def test_get_by_wrapper_or_data_id(self, store) -> None:
        await store.set_cached_exercise("verbTenses:A1:default", _make_entry("entry-1", "set-1"))
        by_wrapper = await store.get_exercise_by_id("entry-1")
        by_data = await store.get_exercise_by_id("set-1")
        assert by_wrapper is not None and by_data is not None
        assert by_wrapper.id == by_data.id == "entry-1"
        assert await store.get_exercise_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_find_question(self, store) -> None:
        await store.set_cached_exercise("verbTenses:A1:default", _make_entry("entry-1", "set-1"))
        found = await store.find_question("set-1-q1")
        assert found is not None
        entry, question = found
        assert entry.id == "entry-1"
        assert question.correct_answer == ["išao", "išla"]
        assert await store.find_question("nope") is None

    @pytest.mark.asyncio
    async def test_counts(self, store) -> None:
        await store.set_cached_exercise("verbTenses:A1:default", _make_entry("a", "set-a"))
        await store.set_cached_exercise("verbTenses:A1:default", _make_entry("b", "set-b"))
        assert await store.counts() == {"verbTenses:A1:default": 2}

    @pytest.mark.asyncio
    async def test_prune_older_than(self, store) -> None:
        now = datetime(2025, 6, 1, 12, 0)
        key = "verbTenses:A1:default"
        await store.set_cached_exercise(key, _make_entry("old", "set-old", created_at=now - timedelta(days=40)))
        await store.set_cached_exercise(key, _make_entry("new", "set-new", created_at=now - timedelta(days=1)))

        removed = await store.prune_older_than(now - timedelta(days=30))
        assert removed == 1
        assert [e.id for e in await store.get_cached_exercises(key)] == ["new"]


class TestSqlCacheStore:
    @pytest.mark.asyncio
    async def test_payload_restored_with_theme(self, sql_store) -> None:
        await sql_store.set_cached_exercise("verbTenses:A1:more", _make_entry(theme="more"))
        [entry] = await sql_store.get_cached_exercises("verbTenses:A1:more")
        assert entry.theme == "more"
        assert isinstance(entry.data, ParagraphExerciseSet)
        assert entry.data.questions[0].base_form == "ići"
