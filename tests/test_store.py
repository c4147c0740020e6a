"""Tests for the signal stores."""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from langprofile.errors import StoreFailure
from langprofile.storage.memory import InMemorySignalStore
from langprofile.storage.models import LanguageSignalInfo, SignalKind
from langprofile.storage.store import SignalStore

CONVERSATION = SignalKind.CONVERSATION_ACTIONS
CLASSIFY = SignalKind.CLASSIFY_TEXT


@pytest_asyncio.fixture(params=["sqlite", "memory"])
async def store(request):
    store = SignalStore(":memory:") if request.param == "sqlite" else InMemorySignalStore()
    async with store:
        yield store


# ─── Row Model Tests ─────────────────────────────────────────────

class TestLanguageSignalInfo:
    def test_equality_by_value(self):
        assert LanguageSignalInfo("en", CONVERSATION, 1) == LanguageSignalInfo("en", CONVERSATION, 1)
        assert LanguageSignalInfo("en", CONVERSATION, 1) != LanguageSignalInfo("en", CLASSIFY, 1)

    def test_key(self):
        assert LanguageSignalInfo("zh", CLASSIFY, 3).key == ("zh", CLASSIFY)

    def test_frozen(self):
        info = LanguageSignalInfo("en", CLASSIFY, 1)
        with pytest.raises(AttributeError):
            info.count = 2  # type: ignore[misc]


# ─── Upsert Tests (both backends) ────────────────────────────────

class TestUpsertIncrement:
    @pytest.mark.asyncio
    async def test_insert_then_update(self, store):
        assert await store.upsert_increment("en", CONVERSATION) == 1
        assert await store.upsert_increment("en", CONVERSATION) == 2
        assert await store.get_all() == [LanguageSignalInfo("en", CONVERSATION, 2)]

    @pytest.mark.asyncio
    async def test_insert_with_delta(self, store):
        assert await store.upsert_increment("en", CLASSIFY, 5) == 5
        assert await store.upsert_increment("en", CLASSIFY, 2) == 7

    @pytest.mark.asyncio
    async def test_first_write_order(self, store):
        await store.upsert_increment("zh", CLASSIFY)
        await store.upsert_increment("en", CONVERSATION)
        await store.upsert_increment("zh", CLASSIFY)
        await store.upsert_increment("en", CLASSIFY)
        assert await store.get_all() == [
            LanguageSignalInfo("zh", CLASSIFY, 2),
            LanguageSignalInfo("en", CONVERSATION, 1),
            LanguageSignalInfo("en", CLASSIFY, 1),
        ]

    @pytest.mark.asyncio
    async def test_tag_case_preserved(self, store):
        await store.upsert_increment("zh-Hant", CLASSIFY)
        await store.upsert_increment("zh-hant", CLASSIFY)
        tags = [info.language_tag for info in await store.get_all()]
        assert tags == ["zh-Hant", "zh-hant"]

    @pytest.mark.asyncio
    async def test_concurrent_same_key(self, store):
        await asyncio.gather(*(store.upsert_increment("en", CONVERSATION) for _ in range(50)))
        assert await store.get_all() == [LanguageSignalInfo("en", CONVERSATION, 50)]

    @pytest.mark.asyncio
    async def test_concurrent_different_keys(self, store):
        tags = [f"t{i}" for i in range(10)]
        await asyncio.gather(*(store.upsert_increment(tag, CLASSIFY) for tag in tags * 3))
        infos = await store.get_all()
        assert {info.language_tag: info.count for info in infos} == {tag: 3 for tag in tags}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("delta", [0, -1])
    async def test_rejects_non_positive_delta(self, store, delta):
        with pytest.raises(ValueError):
            await store.upsert_increment("en", CLASSIFY, delta)
        assert await store.get_all() == []

    @pytest.mark.asyncio
    async def test_rejects_blank_tag(self, store):
        with pytest.raises(ValueError):
            await store.upsert_increment("  ", CLASSIFY)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tag", [None, 42])
    async def test_rejects_non_string_tag(self, store, tag):
        with pytest.raises(ValueError):
            await store.upsert_increment(tag, CLASSIFY)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_rejects_unknown_kind(self, store):
        with pytest.raises(ValueError):
            await store.upsert_increment("en", "classify_text")  # type: ignore[arg-type]


class TestLookups:
    @pytest.mark.asyncio
    async def test_get(self, store):
        await store.upsert_increment("en", CLASSIFY)
        assert await store.get("en", CLASSIFY) == LanguageSignalInfo("en", CLASSIFY, 1)
        assert await store.get("en", CONVERSATION) is None

    @pytest.mark.asyncio
    async def test_get_by_signal_kind(self, store):
        await store.upsert_increment("en", CONVERSATION)
        await store.upsert_increment("zh", CLASSIFY)
        await store.upsert_increment("en", CLASSIFY)
        assert await store.get_by_signal_kind(CLASSIFY) == [
            LanguageSignalInfo("zh", CLASSIFY, 1),
            LanguageSignalInfo("en", CLASSIFY, 1),
        ]


# ─── SQLite-specific Tests ───────────────────────────────────────

class TestSqliteStore:
    @pytest.mark.asyncio
    async def test_persists_across_connections(self, tmp_path):
        db_path = tmp_path / "nested" / "profile.db"
        async with SignalStore(db_path) as store:
            await store.upsert_increment("en", CONVERSATION)
        async with SignalStore(db_path) as store:
            assert await store.upsert_increment("en", CONVERSATION) == 2
            assert await store.get_all() == [LanguageSignalInfo("en", CONVERSATION, 2)]

    @pytest.mark.asyncio
    async def test_not_connected(self):
        store = SignalStore(":memory:")
        with pytest.raises(StoreFailure):
            await store.get_all()
        with pytest.raises(StoreFailure):
            await store.upsert_increment("en", CLASSIFY)

    @pytest.mark.asyncio
    async def test_unopenable_database(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        store = SignalStore(tmp_path / "file" / "sub" / "profile.db")
        with pytest.raises(StoreFailure):
            await store.connect()
