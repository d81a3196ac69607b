"""Tests for nikki.services.diary_service."""

from datetime import date, timedelta

import pytest

from nikki.db import Database
from nikki.errors import StoreUnavailable, Unauthenticated, ValidationError
from nikki.models import GuestRecord
from nikki.repositories import EntryStore
from nikki.services.diary_service import DiaryService
from nikki.services.guest_sync import GuestSyncMerger
from nikki.services.stats import StatisticsEngine


@pytest.fixture
async def broken_service(cipher, tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nikki.db'}")
    store = EntryStore(database, cipher)
    yield DiaryService(store, StatisticsEngine(store), GuestSyncMerger(store))
    await database.dispose()


class TestReads:
    async def test_month_entries(self, diary_service):
        await diary_service.save_entry("u1", "2024-02-29", "leap day", "#00ff00", ["https://img/a.png"])
        outcome = await diary_service.get_month_entries("u1", 2024, 1)
        assert outcome.ok
        assert len(outcome.value) == 1
        entry = outcome.value[0]
        assert entry["day"] == "2024-02-29T00:00:00.000Z"
        assert entry["content"] == "leap day"
        assert entry["moodColor"] == "#00ff00"
        assert entry["images"] == ["https://img/a.png"]
        assert entry["id"]

    async def test_entry_by_day(self, diary_service):
        await diary_service.save_entry("u1", "2024-03-01", "hello", "#00ff00")
        assert (await diary_service.get_entry_by_day("u1", "2024-03-01")).value["content"] == "hello"
        assert (await diary_service.get_entry_by_day("u1", "2024-03-02")).value is None

    async def test_no_session_reads_are_empty(self, diary_service):
        await diary_service.save_entry("u1", "2024-03-01", "hello", "#00ff00")
        assert (await diary_service.get_month_entries(None, 2024, 2)).value == []
        assert (await diary_service.get_entry_by_day(None, "2024-03-01")).value is None
        stats = await diary_service.get_stats(None)
        assert stats.ok
        assert stats.value == {"totalEntries": 0, "streak": 0, "frequentMood": "#8b5cf6"}

    async def test_invalid_day_degrades(self, diary_service):
        outcome = await diary_service.get_entry_by_day("u1", "not-a-date")
        assert outcome.value is None
        assert isinstance(outcome.error, ValidationError)

    async def test_store_failure_degrades_reads(self, broken_service):
        month = await broken_service.get_month_entries("u1", 2024, 1)
        assert month.value == [] and isinstance(month.error, StoreUnavailable)
        day = await broken_service.get_entry_by_day("u1", "2024-02-01")
        assert day.value is None and not day.ok
        stats = await broken_service.get_stats("u1")
        assert stats.value == {"totalEntries": 0, "streak": 0, "frequentMood": "#8b5cf6"}
        assert isinstance(stats.error, StoreUnavailable)

    async def test_stats(self, diary_service):
        today = date(2024, 6, 15)
        for offset, mood in ((0, "red"), (1, "red"), (2, "blue")):
            await diary_service.save_entry("u1", (today - timedelta(days=offset)).isoformat(), "entry", mood)
        outcome = await diary_service.get_stats("u1", today=today)
        assert outcome.value == {"totalEntries": 3, "streak": 3, "frequentMood": "red"}


class TestWrites:
    async def test_save_twice_keeps_one_record(self, diary_service, store):
        await diary_service.save_entry("u1", "2024-03-01", "c1", "m1", ["i1"])
        saved = await diary_service.save_entry("u1", "2024-03-01", "c2", "m2", ["i2"])
        assert (saved["content"], saved["moodColor"], saved["images"]) == ("c2", "m2", ["i2"])
        assert await store.count_by_user("u1") == 1

    async def test_images_default_to_empty(self, diary_service):
        saved = await diary_service.save_entry("u1", "2024-03-01", "text", "red")
        assert saved["images"] == []

    async def test_writes_need_a_session(self, diary_service):
        with pytest.raises(Unauthenticated):
            await diary_service.save_entry(None, "2024-03-01", "text", "red")
        with pytest.raises(Unauthenticated):
            await diary_service.delete_entry(None, "2024-03-01")
        with pytest.raises(Unauthenticated):
            await diary_service.sync_guest_entries(None, [])
        with pytest.raises(Unauthenticated):
            await diary_service.export_entries(None)

    async def test_empty_content_rejected_every_time(self, diary_service):
        for _ in range(2):
            with pytest.raises(ValidationError):
                await diary_service.save_entry("u1", "2024-03-01", "", "red")

    async def test_delete_missing_day_succeeds(self, diary_service):
        assert await diary_service.delete_entry("u1", "2024-03-01") == {"success": True}

    async def test_delete_existing(self, diary_service):
        await diary_service.save_entry("u1", "2024-03-01", "text", "red")
        assert await diary_service.delete_entry("u1", "2024-03-01") == {"success": True}
        assert (await diary_service.get_entry_by_day("u1", "2024-03-01")).value is None

    async def test_store_failure_propagates_on_write(self, broken_service):
        with pytest.raises(StoreUnavailable):
            await broken_service.save_entry("u1", "2024-03-01", "text", "red")
        with pytest.raises(StoreUnavailable):
            await broken_service.delete_entry("u1", "2024-03-01")

    async def test_sync_guest_entries(self, diary_service):
        await diary_service.save_entry("u1", "2024-03-01", "server", "red")
        result = await diary_service.sync_guest_entries(
            "u1",
            [
                GuestRecord(day="2024-03-01", content="guest", mood_color="blue"),
                GuestRecord(day="2024-03-02", content="guest two", mood_color="blue"),
            ],
        )
        assert result == {"success": True, "count": 2, "overwritten": ["2024-03-01T00:00:00.000Z"]}
        assert (await diary_service.get_entry_by_day("u1", "2024-03-01")).value["content"] == "guest"

    async def test_export(self, diary_service):
        await diary_service.save_entry("u1", "2024-03-02", "second", "red")
        await diary_service.save_entry("u1", "2024-03-01", "first", "blue")
        export = await diary_service.export_entries("u1")
        assert export["count"] == 2
        assert [entry["content"] for entry in export["entries"]] == ["first", "second"]
        assert all(entry["createdAt"] for entry in export["entries"])
