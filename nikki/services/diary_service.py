from __future__ import annotations

import logging
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Optional

from nikki.errors import DiaryError, Outcome, Unauthenticated
from nikki.models import GuestRecord, Stats
from nikki.repositories import EntryStore
from nikki.services.guest_sync import GuestSyncMerger
from nikki.services.stats import StatisticsEngine

logger = logging.getLogger(__name__)


async def read_outcome(action: str, default, call: Callable[[], Awaitable[Any]]) -> Outcome:
    """Run a read, falling back to ``default`` with the error attached on failure."""
    try:
        return Outcome(await call())
    except DiaryError as exc:
        logger.warning("Failed to %s: %s", action, exc)
        return Outcome(default, error=exc)
    except Exception as exc:
        logger.exception("Unexpected failure while trying to %s", action)
        return Outcome(default, error=DiaryError(str(exc)))


class DiaryService:
    """Operations the HTTP layer calls; ``user_id=None`` means there is no session.

    Reads never raise: without a session they return empty results, and on a
    failure they return the same defaults with the error attached to the
    ``Outcome``. Writes raise ``DiaryError`` subclasses.
    """

    def __init__(self, store: EntryStore, stats: StatisticsEngine, merger: GuestSyncMerger):
        self.store = store
        self.stats = stats
        self.merger = merger

    def _default_stats(self) -> Dict[str, Any]:
        return Stats(total_entries=0, streak=0, frequent_mood=self.stats.default_mood_color).to_payload()

    async def get_month_entries(self, user_id: Optional[str], year: int, month: int) -> Outcome[List[Dict[str, Any]]]:
        if not user_id:
            return Outcome([])

        async def load():
            records = await self.store.find_by_month(user_id, year, month)
            return [record.to_payload() for record in records]

        return await read_outcome(f"fetch entries for {year}-{month}", [], load)

    async def get_entry_by_day(self, user_id: Optional[str], day_str: str) -> Outcome[Optional[Dict[str, Any]]]:
        if not user_id:
            return Outcome(None)

        async def load():
            record = await self.store.find_by_day(user_id, day_str)
            return record.to_payload() if record else None

        return await read_outcome(f"fetch entry for {day_str}", None, load)

    async def save_entry(
        self,
        user_id: Optional[str],
        day_str: str,
        content: str,
        mood_color: Optional[str],
        images: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        if not user_id:
            raise Unauthenticated()
        record = await self.store.upsert(user_id, day_str, content, mood_color, images or [])
        return record.to_payload()

    async def delete_entry(self, user_id: Optional[str], day_str: str) -> Dict[str, bool]:
        if not user_id:
            raise Unauthenticated()
        removed = await self.store.delete(user_id, day_str)
        if not removed:
            logger.debug("Delete for %s found no entry", day_str)
        return {"success": True}

    async def get_stats(self, user_id: Optional[str], today: Optional[date] = None) -> Outcome[Dict[str, Any]]:
        if not user_id:
            return Outcome(self._default_stats())

        async def load():
            stats = await self.stats.summary(user_id, today=today)
            return stats.to_payload()

        return await read_outcome("fetch user stats", self._default_stats(), load)

    async def sync_guest_entries(self, user_id: Optional[str], guest_records: List[GuestRecord]) -> Dict[str, Any]:
        if not user_id:
            raise Unauthenticated()
        result = await self.merger.merge(user_id, guest_records)
        return result.to_payload()

    async def export_entries(self, user_id: Optional[str]) -> Dict[str, Any]:
        if not user_id:
            raise Unauthenticated()
        records = await self.store.export_all(user_id)
        return {
            "count": len(records),
            "entries": [
                {**record.to_payload(), "createdAt": record.created_at, "updatedAt": record.updated_at}
                for record in records
            ],
        }
