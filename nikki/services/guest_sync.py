from __future__ import annotations

import logging

from nikki.daykeys import day_key
from nikki.errors import ValidationError
from nikki.models import GuestRecord, MergeResult
from nikki.repositories import EntryStore

logger = logging.getLogger(__name__)


class GuestSyncMerger:
    """Moves browser-held guest entries into the account on first sign-in.

    Guest data always wins over what the server already has for the same day.
    The whole batch is one write; if it fails nothing is reported as merged and
    the client keeps its local copy.
    """

    def __init__(self, store: EntryStore):
        self.store = store

    def _prepare(self, guest_records: list[GuestRecord]) -> dict[str, dict]:
        by_day: dict[str, dict] = {}
        for record in guest_records:
            try:
                key = day_key(record.day)
            except ValidationError:
                logger.warning("Skipping guest entry with invalid day %r", record.day)
                continue
            if not (record.content or "").strip():
                logger.info("Skipping empty guest entry for %s", key)
                continue
            by_day[key] = {
                "day": key,
                "content": record.content,
                "mood_color": record.mood_color,
                "images": record.images,
            }
        return by_day

    async def merge(self, user_id: str, guest_records: list[GuestRecord]) -> MergeResult:
        by_day = self._prepare(guest_records)
        if not by_day:
            return MergeResult(success=True, count=0)
        overwritten = sorted(await self.store.existing_days(user_id, list(by_day)))
        if overwritten:
            logger.info("Guest sync for %s overwrites %d existing entries", user_id, len(overwritten))
        count = await self.store.upsert_many(user_id, by_day.values())
        return MergeResult(success=True, count=count, overwritten=overwritten)
