from __future__ import annotations

import logging
from datetime import date

from nikki.models import Stats
from nikki.repositories import EntryStore

logger = logging.getLogger(__name__)


def compute_streak(days_desc: list[date], today: date) -> int:
    """Consecutive-day run ending today or yesterday, from days sorted newest first."""
    if not days_desc:
        return 0
    latest = days_desc[0]
    if (today - latest).days > 1:
        return 0
    streak = 1
    anchor = latest
    for day in days_desc[1:]:
        diff = (anchor - day).days
        if diff == 1:
            streak += 1
            anchor = day
        elif diff > 1:
            break
        # diff == 0 can only happen if the (user, day) uniqueness is ever relaxed
    return streak


class StatisticsEngine:
    def __init__(self, store: EntryStore, default_mood_color: str = "#8b5cf6"):
        self.store = store
        self.default_mood_color = default_mood_color

    async def total_entries(self, user_id: str) -> int:
        return await self.store.count_by_user(user_id)

    async def current_streak(self, user_id: str, today: date | None = None) -> int:
        days = await self.store.all_days_by_user(user_id)
        return compute_streak(days, today or date.today())

    async def frequent_mood(self, user_id: str) -> str:
        counts = await self.store.mood_counts(user_id)
        if not counts:
            return self.default_mood_color
        return counts[0][0]

    async def summary(self, user_id: str, today: date | None = None) -> Stats:
        return Stats(
            total_entries=await self.total_entries(user_id),
            streak=await self.current_streak(user_id, today=today),
            frequent_mood=await self.frequent_mood(user_id),
        )
