from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from nikki.errors import Outcome, Unauthenticated
from nikki.repositories import VentStore
from nikki.services.diary_service import read_outcome

logger = logging.getLogger(__name__)


class VentService:
    def __init__(self, store: VentStore):
        self.store = store

    async def list_words(self, user_id: Optional[str]) -> Outcome[List[Dict[str, Any]]]:
        if not user_id:
            return Outcome([])

        async def load():
            return [word.to_payload() for word in await self.store.list_by_user(user_id)]

        return await read_outcome("fetch vent words", [], load)

    async def add_word(self, user_id: Optional[str], word: str) -> Dict[str, Any]:
        if not user_id:
            raise Unauthenticated()
        record = await self.store.add(user_id, word)
        return record.to_payload()

    async def clear_words(self, user_id: Optional[str]) -> Dict[str, Any]:
        if not user_id:
            raise Unauthenticated()
        removed = await self.store.clear(user_id)
        logger.info("Cleared %s vent words", removed)
        return {"success": True, "count": removed}
