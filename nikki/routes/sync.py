from __future__ import annotations

from fastapi import APIRouter, Depends

from nikki.auth import optional_user_id
from nikki.dependencies import get_diary_service
from nikki.models import GuestRecord
from nikki.schemas import GuestSyncPayload, SyncResponse
from nikki.services.diary_service import DiaryService

router = APIRouter()


@router.post("/v1/sync/guest", response_model=SyncResponse)
async def sync_guest_entries(
    payload: GuestSyncPayload,
    user_id: str | None = Depends(optional_user_id),
    service: DiaryService = Depends(get_diary_service),
):
    records = [
        GuestRecord(day=item.day, content=item.content, mood_color=item.mood_color, images=item.images)
        for item in payload.entries
    ]
    return await service.sync_guest_entries(user_id, records)
