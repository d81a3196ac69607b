from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from nikki.auth import optional_user_id
from nikki.dependencies import get_diary_service
from nikki.schemas import EntryPayload
from nikki.services.diary_service import DiaryService

router = APIRouter()


@router.get("/v1/entries")
async def list_month_entries(
    year: int = Query(...),
    month: int = Query(..., description="Zero-based month"),
    user_id: str | None = Depends(optional_user_id),
    service: DiaryService = Depends(get_diary_service),
):
    outcome = await service.get_month_entries(user_id, year, month)
    return {"items": outcome.value, "degraded": not outcome.ok}


@router.get("/v1/entries/{day}")
async def get_entry(
    day: str,
    user_id: str | None = Depends(optional_user_id),
    service: DiaryService = Depends(get_diary_service),
):
    outcome = await service.get_entry_by_day(user_id, day)
    return {"entry": outcome.value, "degraded": not outcome.ok}


@router.put("/v1/entries/{day}")
async def save_entry(
    day: str,
    payload: EntryPayload,
    user_id: str | None = Depends(optional_user_id),
    service: DiaryService = Depends(get_diary_service),
):
    return await service.save_entry(user_id, day, payload.content, payload.mood_color, payload.images)


@router.delete("/v1/entries/{day}")
async def delete_entry(
    day: str,
    user_id: str | None = Depends(optional_user_id),
    service: DiaryService = Depends(get_diary_service),
):
    return await service.delete_entry(user_id, day)
