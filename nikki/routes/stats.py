from __future__ import annotations

from fastapi import APIRouter, Depends

from nikki.auth import optional_user_id
from nikki.dependencies import get_diary_service
from nikki.schemas import StatsResponse
from nikki.services.diary_service import DiaryService

router = APIRouter()


@router.get("/v1/stats", response_model=StatsResponse)
async def get_stats(
    user_id: str | None = Depends(optional_user_id),
    service: DiaryService = Depends(get_diary_service),
):
    outcome = await service.get_stats(user_id)
    return {**outcome.value, "degraded": not outcome.ok}
