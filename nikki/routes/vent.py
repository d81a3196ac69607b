from __future__ import annotations

from fastapi import APIRouter, Depends

from nikki.auth import optional_user_id
from nikki.dependencies import get_vent_service
from nikki.schemas import VentWordPayload
from nikki.services.vent import VentService

router = APIRouter()


@router.get("/v1/vent")
async def list_vent_words(
    user_id: str | None = Depends(optional_user_id),
    service: VentService = Depends(get_vent_service),
):
    outcome = await service.list_words(user_id)
    return {"items": outcome.value, "degraded": not outcome.ok}


@router.post("/v1/vent", status_code=201)
async def add_vent_word(
    payload: VentWordPayload,
    user_id: str | None = Depends(optional_user_id),
    service: VentService = Depends(get_vent_service),
):
    return await service.add_word(user_id, payload.word)


@router.delete("/v1/vent")
async def clear_vent_words(
    user_id: str | None = Depends(optional_user_id),
    service: VentService = Depends(get_vent_service),
):
    return await service.clear_words(user_id)
