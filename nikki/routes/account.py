from __future__ import annotations

from fastapi import APIRouter, Depends

from nikki.auth import require_user_id
from nikki.dependencies import get_account_service, get_diary_service
from nikki.errors import ValidationError
from nikki.schemas import PasswordChangePayload, ProfileImagePayload, SettingsPatch
from nikki.services.accounts import AccountService
from nikki.services.diary_service import DiaryService

router = APIRouter()


@router.get("/v1/account")
async def get_account(
    user_id: str = Depends(require_user_id),
    service: AccountService = Depends(get_account_service),
):
    return await service.get_profile(user_id)


@router.patch("/v1/account/settings")
async def update_settings(
    patch: SettingsPatch,
    user_id: str = Depends(require_user_id),
    service: AccountService = Depends(get_account_service),
):
    data = patch.model_dump(exclude_unset=True)
    if not data:
        raise ValidationError("No changes provided")
    return await service.update_settings(user_id, **data)


@router.put("/v1/account/password")
async def change_password(
    payload: PasswordChangePayload,
    user_id: str = Depends(require_user_id),
    service: AccountService = Depends(get_account_service),
):
    await service.change_password(user_id, payload.current_password, payload.new_password)
    return {"ok": True}


@router.put("/v1/account/profile-image")
async def set_profile_image(
    payload: ProfileImagePayload,
    user_id: str = Depends(require_user_id),
    service: AccountService = Depends(get_account_service),
):
    return await service.set_profile_image(user_id, payload.url)


@router.get("/v1/account/export")
async def export_entries(
    user_id: str = Depends(require_user_id),
    service: DiaryService = Depends(get_diary_service),
):
    return await service.export_entries(user_id)
