from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from nikki.auth import clear_session_cookie, set_session_cookie
from nikki.dependencies import get_account_service, get_app_settings
from nikki.schemas import LoginPayload, RegisterPayload
from nikki.services.accounts import AccountService
from nikki.settings import Settings

router = APIRouter()


@router.post("/v1/auth/register", status_code=201)
async def register(
    payload: RegisterPayload,
    response: Response,
    service: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
):
    account = await service.register(payload.name, payload.email, payload.password)
    set_session_cookie(response, account.id, settings)
    return account.to_payload()


@router.post("/v1/auth/login")
async def login(
    payload: LoginPayload,
    response: Response,
    service: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
):
    account = await service.authenticate(payload.email, payload.password)
    set_session_cookie(response, account.id, settings)
    return account.to_payload()


@router.post("/v1/auth/logout")
async def logout(response: Response):
    clear_session_cookie(response)
    return {"ok": True}
