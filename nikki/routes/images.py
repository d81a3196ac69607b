from __future__ import annotations

from fastapi import APIRouter, Depends

from nikki.auth import require_user_id
from nikki.dependencies import get_image_client
from nikki.schemas import ImageUploadPayload
from nikki.services.image_hosting import ImageHostingClient

router = APIRouter()


@router.post("/v1/images")
async def upload_image(
    payload: ImageUploadPayload,
    user_id: str = Depends(require_user_id),
    client: ImageHostingClient = Depends(get_image_client),
):
    url = await client.upload(payload.data_uri)
    return {"url": url}
