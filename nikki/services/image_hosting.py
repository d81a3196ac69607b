from __future__ import annotations

import logging

import httpx

from nikki.errors import ImageHostingError, ValidationError
from nikki.settings import Settings

logger = logging.getLogger(__name__)

UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"
MAX_DATA_URI_LENGTH = 10 * 1024 * 1024


class ImageHostingClient:
    """Forwards images to Cloudinary and hands back the hosted URL."""

    def __init__(
        self,
        cloud_name: str | None,
        upload_preset: str | None,
        api_key: str | None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 20,
    ):
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.api_key = api_key
        self.transport = transport
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageHostingClient":
        return cls(
            settings.cloudinary_cloud_name,
            settings.cloudinary_upload_preset,
            settings.cloudinary_api_key,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.upload_preset and self.api_key)

    async def upload(self, data_uri: str) -> str:
        if not self.configured:
            raise ImageHostingError("Image hosting is not configured")
        if not data_uri or not data_uri.startswith("data:image/"):
            raise ValidationError("Expected an image data URI")
        if len(data_uri) > MAX_DATA_URI_LENGTH:
            raise ValidationError("Image is too large")
        payload = {
            "file": data_uri,
            "upload_preset": self.upload_preset,
            "api_key": self.api_key,
        }
        url = UPLOAD_URL.format(cloud_name=self.cloud_name)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, data=payload)
        except httpx.HTTPError as exc:
            logger.warning("Image upload request failed: %s", exc)
            raise ImageHostingError("Image upload failed") from exc
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        if response.status_code >= 400:
            error = body.get("error")
            message = error.get("message") if isinstance(error, dict) else None
            logger.warning("Image host rejected upload (%s): %s", response.status_code, message)
            raise ImageHostingError(message or "Image upload failed")
        secure_url = body.get("secure_url")
        if not secure_url:
            raise ImageHostingError("Image host returned no URL")
        return secure_url
