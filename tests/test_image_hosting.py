"""Tests for nikki.services.image_hosting."""

from urllib.parse import parse_qs

import httpx
import pytest

from nikki.errors import ImageHostingError, ValidationError
from nikki.services.image_hosting import ImageHostingClient

DATA_URI = "data:image/png;base64,iVBORw0KGgo="


def _client(handler):
    return ImageHostingClient("demo", "diary", "key-123", transport=httpx.MockTransport(handler))


class TestImageHostingClient:
    async def test_upload_returns_secure_url(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"secure_url": "https://res.cloudinary.com/demo/x.png"})

        url = await _client(handler).upload(DATA_URI)
        assert url == "https://res.cloudinary.com/demo/x.png"
        assert str(seen[0].url) == "https://api.cloudinary.com/v1_1/demo/image/upload"
        form = parse_qs(seen[0].content.decode())
        assert form["upload_preset"] == ["diary"]
        assert form["api_key"] == ["key-123"]
        assert form["file"] == [DATA_URI]

    async def test_upstream_error_message_is_surfaced(self):
        def handler(request):
            return httpx.Response(400, json={"error": {"message": "Upload preset not found"}})

        with pytest.raises(ImageHostingError, match="Upload preset not found"):
            await _client(handler).upload(DATA_URI)

    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(ImageHostingError):
            await _client(handler).upload(DATA_URI)

    async def test_missing_url_in_response(self):
        def handler(request):
            return httpx.Response(200, json={})

        with pytest.raises(ImageHostingError, match="no URL"):
            await _client(handler).upload(DATA_URI)

    async def test_not_configured(self):
        client = ImageHostingClient(None, "diary", "key-123")
        assert not client.configured
        with pytest.raises(ImageHostingError, match="not configured"):
            await client.upload(DATA_URI)

    async def test_rejects_non_image_payload(self):
        with pytest.raises(ValidationError):
            await _client(lambda request: httpx.Response(200)).upload("data:text/plain;base64,aGk=")
