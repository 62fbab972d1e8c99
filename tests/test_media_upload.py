"""Media host uploads and the routes that accept files."""
from __future__ import annotations

import asyncio
from io import BytesIO
from typing import Iterator

import httpx
import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from buzztalks.config import get_settings
import buzztalks.routers.uploads as upload_routes
from buzztalks.schemas import MediaType
from buzztalks.services import media_service
from buzztalks.services.media_service import MediaUploadError, MediaUploadResult


@pytest.fixture(autouse=True)
def _reset_settings() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def media_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEDIA_CLOUD_NAME", "buzz-cloud")
    monkeypatch.setenv("MEDIA_UPLOAD_PRESET", "unsigned-preset")
    get_settings.cache_clear()


def _upload_file(name: str = "demo.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(file=BytesIO(b"binary"), filename=name, headers=Headers({"content-type": content_type}))


def test_upload_posts_file_and_preset(media_env) -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"secure_url": "https://cdn.example/demo.mp4"})

    async def _run() -> MediaUploadResult:
        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
            return await media_service.upload_media(_upload_file("clip.mp4", "video/mp4"), client=client)

    result = asyncio.run(_run())

    assert result.url == "https://cdn.example/demo.mp4"
    assert result.media_type is MediaType.VIDEO
    assert str(seen[0].url) == "https://api.cloudinary.com/v1_1/buzz-cloud/auto/upload"
    body = seen[0].read()
    assert b"unsigned-preset" in body
    assert b'filename="clip.mp4"' in body


def test_upload_surfaces_host_error_message(media_env) -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"message": "Upload preset not found"}})

    async def _run() -> MediaUploadResult:
        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
            return await media_service.upload_media(_upload_file(), client=client)

    with pytest.raises(MediaUploadError, match="Upload preset not found"):
        asyncio.run(_run())


def test_upload_route_requires_configuration(client: TestClient, register, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MEDIA_CLOUD_NAME", raising=False)
    monkeypatch.delenv("MEDIA_UPLOAD_PRESET", raising=False)
    get_settings.cache_clear()
    alice = register("alice")

    response = client.post(
        "/uploads",
        files={"file": ("demo.png", BytesIO(b"binary"), "image/png")},
        headers=alice["headers"],
    )

    assert response.status_code == 500
    assert "MEDIA_CLOUD_NAME" in response.json()["detail"]


def test_post_with_file_uses_uploaded_url(client: TestClient, register, monkeypatch: pytest.MonkeyPatch) -> None:
    alice = register("alice")

    async def _fake_upload(file: UploadFile, *, client=None) -> MediaUploadResult:
        return MediaUploadResult(
            url="https://cdn.example/uploaded.mp4",
            media_type=MediaType.from_content_type(file.content_type),
            content_type=file.content_type or "",
        )

    monkeypatch.setattr(upload_routes, "upload_media", _fake_upload)

    response = client.post(
        "/posts",
        data={"caption": "new reel"},
        files={"file": ("clip.mp4", BytesIO(b"binary"), "video/mp4")},
        headers=alice["headers"],
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["media_url"] == "https://cdn.example/uploaded.mp4"
    assert body["media_type"] == "video"
    assert [item["id"] for item in client.get("/reels").json()["items"]] == [body["id"]]


def test_post_without_media_is_rejected(client: TestClient, register) -> None:
    alice = register("alice")
    response = client.post("/posts", data={"caption": "nothing attached"}, headers=alice["headers"])
    assert response.status_code == 400
