"""Unsigned uploads to a Cloudinary-compatible media host."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from fastapi import UploadFile

from ..config import get_settings
from ..schemas import MediaType
from ..security.secrets import is_placeholder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaConfig:
    """Upload endpoint settings resolved from the environment."""

    upload_url: str
    upload_preset: str
    timeout: float


@dataclass(frozen=True)
class MediaUploadResult:
    url: str
    media_type: MediaType
    content_type: str


class MediaConfigurationError(RuntimeError):
    """Raised when the media host settings are missing or invalid."""


class MediaUploadError(RuntimeError):
    """Raised when the media host rejects or fails an upload."""


def load_media_config() -> MediaConfig:
    settings = get_settings()
    cloud_name = (settings.media_cloud_name or "").strip()
    preset = (settings.media_upload_preset or "").strip()

    missing = [
        name
        for name, value in (("MEDIA_CLOUD_NAME", cloud_name), ("MEDIA_UPLOAD_PRESET", preset))
        if is_placeholder(value)
    ]
    if missing:
        raise MediaConfigurationError("Missing required media upload configuration: " + ", ".join(missing))

    base_url = settings.media_upload_base_url.rstrip("/")
    return MediaConfig(
        upload_url=f"{base_url}/{cloud_name}/auto/upload",
        upload_preset=preset,
        timeout=settings.media_upload_timeout,
    )


async def upload_media(file: UploadFile, *, client: httpx.AsyncClient | None = None) -> MediaUploadResult:
    """POST the raw file and the upload preset, returning the hosted ``secure_url``."""

    config = load_media_config()
    content_type = (file.content_type or "application/octet-stream").strip() or "application/octet-stream"
    payload = await file.read()

    files = {"file": (file.filename or "upload", payload, content_type)}
    data = {"upload_preset": config.upload_preset}

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=config.timeout)
    try:
        response = await http.post(config.upload_url, files=files, data=data)
        response.raise_for_status()
        body = response.json()
    except httpx.HTTPStatusError as exc:
        logger.error("Media upload rejected | status=%s url=%s", exc.response.status_code, config.upload_url)
        raise MediaUploadError(_error_message(exc.response)) from exc
    except httpx.HTTPError as exc:
        logger.error("Media upload transport error | url=%s error=%s", config.upload_url, type(exc).__name__)
        raise MediaUploadError("Upload failed") from exc
    except ValueError as exc:
        raise MediaUploadError("Media host returned an invalid response") from exc
    finally:
        if owns_client:
            await http.aclose()

    url = body.get("secure_url") if isinstance(body, dict) else None
    if not url:
        raise MediaUploadError("Media host response did not include a secure_url")

    return MediaUploadResult(url=url, media_type=MediaType.from_content_type(content_type), content_type=content_type)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Upload failed"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return "Upload failed"


__all__ = [
    "MediaConfig",
    "MediaUploadResult",
    "MediaConfigurationError",
    "MediaUploadError",
    "load_media_config",
    "upload_media",
]
