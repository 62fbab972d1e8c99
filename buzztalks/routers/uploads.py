"""Upload endpoint plus helpers for routes that accept media as a file or a hosted URL."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from ..schemas import MediaType, MediaUploadResponse
from ..services import CurrentUser, MediaConfigurationError, MediaUploadError, get_current_user, upload_media
from ..services.media_service import MediaUploadResult

router = APIRouter(tags=["uploads"])


async def upload_or_raise(file: UploadFile) -> MediaUploadResult:
    try:
        return await upload_media(file)
    except MediaConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except MediaUploadError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


async def resolve_media(
    file: UploadFile | None,
    media_url: str | None,
    media_type: MediaType | None,
) -> tuple[str, MediaType]:
    """Upload ``file`` when present, otherwise fall back to an already hosted ``media_url``."""

    if file is not None and (file.filename or "").strip():
        result = await upload_or_raise(file)
        return result.url, media_type or result.media_type

    url = (media_url or "").strip()
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Provide a file or a media_url")
    return url, media_type or MediaType.IMAGE


@router.post("/uploads", response_model=MediaUploadResponse)
async def upload_endpoint(
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
) -> MediaUploadResponse:
    """Forward the file to the media host and return its public URL.

    Configuration problems surface as 500 and host failures as 502.
    """

    if not (file.filename or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file must include a filename.")

    result = await upload_or_raise(file)
    return MediaUploadResponse(url=result.url, media_type=result.media_type)


__all__ = ["router", "upload_or_raise", "resolve_media"]
