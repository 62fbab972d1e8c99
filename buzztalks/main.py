"""Application entry point for the FastAPI backend."""
from __future__ import annotations

import logging
from typing import Iterable

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .database import get_document_store, init_db
from .routers import (
    auth_router,
    comments_router,
    feed_router,
    follows_router,
    messages_router,
    notifications_router,
    posts_router,
    profiles_router,
    realtime_router,
    reels_router,
    stories_router,
    uploads_router,
)

logger = logging.getLogger(__name__)

settings = get_settings()
APP_NAME = settings.app_name
API_VERSION = settings.api_version

app = FastAPI(title=APP_NAME, version=API_VERSION)

if settings.cors_origins:
    origins: Iterable[str] = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
else:
    origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(feed_router)
app.include_router(posts_router)
app.include_router(comments_router)
app.include_router(reels_router)
app.include_router(profiles_router)
app.include_router(follows_router)
app.include_router(stories_router)
app.include_router(messages_router)
app.include_router(notifications_router)
app.include_router(uploads_router)
app.include_router(realtime_router)


@app.on_event("startup")
async def _startup() -> None:
    """Ensure the database schema exists before serving."""

    try:
        init_db()
    except Exception:
        logger.exception("Database initialisation failed")
        raise
    logger.info("%s %s ready at %s", APP_NAME, API_VERSION, settings.public_base_url)


@app.on_event("shutdown")
async def _shutdown() -> None:
    get_document_store().hub.close_all()


@app.exception_handler(StarletteHTTPException)
async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Not Found", "path": request.url.path},
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


@app.get("/api", tags=["system"])
def api_info() -> dict[str, str]:
    return {"service": APP_NAME, "version": API_VERSION}


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, object]:
    """Report liveness plus the number of open live subscriptions."""

    return {"status": "ok", "subscriptions": get_document_store().hub.count()}


__all__ = ["app"]
