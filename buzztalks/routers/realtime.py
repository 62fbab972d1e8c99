"""WebSocket endpoint that streams live view snapshots."""
from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from ..database import get_document_store, get_session
from ..services import view_stream_manager
from ..services.auth_service import resolve_token
from ..store import DocumentStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def live_views_socket(
    websocket: WebSocket,
    token: str = Query(default=""),
    db: Session = Depends(get_session),
    store: DocumentStore = Depends(get_document_store),
) -> None:
    """Authenticate with ``?token=`` then exchange JSON frames.

    Client frames: ``subscribe`` (``id``, ``view``, ``params``), ``unsubscribe``
    (``id``) and ``ping``. Server frames: ``snapshot``, ``error``,
    ``unsubscribed`` and ``pong``.
    """

    try:
        user = resolve_token(db, token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    session = await view_stream_manager.connect(websocket, store, user.uid)
    sender = asyncio.create_task(session.pump())
    logger.info("Live socket connected for %s from %s", user.uid, websocket.client)
    try:
        while True:
            try:
                raw = await websocket.receive_text()
            except WebSocketDisconnect:
                break

            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                frame = {"type": raw}
            if not isinstance(frame, dict):
                continue

            message_type = str(frame.get("type") or "").lower()
            subscription_id = str(frame.get("id") or "")
            if message_type == "ping":
                session.push({"type": "pong"})
            elif message_type == "subscribe" and subscription_id:
                session.subscribe(subscription_id, str(frame.get("view") or ""), frame.get("params") or {})
            elif message_type == "unsubscribe" and subscription_id:
                session.unsubscribe(subscription_id)
                session.push({"type": "unsubscribed", "id": subscription_id})
    finally:
        await view_stream_manager.disconnect(websocket)
        try:
            await sender
        except Exception:
            logger.debug("Live socket sender stopped with an error", exc_info=True)
        logger.info("Live socket disconnected for %s", user.uid)


__all__ = ["router"]
