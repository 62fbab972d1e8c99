"""WebSocket sessions that stream live view snapshots to connected clients."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping

from fastapi import HTTPException, WebSocket

from ..store import ConnectionState, DocumentStore
from .live_views import LiveView, LiveViewError, watch_view

logger = logging.getLogger(__name__)


class ViewSession:
    """One socket's set of live views.

    Snapshot callbacks fire on whichever thread committed the write, so frames
    are handed to the socket's event loop and sent in order by :meth:`pump`.
    """

    def __init__(self, websocket: WebSocket, store: DocumentStore, user_id: str) -> None:
        self.websocket = websocket
        self.store = store
        self.user_id = user_id
        self._loop = asyncio.get_running_loop()
        self._outbox: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()
        self._views: dict[str, LiveView] = {}

    def push(self, frame: dict[str, Any]) -> None:
        asyncio.run_coroutine_threadsafe(self._outbox.put(frame), self._loop)

    async def pump(self) -> None:
        while True:
            frame = await self._outbox.get()
            if frame is None:
                return
            await self.websocket.send_text(json.dumps(frame, default=str))

    def subscribe(self, subscription_id: str, view: str, params: Mapping[str, Any] | None) -> None:
        if subscription_id in self._views:
            self.unsubscribe(subscription_id)

        def _on_payload(payload: dict[str, Any]) -> None:
            self.push(
                {
                    "type": "snapshot",
                    "id": subscription_id,
                    "view": view,
                    "state": ConnectionState.LIVE.value,
                    "data": payload,
                }
            )

        def _on_error(exc: Exception, state: ConnectionState) -> None:
            self.push({"type": "error", "id": subscription_id, "view": view, "state": state.value, "detail": str(exc)})

        try:
            live = watch_view(
                self.store,
                view,
                params,
                user_id=self.user_id,
                on_payload=_on_payload,
                on_error=_on_error,
            )
        except LiveViewError as exc:
            self.push({"type": "error", "id": subscription_id, "view": view, "state": "rejected", "detail": str(exc)})
            return
        except HTTPException as exc:
            self.push(
                {"type": "error", "id": subscription_id, "view": view, "state": "rejected", "detail": exc.detail}
            )
            return
        self._views[subscription_id] = live

    def unsubscribe(self, subscription_id: str) -> bool:
        live = self._views.pop(subscription_id, None)
        if live is None:
            return False
        live.close()
        return True

    def close(self) -> None:
        for subscription_id in list(self._views):
            self.unsubscribe(subscription_id)
        self._outbox.put_nowait(None)

    @property
    def view_count(self) -> int:
        return len(self._views)


class ViewStreamManager:
    """Tracks connected sockets and tears down their views on disconnect."""

    def __init__(self) -> None:
        self._sessions: dict[WebSocket, ViewSession] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, store: DocumentStore, user_id: str) -> ViewSession:
        await websocket.accept()
        session = ViewSession(websocket, store, user_id)
        async with self._lock:
            self._sessions[websocket] = session
        return session

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            session = self._sessions.pop(websocket, None)
        if session is not None:
            session.close()

    @property
    def connection_count(self) -> int:
        return len(self._sessions)


view_stream_manager = ViewStreamManager()


__all__ = ["ViewSession", "ViewStreamManager", "view_stream_manager"]
