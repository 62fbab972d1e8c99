"""WebSocket live views: authentication, snapshots, pushes and rejection frames."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from buzztalks.services.live_views import LiveViewError, build_view


def test_socket_rejects_bad_token(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect) as closed:
        with client.websocket_connect("/ws?token=not-a-token") as socket:
            socket.receive_text()
    assert closed.value.code == 1008


def test_notifications_view_streams_new_follow(client: TestClient, register) -> None:
    alice = register("alice")
    bob = register("bob")

    with client.websocket_connect(f"/ws?token={alice['access_token']}") as socket:
        socket.send_json({"type": "ping"})
        assert socket.receive_json() == {"type": "pong"}

        socket.send_json({"type": "subscribe", "id": "n1", "view": "notifications"})
        initial = socket.receive_json()
        assert initial["type"] == "snapshot"
        assert initial["id"] == "n1"
        assert initial["state"] == "live"
        assert initial["data"] == {"items": [], "unread_count": 0}

        response = client.post(f"/follows/{alice['user_id']}", headers=bob["headers"])
        assert response.status_code == 201, response.text

        pushed = socket.receive_json()
        while not pushed["data"]["items"]:
            pushed = socket.receive_json()
        assert pushed["data"]["unread_count"] == 1
        assert pushed["data"]["items"][0]["from_user"]["username"] == "bob"

        socket.send_json({"type": "unsubscribe", "id": "n1"})
        frame = socket.receive_json()
        while frame["type"] == "snapshot":
            frame = socket.receive_json()
        assert frame == {"type": "unsubscribed", "id": "n1"}


def test_unknown_view_is_rejected(client: TestClient, register) -> None:
    alice = register("alice")
    with client.websocket_connect(f"/ws?token={alice['access_token']}") as socket:
        socket.send_json({"type": "subscribe", "id": "x", "view": "nonsense"})
        frame = socket.receive_json()
        assert (frame["type"], frame["state"]) == ("error", "rejected")

        socket.send_json({"type": "subscribe", "id": "m", "view": "messages", "params": {"conversation_id": "nope"}})
        frame = socket.receive_json()
        assert (frame["type"], frame["state"], frame["detail"]) == ("error", "rejected", "Conversation not found")


def test_build_view_requires_parameters(store) -> None:
    with pytest.raises(LiveViewError):
        build_view(store, "comments", {}, user_id="u1")
    with pytest.raises(LiveViewError):
        build_view(store, "unknown", None, user_id="u1")
    with pytest.raises(LiveViewError):
        build_view(store, "post", ["post_id", "p1"], user_id="u1")


def test_non_object_params_are_rejected_without_closing_socket(client: TestClient, register) -> None:
    alice = register("alice")
    with client.websocket_connect(f"/ws?token={alice['access_token']}") as socket:
        socket.send_json({"type": "subscribe", "id": "p", "view": "comments", "params": ["post_id"]})
        frame = socket.receive_json()
        assert (frame["type"], frame["id"], frame["state"]) == ("error", "p", "rejected")

        socket.send_json({"type": "ping"})
        assert socket.receive_json() == {"type": "pong"}
