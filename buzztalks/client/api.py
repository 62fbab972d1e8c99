"""Thin httpx client for the BuzzTalks HTTP API."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from .session import AuthSession, SessionContext

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class BuzzTalksAPIError(RuntimeError):
    """A non-2xx response; ``detail`` carries the server's message verbatim."""

    def __init__(self, status_code: int, detail: Any) -> None:
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class BuzzTalksClient:
    """Calls the API on behalf of the signed-in user held by ``session``.

    Pass an existing ``httpx.Client`` (for example a FastAPI ``TestClient``)
    to reuse its transport; otherwise one is created for ``base_url``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        http: httpx.Client | None = None,
        session: SessionContext | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.session = session or SessionContext()

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "BuzzTalksClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        current = self.session.current
        if current is None:
            return {}
        return {"Authorization": f"Bearer {current.access_token}"}

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self.http.request(method, path, headers=self._headers(), **kwargs)
        if response.is_error:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            logger.debug("%s %s failed with %s: %s", method, path, response.status_code, detail)
            raise BuzzTalksAPIError(response.status_code, detail)
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        return response.json()

    # Auth ----------------------------------------------------------------

    def _start_session(self, body: dict[str, Any]) -> AuthSession:
        session = AuthSession(user_id=body["user_id"], email=body["email"], access_token=body["access_token"])
        self.session.begin(session)
        return session

    def sign_up(self, email: str, password: str, username: str) -> AuthSession:
        body = self._request("POST", "/auth/signup", json={"email": email, "password": password, "username": username})
        return self._start_session(body)

    def sign_in(self, email: str, password: str) -> AuthSession:
        return self._start_session(self._request("POST", "/auth/signin", json={"email": email, "password": password}))

    def sign_out(self) -> None:
        try:
            if self.session.is_authenticated:
                self._request("POST", "/auth/signout")
        finally:
            self.session.end()

    def session_info(self) -> dict[str, Any]:
        return self._request("GET", "/auth/session")

    # Posts and reels -----------------------------------------------------

    def feed(self, *, limit: int | None = None) -> list[dict[str, Any]]:
        params = {"limit": limit} if limit else None
        return self._request("GET", "/feed", params=params)["items"]

    def explore(self, hashtag: str | None = None) -> list[dict[str, Any]]:
        params = {"hashtag": hashtag} if hashtag else None
        return self._request("GET", "/explore", params=params)["items"]

    def search(self, term: str) -> dict[str, Any]:
        return self._request("GET", "/search", params={"q": term})

    def create_post(
        self,
        *,
        media_url: str,
        caption: str = "",
        media_type: str = "image",
        location: str | None = None,
    ) -> dict[str, Any]:
        data = {"media_url": media_url, "caption": caption, "media_type": media_type}
        if location:
            data["location"] = location
        return self._request("POST", "/posts", data=data)

    def get_post(self, post_id: str) -> dict[str, Any]:
        return self._request("GET", f"/posts/{post_id}")

    def like_post(self, post_id: str, *, should_like: bool | None = None) -> dict[str, Any]:
        return self._request("POST", f"/posts/{post_id}/like", json={"should_like": should_like})

    def delete_post(self, post_id: str) -> None:
        self._request("DELETE", f"/posts/{post_id}")

    def reels(self) -> list[dict[str, Any]]:
        return self._request("GET", "/reels")["items"]

    def like_reel(self, reel_id: str, *, should_like: bool | None = None) -> dict[str, Any]:
        return self._request("POST", f"/reels/{reel_id}/like", json={"should_like": should_like})

    def delete_reel(self, reel_id: str) -> None:
        self._request("DELETE", f"/reels/{reel_id}")

    # Comments ------------------------------------------------------------

    def comments(self, post_id: str) -> dict[str, Any]:
        return self._request("GET", f"/posts/{post_id}/comments")

    def add_comment(self, post_id: str, content: str, *, parent_id: str | None = None) -> dict[str, Any]:
        return self._request("POST", f"/posts/{post_id}/comments", json={"content": content, "parent_id": parent_id})

    def like_comment(self, comment_id: str, *, should_like: bool | None = None) -> dict[str, Any]:
        return self._request("POST", f"/comments/{comment_id}/like", json={"should_like": should_like})

    def delete_comment(self, comment_id: str) -> None:
        self._request("DELETE", f"/comments/{comment_id}")

    # Profiles and follows -----------------------------------------------

    def me(self) -> dict[str, Any]:
        return self._request("GET", "/users/me")

    def update_profile(self, **fields: Any) -> dict[str, Any]:
        return self._request("PATCH", "/users/me", json=fields)

    def profile(self, user_id: str) -> dict[str, Any]:
        return self._request("GET", f"/users/{user_id}")

    def user_posts(self, user_id: str) -> list[dict[str, Any]]:
        return self._request("GET", f"/users/{user_id}/posts")["items"]

    def suggestions(self) -> list[dict[str, Any]]:
        return self._request("GET", "/users/suggestions")["items"]

    def follow(self, user_id: str) -> dict[str, Any]:
        return self._request("POST", f"/follows/{user_id}")

    def unfollow(self, user_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"/follows/{user_id}")

    def follow_stats(self, user_id: str) -> dict[str, Any]:
        return self._request("GET", f"/follows/{user_id}")

    # Stories -------------------------------------------------------------

    def stories(self) -> list[dict[str, Any]]:
        return self._request("GET", "/stories")["items"]

    def add_story(self, media_url: str, media_type: str = "image") -> dict[str, Any]:
        return self._request("POST", "/stories", json={"media_url": media_url, "media_type": media_type})

    def view_story(self, story_id: str) -> None:
        self._request("POST", f"/stories/{story_id}/view")

    # Messages ------------------------------------------------------------

    def conversations(self, *, selected: str | None = None) -> dict[str, Any]:
        params = {"conversation": selected} if selected else None
        return self._request("GET", "/conversations", params=params)

    def open_conversation(self, user_id: str) -> dict[str, Any]:
        return self._request("POST", "/conversations", json={"user_id": user_id})

    def messages(self, conversation_id: str) -> list[dict[str, Any]]:
        return self._request("GET", f"/conversations/{conversation_id}/messages")["items"]

    def send_message(self, conversation_id: str, content: str = "", *, media_url: str | None = None) -> dict[str, Any]:
        return self._request(
            "POST",
            f"/conversations/{conversation_id}/messages",
            json={"content": content, "media_url": media_url},
        )

    # Notifications -------------------------------------------------------

    def notifications(self) -> dict[str, Any]:
        return self._request("GET", "/notifications")

    def notification_summary(self) -> dict[str, Any]:
        return self._request("GET", "/notifications/summary")

    def mark_notification_read(self, notification_id: str) -> dict[str, Any]:
        return self._request("POST", f"/notifications/{notification_id}/read")

    def mark_all_notifications_read(self) -> dict[str, Any]:
        return self._request("POST", "/notifications/read-all")


__all__ = ["BuzzTalksAPIError", "BuzzTalksClient", "DEFAULT_TIMEOUT"]
