"""Observable sign-in state shared by everything that talks to the API."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthSession:
    user_id: str
    email: str
    access_token: str


SessionObserver = Callable[["AuthSession | None"], None]


class SessionContext:
    """Replaces a process-wide "current user".

    The context is started on sign-in or sign-up, ended on sign-out, and every
    observer is called with the new session (or ``None``) on each transition.
    """

    def __init__(self) -> None:
        self._current: AuthSession | None = None
        self._observers: list[SessionObserver] = []
        self._lock = threading.Lock()

    @property
    def current(self) -> AuthSession | None:
        return self._current

    @property
    def user_id(self) -> str | None:
        return self._current.user_id if self._current else None

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    def observe(self, observer: SessionObserver) -> Callable[[], None]:
        """Register ``observer`` and call it once with the current session.

        Returns a function that removes the observer.
        """

        with self._lock:
            self._observers.append(observer)
        observer(self._current)

        def _remove() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return _remove

    def begin(self, session: AuthSession) -> None:
        self._set(session)

    def end(self) -> None:
        self._set(None)

    def _set(self, session: AuthSession | None) -> None:
        with self._lock:
            self._current = session
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(session)
            except Exception:
                logger.exception("Session observer raised")


__all__ = ["AuthSession", "SessionContext", "SessionObserver"]
