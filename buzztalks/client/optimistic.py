"""Two-phase optimistic state for values the UI changes before the server confirms."""
from __future__ import annotations

import copy
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class Phase(StrEnum):
    CONFIRMED = "confirmed"
    PENDING = "pending"


class OptimisticField(Generic[T]):
    """Holds a displayed value plus the last value the server confirmed.

    ``apply`` shows a local change immediately, ``rollback`` restores the
    confirmed value after a failed write and ``reconcile`` accepts whatever the
    server reports. Server values always win over pending local changes.
    """

    def __init__(self, value: T) -> None:
        self._confirmed = value
        self._displayed = value
        self._phase = Phase.CONFIRMED

    @property
    def value(self) -> T:
        return self._displayed

    @property
    def confirmed(self) -> T:
        return self._confirmed

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def pending(self) -> bool:
        return self._phase is Phase.PENDING

    def apply(self, value: T) -> T:
        self._displayed = value
        self._phase = Phase.PENDING
        return value

    def rollback(self) -> T:
        self._displayed = copy.copy(self._confirmed)
        self._phase = Phase.CONFIRMED
        return self._displayed

    def reconcile(self, server_value: T) -> T:
        self._confirmed = server_value
        self._displayed = server_value
        self._phase = Phase.CONFIRMED
        return server_value

    def __repr__(self) -> str:
        return f"OptimisticField(value={self._displayed!r}, confirmed={self._confirmed!r}, phase={self._phase.value})"


__all__ = ["Phase", "OptimisticField"]
