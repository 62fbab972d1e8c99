"""Clock helpers producing the canonical timestamp strings stored in documents."""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Render ``value`` as a UTC ISO-8601 string with fixed microsecond precision.

    Stored timestamps are compared as strings by the query engine, so every
    value must share the exact same layout for lexical and chronological order
    to agree. Naive datetimes are assumed to already be UTC.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def now_iso() -> str:
    return to_iso(utcnow())


__all__ = ["utcnow", "to_iso", "now_iso"]
