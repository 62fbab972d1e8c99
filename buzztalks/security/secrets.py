"""Read secrets from the environment without ever echoing their values."""
from __future__ import annotations

import os
from typing import Final

__all__ = ["MissingSecretError", "require_secret", "optional_env", "is_placeholder"]


class MissingSecretError(RuntimeError):
    """A required secret is unset or still holds a template value."""


_PLACEHOLDERS: Final[frozenset[str]] = frozenset(
    {
        "changeme",
        "change-me",
        "placeholder",
        "example",
        "your-secret-here",
        "your-cloud-name",
        "your-upload-preset",
    }
)


def is_placeholder(value: str | None) -> bool:
    """True for empty values and the stock values shipped in ``.env.example``."""

    if not value:
        return True
    normalized = value.strip().lower()
    return not normalized or normalized in _PLACEHOLDERS


def require_secret(name: str) -> str:
    value = os.getenv(name)
    if is_placeholder(value):
        raise MissingSecretError(f"Environment variable {name} must be set to a real value")
    return value.strip()


def optional_env(name: str, default: str) -> str:
    value = (os.getenv(name) or "").strip()
    return value or default
