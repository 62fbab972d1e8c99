"""Field transforms applied server-side when a document is written."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class Increment:
    amount: int | float = 1


@dataclass(frozen=True)
class ArrayUnion:
    values: tuple[Any, ...]


@dataclass(frozen=True)
class ArrayRemove:
    values: tuple[Any, ...]


def increment(amount: int | float = 1) -> Increment:
    return Increment(amount)


def array_union(*values: Any) -> ArrayUnion:
    return ArrayUnion(tuple(values))


def array_remove(*values: Any) -> ArrayRemove:
    return ArrayRemove(tuple(values))


def _apply_transform(current: Any, change: Any) -> Any:
    if isinstance(change, Increment):
        # Non-numeric (or missing) fields are replaced by the increment amount.
        if isinstance(current, (int, float)) and not isinstance(current, bool):
            return current + change.amount
        return change.amount
    if isinstance(change, ArrayUnion):
        result = list(current) if isinstance(current, list) else []
        for value in change.values:
            if value not in result:
                result.append(value)
        return result
    if isinstance(change, ArrayRemove):
        if not isinstance(current, list):
            return []
        return [value for value in current if value not in change.values]
    return change


def apply_changes(current: Mapping[str, Any] | None, changes: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new mapping with ``changes`` (plain values or transforms) applied."""

    result = dict(current or {})
    for field, change in changes.items():
        result[field] = _apply_transform(result.get(field), change)
    return result


def has_transforms(data: Mapping[str, Any]) -> bool:
    return any(isinstance(value, (Increment, ArrayUnion, ArrayRemove)) for value in data.values())


__all__ = [
    "Increment",
    "ArrayUnion",
    "ArrayRemove",
    "increment",
    "array_union",
    "array_remove",
    "apply_changes",
    "has_transforms",
]
