"""Query description and in-memory evaluation shared by reads and live subscriptions."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Literal, Mapping, get_args

from .errors import InvalidQueryError
from .snapshot import DocumentSnapshot

Operator = Literal[
    "==",
    "!=",
    "<",
    "<=",
    ">",
    ">=",
    "array-contains",
    "array-contains-any",
    "in",
    "not-in",
]

_OPERATORS: frozenset[str] = frozenset(get_args(Operator))

_MISSING = object()


def _compare(op: str) -> Callable[[Any, Any], bool]:
    return {
        "<": lambda a, b: a < b,
        "<=": lambda a, b: a <= b,
        ">": lambda a, b: a > b,
        ">=": lambda a, b: a >= b,
    }[op]


def _same_kind(a: Any, b: Any) -> bool:
    numeric = (int, float)
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool)
    if isinstance(a, numeric) and isinstance(b, numeric):
        return True
    return type(a) is type(b)


@dataclass(frozen=True)
class FieldFilter:
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _OPERATORS:
            raise InvalidQueryError(f"Unsupported operator '{self.op}'")
        if self.op in {"in", "not-in", "array-contains-any"} and not isinstance(self.value, (list, tuple)):
            raise InvalidQueryError(f"Operator '{self.op}' requires a list value")

    def matches(self, data: Mapping[str, Any]) -> bool:
        actual = data.get(self.field, _MISSING)
        # Documents lacking the field never match, whatever the operator.
        if actual is _MISSING:
            return False
        op = self.op
        if op == "==":
            return _same_kind(actual, self.value) and actual == self.value
        if op == "!=":
            return actual is not None and not (_same_kind(actual, self.value) and actual == self.value)
        if op in {"<", "<=", ">", ">="}:
            if actual is None or not _same_kind(actual, self.value):
                return False
            try:
                return _compare(op)(actual, self.value)
            except TypeError:
                return False
        if op == "array-contains":
            return isinstance(actual, list) and self.value in actual
        if op == "array-contains-any":
            return isinstance(actual, list) and any(candidate in actual for candidate in self.value)
        if op == "in":
            return actual in self.value
        # not-in
        return actual is not None and actual not in self.value


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Query:
    """An immutable collection query: filters, ordering and an optional limit."""

    collection: str
    filters: tuple[FieldFilter, ...] = ()
    orders: tuple[OrderBy, ...] = ()
    limit: int | None = None

    def where(self, field: str, op: Operator, value: Any) -> "Query":
        return replace(self, filters=self.filters + (FieldFilter(field, op, value),))

    def order_by(self, field: str, *, descending: bool = False) -> "Query":
        return replace(self, orders=self.orders + (OrderBy(field, descending),))

    def limit_to(self, count: int) -> "Query":
        if count < 0:
            raise InvalidQueryError("Query limit must not be negative")
        return replace(self, limit=count)

    def matches(self, data: Mapping[str, Any] | None) -> bool:
        if data is None:
            return False
        if not all(item.matches(data) for item in self.filters):
            return False
        # Ordering on a field implies the field exists.
        return all(order.field in data and data[order.field] is not None for order in self.orders)

    def apply(self, documents: Iterable[DocumentSnapshot]) -> list[DocumentSnapshot]:
        """Filter, order and limit ``documents`` according to this query."""

        matched = sorted((doc for doc in documents if self.matches(doc.data)), key=lambda doc: doc.id)
        for order in reversed(self.orders):
            try:
                matched.sort(key=lambda doc, name=order.field: doc.data[name], reverse=order.descending)
            except TypeError as exc:
                raise InvalidQueryError(f"Field '{order.field}' holds values that cannot be ordered together") from exc
        if self.limit is not None:
            matched = matched[: self.limit]
        return matched


__all__ = ["Operator", "FieldFilter", "OrderBy", "Query"]
