"""Document store boundary: CRUD, queries, atomic batches and live subscriptions."""
from .document_store import DocumentStore, WriteBatch, new_document_id
from .errors import DocumentNotFoundError, InvalidQueryError, StoreError
from .query import FieldFilter, OrderBy, Query
from .snapshot import ChangeType, DocumentChange, DocumentSnapshot, QuerySnapshot
from .subscriptions import ConnectionState, Subscription, SubscriptionHub
from .transforms import ArrayRemove, ArrayUnion, Increment, array_remove, array_union, increment

__all__ = [
    "DocumentStore",
    "WriteBatch",
    "new_document_id",
    "StoreError",
    "DocumentNotFoundError",
    "InvalidQueryError",
    "FieldFilter",
    "OrderBy",
    "Query",
    "ChangeType",
    "DocumentChange",
    "DocumentSnapshot",
    "QuerySnapshot",
    "ConnectionState",
    "Subscription",
    "SubscriptionHub",
    "Increment",
    "ArrayUnion",
    "ArrayRemove",
    "increment",
    "array_union",
    "array_remove",
]
