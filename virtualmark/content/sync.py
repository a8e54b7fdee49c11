"""
Reconciliation of change notifications into a local collection.

``reconcile`` is pure: it takes the current collection (a tuple of domain
records) and one change event and returns the next collection. When the
event has no effect the *same* tuple object is returned, which lets callers
skip change notifications with an identity check.
"""
from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from virtualmark.store.base import ChangeEvent

Collection = tuple


def index_of(collection: Sequence[Any], record_id: str) -> Optional[int]:
    for i, record in enumerate(collection):
        if record.id == record_id:
            return i
    return None


def replace_at(collection: Collection, index: int, record: Any) -> Collection:
    if collection[index] == record:
        return collection
    return collection[:index] + (record,) + collection[index + 1:]


def reconcile(collection: Collection, event: ChangeEvent, to_domain: Callable[[dict], Any]) -> Collection:
    """Apply one change event.

    - insert: prepend, unless a record with that id is already present, in
      which case it is replaced where it stands (duplicate notifications and
      the echo of our own writes never duplicate an entry)
    - update: replace in place; an update for an unknown id is ignored
    - delete: remove; deleting an unknown id is a no-op
    """
    if event.type == "delete":
        index = index_of(collection, event.record_id)
        if index is None:
            return collection
        return collection[:index] + collection[index + 1:]

    if event.type not in ("insert", "update"):
        return collection

    record = to_domain(event.record)
    if not record.id:
        return collection
    index = index_of(collection, record.id)

    if event.type == "insert":
        if index is None:
            return (record,) + collection
        return replace_at(collection, index, record)

    if index is None:
        return collection
    return replace_at(collection, index, record)
