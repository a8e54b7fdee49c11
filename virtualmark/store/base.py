"""
Remote content store contract.

The content repositories only ever talk to a store through this interface:
table-based reads and writes over plain column-shaped dicts (wire records),
a per-table change-notification stream, and a session check used as the
authorization gate before mutating calls.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional, Protocol, Sequence

WireRecord = dict[str, Any]
ChangeType = Literal["insert", "update", "delete"]


@dataclass(frozen=True)
class StoreSession:
    """An authenticated session as seen by the store."""

    user_id: str
    username: str
    is_admin: bool = False


@dataclass(frozen=True)
class ChangeEvent:
    """A single change notification for one table.

    ``record`` holds the new row for inserts and updates. For deletes it holds
    whatever the store still knows about the old row, at minimum its ``id``.
    """

    type: ChangeType
    table: str
    record: WireRecord = field(default_factory=dict)

    @property
    def record_id(self) -> str:
        return str(self.record.get("id") or "")


ChangeHandler = Callable[[ChangeEvent], None]


class Subscription(Protocol):
    def unsubscribe(self) -> None:
        ...


class StoreError(Exception):
    """Raised by a store when it rejects a call.

    ``code`` follows the hosted store's convention: HTTP-like status codes
    ("403" for permission denied, "404" for a missing row) or database error
    codes ("23505" for a unique violation).
    """

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = str(code)
        self.message = message


class ContentStore(Protocol):
    """Store operations consumed by the content repositories."""

    def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order: Optional[tuple[str, bool]] = None,
    ) -> list[WireRecord]:
        """Read rows. ``order`` is ``(column, descending)``."""
        ...

    def insert(self, table: str, record: WireRecord) -> WireRecord:
        """Insert one row and return it with its generated id and timestamp."""
        ...

    def update(self, table: str, record_id: str, changes: WireRecord) -> WireRecord:
        """Apply a partial update keyed by id and return the stored row."""
        ...

    def upsert(self, table: str, records: Sequence[WireRecord]) -> list[WireRecord]:
        """Insert-or-replace by id; returns the stored rows in input order."""
        ...

    def delete(self, table: str, record_id: str) -> None:
        ...

    def get_session(self) -> Optional[StoreSession]:
        ...

    def subscribe(self, table: str, handler: ChangeHandler) -> Subscription:
        ...
