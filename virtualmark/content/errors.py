from __future__ import annotations

from typing import Iterable, Optional

from virtualmark.store.base import StoreError

AUTH_REQUIRED_MESSAGE = "Authentication required. Please log in again."
PERMISSION_DENIED_MESSAGE = "You do not have permission to perform this action. Please check your access rights."


class ContentError(Exception):
    """Base class for errors raised by the content layer."""


class ContentValidationError(ContentError):
    """One or more fields failed the validation gate; nothing was sent to the store."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("Please fix the following errors:\n" + "\n".join(self.errors))


class MissingIdentityError(ContentValidationError):
    """An update or delete was attempted on a record that was never persisted."""

    def __init__(self, action: str = "update") -> None:
        super().__init__([f"Cannot {action} a record without an id"])


class AuthorizationError(ContentError):
    def __init__(self, message: str = AUTH_REQUIRED_MESSAGE) -> None:
        super().__init__(message)


class PersistenceError(ContentError):
    """The store rejected a call. ``code`` is the store's error code."""

    def __init__(self, message: str, code: Optional[str] = None, detail: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.detail = detail

    @property
    def is_permission_denied(self) -> bool:
        return self.code == "403"

    @classmethod
    def from_store_error(cls, err: StoreError, action: str, kind: str) -> "PersistenceError":
        if err.code == "403":
            message = PERMISSION_DENIED_MESSAGE
        else:
            message = f"An error occurred while {action} the {kind}. Please try again."
        return cls(message, code=err.code, detail=err.message)


class RecordNotFoundError(ContentError):
    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind.capitalize()} {record_id!r} not found")
        self.kind = kind
        self.record_id = record_id


class RecordShapeError(ContentError):
    """A store row could not be mapped to a domain record."""

    def __init__(self, table: str, record_id, cause: Exception) -> None:
        super().__init__(f"Malformed {table} row {record_id!r}: {cause}")
        self.table = table
        self.record_id = record_id
