from __future__ import annotations

from .base import (  # noqa: F401
    ChangeEvent,
    ContentStore,
    StoreError,
    StoreSession,
    Subscription,
    WireRecord,
)
from .feed import ChangeFeed  # noqa: F401
from .sql import SQLContentStore, flask_login_session  # noqa: F401

__all__ = [
    "ChangeEvent",
    "ChangeFeed",
    "ContentStore",
    "SQLContentStore",
    "StoreError",
    "StoreSession",
    "Subscription",
    "WireRecord",
    "flask_login_session",
]
