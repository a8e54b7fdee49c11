"""In-process change-notification stream, one channel per table."""
from __future__ import annotations

import threading
from collections import defaultdict

import structlog

from virtualmark.store.base import ChangeEvent, ChangeHandler

logger = structlog.get_logger(__name__)


class FeedSubscription:
    def __init__(self, feed: "ChangeFeed", table: str, handler: ChangeHandler) -> None:
        self._feed = feed
        self.table = table
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._feed._remove(self)
            self.active = False


class ChangeFeed:
    """Fan-out of change events to table subscribers.

    Handlers run synchronously on the publishing thread, in subscription
    order. A failing handler is logged and does not stop delivery to the
    remaining subscribers.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[FeedSubscription]] = defaultdict(list)

    def subscribe(self, table: str, handler: ChangeHandler) -> FeedSubscription:
        sub = FeedSubscription(self, table, handler)
        with self._lock:
            self._subscribers[table].append(sub)
        logger.debug("feed_subscribed", table=table)
        return sub

    def _remove(self, sub: FeedSubscription) -> None:
        with self._lock:
            subs = self._subscribers.get(sub.table, [])
            if sub in subs:
                subs.remove(sub)
        logger.debug("feed_unsubscribed", table=sub.table)

    def subscriber_count(self, table: str) -> int:
        with self._lock:
            return len(self._subscribers.get(table, []))

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = list(self._subscribers.get(event.table, []))
        for sub in targets:
            try:
                sub.handler(event)
            except Exception:
                logger.exception("change_handler_failed", table=event.table, event_type=event.type, record_id=event.record_id)
