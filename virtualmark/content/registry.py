from __future__ import annotations

from typing import Optional

from flask import Flask, current_app

from virtualmark.content.kinds import CASE_KIND, POST_KIND
from virtualmark.content.repository import ContentRepository
from virtualmark.content.stats import DashboardAggregator
from virtualmark.store.base import ContentStore

EXTENSION_KEY = "content"


class ContentRegistry:
    """The application's content repositories, built once per app.

    Owns one repository and one dashboard aggregator per content kind and
    closes them together.
    """

    def __init__(self, store: ContentStore, max_age: Optional[float] = None) -> None:
        self.store = store
        self.posts = ContentRepository(POST_KIND, store, max_age=max_age)
        self.cases = ContentRepository(CASE_KIND, store, max_age=max_age)
        self.post_stats = DashboardAggregator(self.posts)
        self.case_stats = DashboardAggregator(self.cases)

    def repository(self, table: str) -> ContentRepository:
        if table == POST_KIND.table:
            return self.posts
        if table == CASE_KIND.table:
            return self.cases
        raise KeyError(table)

    def dashboard(self) -> dict[str, dict[str, int]]:
        return {
            "posts": self.post_stats.current().to_dict(),
            "cases": self.case_stats.current().to_dict(),
        }

    def close(self) -> None:
        self.post_stats.close()
        self.case_stats.close()
        self.posts.close()
        self.cases.close()


def init_content(app: Flask, store: ContentStore) -> ContentRegistry:
    max_age = app.config.get("CONTENT_MAX_AGE_SECONDS")
    registry = ContentRegistry(store, max_age=float(max_age) if max_age else None)
    app.extensions[EXTENSION_KEY] = registry
    return registry


def get_content() -> ContentRegistry:
    return current_app.extensions[EXTENSION_KEY]
