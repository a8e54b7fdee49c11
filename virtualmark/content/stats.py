from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    total: int = 0
    published: int = 0
    draft: int = 0
    featured: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def compute_stats(records: Iterable) -> DashboardStats:
    """Count records by status and the featured flag. Empty input gives all zeros."""
    total = published = draft = featured = 0
    for record in records:
        total += 1
        if record.status == "published":
            published += 1
        elif record.status == "draft":
            draft += 1
        if record.featured:
            featured += 1
    return DashboardStats(total=total, published=published, draft=draft, featured=featured)


class DashboardAggregator:
    """Keeps ``stats`` current for one repository.

    Registers as a repository listener, so the counts are recomputed
    synchronously on every collection change, local or remote.
    """

    def __init__(self, repository) -> None:
        self.repository = repository
        self.stats = compute_stats(repository.records)
        self._remove = repository.add_listener(self._recompute)

    def _recompute(self, records: tuple) -> None:
        self.stats = compute_stats(records)
        logger.debug("dashboard_stats_updated", table=self.repository.kind.table, **self.stats.to_dict())

    def current(self) -> DashboardStats:
        """Stats for the repository's collection, loading it on first use."""
        self.repository.list()
        return self.stats

    def close(self) -> None:
        self._remove()
