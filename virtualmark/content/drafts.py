"""
Edit drafts: the unsaved state of an admin form.

A draft wraps an immutable domain record and swaps in a new copy on every
edit. Drafts opened through ``ContentRepository.edit`` are watched by the
repository: when the record changes remotely while the draft is open, the
draft is flagged ``stale`` and the remote copy is kept on ``remote``. The
user's field values are never touched; whether to reload or save over the
remote change is the caller's decision.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

from virtualmark.schemas.content import CaseStudy, Metric


class EditDraft:
    def __init__(self, record: Any, on_close: Optional[Callable[["EditDraft"], None]] = None) -> None:
        self.base = record
        self._record = record
        self._on_close = on_close
        self.stale = False
        self.orphaned = False
        self.remote: Any = None

    def __repr__(self) -> str:
        return f"<EditDraft {type(self._record).__name__} id={self._record.id!r} stale={self.stale}>"

    @property
    def record(self) -> Any:
        return self._record

    @property
    def record_id(self) -> str:
        return self._record.id

    @property
    def is_new(self) -> bool:
        return not self._record.id

    @property
    def is_dirty(self) -> bool:
        return self._record != self.base

    def set(self, **changes: Any) -> Any:
        """Update fields; values go through the record's schema."""
        data = self._record.model_dump()
        data.update(changes)
        self._record = type(self._record).model_validate(data)
        return self._record

    # Case study sub-collections. Order is significant and follows edits.

    def _case(self) -> CaseStudy:
        if not isinstance(self._record, CaseStudy):
            raise TypeError(f"{type(self._record).__name__} has no metrics, tools or gallery")
        return self._record

    def _replace(self, **changes: Any) -> None:
        self._record = self._record.model_copy(update=changes)

    def add_metric(self, value: str = "", label: str = "") -> None:
        case = self._case()
        self._replace(metrics=case.metrics + (Metric(value=value, label=label),))

    def update_metric(self, index: int, value: Optional[str] = None, label: Optional[str] = None) -> None:
        case = self._case()
        metric = case.metrics[index]
        updated = Metric(
            value=metric.value if value is None else value,
            label=metric.label if label is None else label,
        )
        metrics = list(case.metrics)
        metrics[index] = updated
        self._replace(metrics=tuple(metrics))

    def remove_metric(self, index: int) -> None:
        case = self._case()
        metrics = list(case.metrics)
        del metrics[index]
        self._replace(metrics=tuple(metrics))

    def add_tool(self, name: str) -> None:
        case = self._case()
        name = name.strip()
        if name:
            self._replace(tools=case.tools + (name,))

    def remove_tool(self, index: int) -> None:
        tools = list(self._case().tools)
        del tools[index]
        self._replace(tools=tuple(tools))

    def add_gallery_image(self, url: str) -> None:
        case = self._case()
        url = url.strip()
        if url:
            self._replace(gallery=case.gallery + (url,))

    def remove_gallery_image(self, index: int) -> None:
        gallery = list(self._case().gallery)
        del gallery[index]
        self._replace(gallery=tuple(gallery))

    # Remote change tracking

    def mark_stale(self, remote: Any) -> None:
        self.stale = True
        self.remote = remote

    def mark_orphaned(self) -> None:
        self.orphaned = True
        self.remote = None

    def saved(self, record: Any) -> None:
        """Rebase on the stored record after a successful save."""
        self.base = record
        self._record = record
        self.stale = False
        self.remote = None

    def close(self) -> None:
        if self._on_close is not None:
            self._on_close(self)
            self._on_close = None
