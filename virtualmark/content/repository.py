"""
Content repository: the in-memory view of one content kind.

One ``ContentRepository`` per kind (posts, cases), built explicitly and
handed to whatever needs it. The repository owns:

- the ordered collection (a tuple of immutable domain records, newest first
  as returned by the initial list query);
- the change-feed subscription for its table, opened on first use and
  closed by ``close()``;
- the listeners (e.g. the dashboard aggregator) told about every new
  collection;
- the open edit drafts, flagged when their record changes remotely.

Writes go: session check, prepare, validation gate, mapper, store call, then
the local collection is updated from the store's returned row. The local
collection is only changed after the store accepts a write, so a failed write
leaves nothing to roll back. Store errors are never retried.

Every mutation of the collection happens under one re-entrant lock, so local
writes and feed notifications are applied one at a time in arrival order
(last write wins). A reload buffers the notifications that arrive while its
list query runs and replays them onto the fresh snapshot.
"""
from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

import structlog

from virtualmark.content.drafts import EditDraft
from virtualmark.content.errors import (
    AuthorizationError,
    ContentValidationError,
    MissingIdentityError,
    PersistenceError,
    RecordNotFoundError,
    RecordShapeError,
)
from virtualmark.content.kinds import ContentKind
from virtualmark.content.sync import index_of, reconcile
from virtualmark.content.workflow import toggle_status
from virtualmark.store.base import ChangeEvent, ContentStore, StoreError, StoreSession, Subscription

logger = structlog.get_logger(__name__)

Listener = Callable[[tuple], None]


class ContentRepository:
    def __init__(self, kind: ContentKind, store: ContentStore, max_age: Optional[float] = None) -> None:
        self.kind = kind
        self.store = store
        # Reload from the store when the snapshot is older than this many
        # seconds. Changes made by other processes never reach our feed.
        self.max_age = max_age
        self._lock = threading.RLock()
        self._records: tuple = ()
        self._loaded_at: Optional[float] = None
        self._subscription: Optional[Subscription] = None
        self._listeners: list[Listener] = []
        self._drafts: dict[str, list[EditDraft]] = {}
        # One buffer per load() in flight
        self._replays: list[list[ChangeEvent]] = []
        self._closed = False
        self._log = logger.bind(kind=kind.name, table=kind.table)

    def __repr__(self) -> str:
        return f"<ContentRepository {self.kind.table} records={len(self._records)}>"

    def __enter__(self) -> "ContentRepository":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # Lifecycle

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def records(self) -> tuple:
        """The snapshot as it stands, without loading."""
        return self._records

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    def _ensure_started(self) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError(f"{self.kind.table} repository is closed")
            if self._subscription is None:
                self._subscription = self.store.subscribe(self.kind.table, self.apply_change)
                self._log.debug("repository_subscribed")

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            if self._subscription is not None:
                self._subscription.unsubscribe()
                self._subscription = None
            self._listeners.clear()
            self._drafts.clear()
            self._closed = True
        self._log.debug("repository_closed")

    # Reads

    def load(self) -> tuple:
        """(Re)load the collection from the store, replacing the local snapshot.

        Change events that arrive while the list query is in flight are
        replayed onto the fresh snapshot, so a write committed during the
        reload is never lost.
        """
        self._ensure_started()
        replay: list[ChangeEvent] = []
        with self._lock:
            self._replays.append(replay)
        try:
            try:
                rows = self.store.select(self.kind.table, order=self.kind.order)
            except StoreError as e:
                self._log.error("repository_load_failed", code=e.code, error=e.message)
                raise PersistenceError.from_store_error(e, "loading", self.kind.name) from e
            records = []
            for row in rows:
                try:
                    records.append(self.kind.to_domain(row))
                except RecordShapeError as e:
                    self._log.warning("malformed_row_skipped", record_id=e.record_id, error=str(e))
            with self._lock:
                snapshot = tuple(records)
                for event in replay:
                    # Malformed events were already logged by apply_change
                    try:
                        snapshot = reconcile(snapshot, event, self.kind.to_domain)
                    except RecordShapeError:
                        continue
                if replay:
                    self._log.debug("load_replayed_changes", count=len(replay))
                self._loaded_at = time.monotonic()
                self._set(snapshot)
                loaded = self._records
        finally:
            with self._lock:
                self._replays.remove(replay)
        self._log.info("repository_loaded", count=len(loaded))
        return loaded

    refresh = load

    def _is_fresh(self) -> bool:
        if self._loaded_at is None:
            return False
        if self.max_age is None:
            return True
        return time.monotonic() - self._loaded_at <= self.max_age

    def list(self) -> tuple:
        """Current snapshot, loading it on first use."""
        if not self._is_fresh():
            return self.load()
        return self._records

    def get(self, record_id: str) -> Optional[Any]:
        records = self.list()
        index = index_of(records, record_id)
        return None if index is None else records[index]

    # Listeners

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def _set(self, records: tuple) -> None:
        # Caller holds the lock
        if records is self._records:
            return
        self._records = records
        for listener in list(self._listeners):
            try:
                listener(records)
            except Exception:
                self._log.exception("listener_failed")

    # Writes

    def _require_session(self) -> StoreSession:
        session = self.store.get_session()
        if session is None:
            self._log.warning("write_without_session")
            raise AuthorizationError()
        return session

    def _checked(self, record: Any) -> Any:
        prepared = self.kind.prepare(record)
        result = self.kind.validate(prepared)
        if not result.is_valid:
            raise ContentValidationError(result.errors)
        return prepared

    def _persistence_error(self, e: StoreError, action: str, record_id: str = "") -> PersistenceError:
        self._log.error("store_write_rejected", action=action, record_id=record_id, code=e.code, error=e.message)
        return PersistenceError.from_store_error(e, action, self.kind.name)

    def _apply_local(self, event: ChangeEvent) -> Any:
        record = self.kind.to_domain(event.record)
        with self._lock:
            if not self._closed:
                self._set(reconcile(self._records, event, self.kind.to_domain))
        return record

    def create(self, record: Any) -> Any:
        """Insert a new record; returns it as stored, with its generated id."""
        self.list()
        self._require_session()
        prepared = self._checked(record.model_copy(update={"id": ""}))
        wire = self.kind.to_wire(prepared)
        try:
            if self.kind.write_mode == "upsert":
                stored = self.store.upsert(self.kind.table, [wire])[0]
            else:
                stored = self.store.insert(self.kind.table, wire)
        except StoreError as e:
            raise self._persistence_error(e, "saving") from e
        created = self._apply_local(ChangeEvent("insert", self.kind.table, stored))
        self._log.info("record_created", record_id=created.id)
        return created

    def update(self, record: Any) -> Any:
        """Replace a stored record (keyed by id); its list position is kept."""
        if not record.id:
            raise MissingIdentityError("update")
        self.list()
        self._require_session()
        prepared = self._checked(record)
        wire = self.kind.to_wire(prepared)
        try:
            if self.kind.write_mode == "upsert":
                stored = self.store.upsert(self.kind.table, [wire])[0]
            else:
                wire.pop("id", None)
                stored = self.store.update(self.kind.table, record.id, wire)
        except StoreError as e:
            raise self._persistence_error(e, "saving", record.id) from e
        updated = self._apply_local(ChangeEvent("update", self.kind.table, stored))
        self._log.info("record_updated", record_id=updated.id)
        return updated

    def save(self, record: Any) -> Any:
        return self.update(record) if record.id else self.create(record)

    def delete(self, record_id: str) -> None:
        """Delete by id. Confirmation is the caller's job."""
        if not record_id:
            raise MissingIdentityError("delete")
        self.list()
        self._require_session()
        try:
            self.store.delete(self.kind.table, record_id)
        except StoreError as e:
            raise self._persistence_error(e, "deleting", record_id) from e
        with self._lock:
            if not self._closed:
                self._set(reconcile(self._records, ChangeEvent("delete", self.kind.table, {"id": record_id}), self.kind.to_domain))
        self._log.info("record_deleted", record_id=record_id)

    def toggle_status(self, record_id: str) -> Any:
        """Flip draft <-> published, sending only the status column."""
        if not record_id:
            raise MissingIdentityError("update")
        current = self.get(record_id)
        if current is None:
            raise RecordNotFoundError(self.kind.name, record_id)
        self._require_session()
        flipped = toggle_status(current)
        try:
            stored = self.store.update(self.kind.table, record_id, {"status": flipped.status})
        except StoreError as e:
            raise self._persistence_error(e, "saving", record_id) from e
        updated = self._apply_local(ChangeEvent("update", self.kind.table, stored))
        self._log.info("status_toggled", record_id=record_id, status=updated.status)
        return updated

    # Drafts

    def new_draft(self, **fields: Any) -> EditDraft:
        return EditDraft(self.kind.record_type(**fields))

    def edit(self, record_id: str) -> EditDraft:
        record = self.get(record_id)
        if record is None:
            raise RecordNotFoundError(self.kind.name, record_id)
        draft = EditDraft(record, on_close=self._release_draft)
        with self._lock:
            self._drafts.setdefault(record_id, []).append(draft)
        return draft

    def _release_draft(self, draft: EditDraft) -> None:
        with self._lock:
            drafts = self._drafts.get(draft.base.id, [])
            if draft in drafts:
                drafts.remove(draft)
            if not drafts:
                self._drafts.pop(draft.base.id, None)

    def save_draft(self, draft: EditDraft) -> Any:
        """Persist a draft. On failure the draft is left exactly as it was."""
        stored = self.save(draft.record)
        draft.saved(stored)
        draft.close()
        return stored

    def _flag_drafts(self, event: ChangeEvent) -> None:
        # Caller holds the lock
        drafts = self._drafts.get(event.record_id)
        if not drafts:
            return
        if event.type == "delete":
            for draft in drafts:
                draft.mark_orphaned()
            self._log.warning("edited_record_deleted_remotely", record_id=event.record_id, drafts=len(drafts))
            return
        remote = self.kind.to_domain(event.record)
        for draft in drafts:
            if remote != draft.base:
                draft.mark_stale(remote)
                self._log.warning("edited_record_changed_remotely", record_id=event.record_id)

    # Change feed

    def apply_change(self, event: ChangeEvent) -> None:
        """Feed handler: merge one change notification into the collection."""
        if event.table != self.kind.table:
            return
        with self._lock:
            if self._closed:
                return
            for replay in self._replays:
                replay.append(event)
            try:
                records = reconcile(self._records, event, self.kind.to_domain)
                self._flag_drafts(event)
            except RecordShapeError as e:
                self._log.warning("malformed_change_ignored", event_type=event.type, record_id=e.record_id)
                return
            self._set(records)
