"""Tests for the content repository."""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from virtualmark.content.errors import (
    AUTH_REQUIRED_MESSAGE,
    PERMISSION_DENIED_MESSAGE,
    AuthorizationError,
    ContentValidationError,
    MissingIdentityError,
    PersistenceError,
    RecordNotFoundError,
)
from virtualmark.content.kinds import CASE_KIND, POST_KIND
from virtualmark.content.mapper import post_to_wire
from virtualmark.content.repository import ContentRepository
from virtualmark.content.workflow import toggle_status
from virtualmark.extensions import db
from virtualmark.models import CaseRow, PostRow
from virtualmark.schemas.content import BlogPost, Metric
from virtualmark.store import ChangeEvent, SQLContentStore, StoreError, StoreSession


def post_count():
    return db.session.execute(db.select(db.func.count(PostRow.id))).scalar()


class TestLifecycle:
    """Test cases for loading, subscribing and closing."""

    def test_subscribes_on_first_use(self, store):
        """Test the feed subscription opens lazily and closes with the repository."""
        repo = ContentRepository(POST_KIND, store)
        assert not repo.subscribed
        assert store.feed.subscriber_count('posts') == 0
        repo.list()
        assert repo.subscribed
        assert store.feed.subscriber_count('posts') == 1
        repo.close()
        assert repo.closed
        assert store.feed.subscriber_count('posts') == 0

    def test_context_manager(self, store):
        """Test leaving the block closes the repository."""
        with ContentRepository(POST_KIND, store) as repo:
            repo.list()
        assert repo.closed
        assert store.feed.subscriber_count('posts') == 0

    def test_closed_repository_refuses_work(self, posts):
        """Test a closed repository cannot be reused."""
        posts.close()
        with pytest.raises(RuntimeError):
            posts.list()

    def test_load_orders_newest_first(self, posts, seeded_rows):
        """Test the initial list is ordered by date, descending."""
        assert [p.id for p in posts.list()] == ['p-3', 'p-2', 'p-1', 'p-4']

    def test_legacy_rows_read_as_draft(self, posts, seeded_rows):
        """Test rows without status are drafts."""
        assert posts.get('p-4').status == 'draft'

    def test_get(self, posts, seeded_rows):
        """Test lookup by id."""
        assert posts.get('p-1').title == 'Published marketing'
        assert posts.get('missing') is None

    def test_load_skips_malformed_rows(self):
        """Test a row of the wrong shape is dropped, not loaded."""
        store = MagicMock()
        store.select.return_value = [
            {'id': 'ok', 'title': 'Fine', 'date': '2024-01-01'},
            {'id': 'bad', 'title': 'Broken', 'date': 'yesterday'},
        ]
        repo = ContentRepository(POST_KIND, store)
        assert [p.id for p in repo.list()] == ['ok']
        store.subscribe.assert_called_once_with('posts', repo.apply_change)

    def test_load_failure(self):
        """Test a failing list query surfaces as a persistence error."""
        store = MagicMock()
        store.select.side_effect = StoreError('500', 'database error')
        repo = ContentRepository(POST_KIND, store)
        with pytest.raises(PersistenceError) as exc_info:
            repo.list()
        assert str(exc_info.value) == 'An error occurred while loading the post. Please try again.'

    def test_max_age_reloads(self, store, seeded_rows):
        """Test a stale snapshot is reloaded on the next read."""
        repo = ContentRepository(POST_KIND, store, max_age=60)
        assert len(repo.list()) == 4
        db.session.add(PostRow(id='p-5', title='Written elsewhere', date=date(2025, 1, 1)))
        db.session.commit()
        assert len(repo.list()) == 4
        repo._loaded_at -= 120
        assert repo.list()[0].id == 'p-5'
        repo.close()


class TestCreate:
    """Test cases for create."""

    def test_create_assigns_id_and_prepends(self, posts, post_factory):
        """Test the store-assigned record lands at the front of the list."""
        first = posts.create(post_factory(title='First'))
        second = posts.create(post_factory(title='Second'))
        assert first.id and second.id and first.id != second.id
        assert [p.id for p in posts.list()] == [second.id, first.id]
        assert first.created_at is not None

    def test_create_without_status_is_draft(self, posts, post_factory):
        """Test an omitted status is stored and read back as draft."""
        data = post_factory().model_dump(exclude={'status'})
        created = posts.create(BlogPost.model_validate(data))
        assert created.status == 'draft'
        assert db.session.get(PostRow, created.id).status == 'draft'
        assert posts.get(created.id).status == 'draft'

    def test_create_ignores_incoming_id(self, posts, post_factory):
        """Test the store, not the caller, picks the id."""
        created = posts.create(post_factory(id='chosen-by-client'))
        assert created.id != 'chosen-by-client'

    def test_create_normalizes_image_url(self, posts, post_factory):
        """Test a bare filename is stored under /blog/."""
        created = posts.create(post_factory(image_url='hero.jpg'))
        assert created.image_url == '/blog/hero.jpg'

    def test_create_without_session(self, anonymous_store, post_factory, seeded_rows):
        """Test create with no session fails and leaves the collection alone."""
        with ContentRepository(POST_KIND, anonymous_store) as repo:
            before = repo.list()
            with pytest.raises(AuthorizationError) as exc_info:
                repo.create(post_factory())
            assert str(exc_info.value) == AUTH_REQUIRED_MESSAGE
            assert repo.list() is before
        assert post_count() == 4

    def test_create_invalid_never_reaches_store(self, posts, store, post_factory):
        """Test a failing validation blocks the store call entirely."""
        with patch.object(store, 'insert', wraps=store.insert) as insert:
            with pytest.raises(ContentValidationError) as exc_info:
                posts.create(post_factory(title='  ', author=''))
        insert.assert_not_called()
        assert exc_info.value.errors == ['Title is required', 'Author is required']
        assert str(exc_info.value).startswith('Please fix the following errors:\n')
        assert posts.list() == ()

    def test_store_failure_is_not_retried(self, posts, store, post_factory):
        """Test a store error propagates once, with the collection unchanged."""
        posts.list()
        with patch.object(store, 'insert', side_effect=StoreError('500', 'connection reset')) as insert:
            with pytest.raises(PersistenceError) as exc_info:
                posts.create(post_factory())
        assert insert.call_count == 1
        assert str(exc_info.value) == 'An error occurred while saving the post. Please try again.'
        assert exc_info.value.detail == 'connection reset'
        assert exc_info.value.code == '500'
        assert posts.list() == ()

    def test_permission_denied(self, app, post_factory):
        """Test a non-admin session gets the permission message."""
        store = SQLContentStore(session_provider=lambda: StoreSession('u-2', 'visitor', is_admin=False))
        with ContentRepository(POST_KIND, store) as repo:
            with pytest.raises(PersistenceError) as exc_info:
                repo.create(post_factory())
        assert exc_info.value.is_permission_denied
        assert str(exc_info.value) == PERMISSION_DENIED_MESSAGE


class TestUpdate:
    """Test cases for update and save."""

    def test_update_preserves_position(self, posts, post_factory):
        """Test [A, B, C] + update(B') keeps B' where B was."""
        for title in ('A', 'B', 'C'):
            posts.create(post_factory(title=title))
        before = posts.list()
        b = next(p for p in before if p.title == 'B')
        index = before.index(b)

        posts.update(b.model_copy(update={'title': "B'"}))

        after = posts.list()
        assert [p.id for p in after] == [p.id for p in before]
        assert after[index].title == "B'"
        for i, record in enumerate(after):
            if i != index:
                assert record is before[i]

    def test_update_requires_id(self, posts, post_factory):
        """Test the identity check runs before anything else."""
        with pytest.raises(MissingIdentityError) as exc_info:
            posts.update(post_factory())
        assert exc_info.value.errors == ['Cannot update a record without an id']
        assert isinstance(exc_info.value, ContentValidationError)

    def test_update_missing_row(self, posts, post_factory):
        """Test updating a record the store no longer has."""
        with pytest.raises(PersistenceError) as exc_info:
            posts.update(post_factory(id='gone'))
        assert exc_info.value.code == 'PGRST116'

    def test_update_is_full_replace(self, posts, post_factory):
        """Test every field of the record is written."""
        created = posts.create(post_factory(featured=True))
        posts.update(created.model_copy(update={'featured': False, 'excerpt': 'New excerpt'}))
        row = db.session.get(PostRow, created.id)
        assert row.featured is False
        assert row.excerpt == 'New excerpt'

    def test_save_dispatches(self, posts, post_factory):
        """Test save creates new records and updates persisted ones."""
        created = posts.save(post_factory())
        assert created.id
        updated = posts.save(created.model_copy(update={'title': 'Renamed'}))
        assert updated.id == created.id
        assert len(posts.list()) == 1
        assert posts.get(created.id).title == 'Renamed'


class TestDeleteAndToggle:
    """Test cases for delete and toggle_status."""

    def test_delete(self, posts, seeded_rows):
        """Test delete removes the entry locally and in the store."""
        posts.delete('p-2')
        assert [p.id for p in posts.list()] == ['p-3', 'p-1', 'p-4']
        assert post_count() == 3

    def test_delete_requires_id(self, posts):
        """Test deleting with no id."""
        with pytest.raises(MissingIdentityError):
            posts.delete('')

    def test_delete_unknown_id(self, posts, seeded_rows):
        """Test deleting an id nobody has is harmless."""
        before = posts.list()
        posts.delete('nope')
        assert posts.list() is before

    def test_toggle_case_publishes(self, cases, store, case_factory):
        """Test toggling a draft sends only the status and updates the entry."""
        case = cases.create(case_factory(status='draft'))
        with patch.object(store, 'update', wraps=store.update) as update:
            toggled = cases.toggle_status(case.id)
        update.assert_called_once_with('cases', case.id, {'status': 'published'})
        assert toggled.status == 'published'
        assert cases.get(case.id).status == 'published'
        assert db.session.get(CaseRow, case.id).status == 'published'

    def test_toggle_back(self, posts, seeded_rows):
        """Test published goes back to draft."""
        assert posts.toggle_status('p-1').status == 'draft'

    def test_toggle_uses_workflow_flip(self, posts, seeded_rows):
        """Test the flip comes from the workflow transform of the loaded record."""
        current = posts.get('p-2')
        with patch('virtualmark.content.repository.toggle_status', wraps=toggle_status) as flip:
            toggled = posts.toggle_status('p-2')
        flip.assert_called_once_with(current)
        assert toggled.status == 'published'
        assert current.status == 'draft'

    def test_toggle_unknown(self, posts):
        """Test toggling an id that is not loaded."""
        with pytest.raises(RecordNotFoundError):
            posts.toggle_status('nope')


class TestCases:
    """Test cases specific to case studies."""

    def test_create_case(self, cases, case_factory):
        """Test lists, metrics and slug survive the write."""
        created = cases.create(case_factory(slug='Acme Rebrand!!'))
        assert created.slug == 'acme-rebrand'
        assert created.tools == ('Figma', 'HubSpot')
        assert created.metrics == (Metric(value='+10%', label='ROI'),)

    def test_slug_from_title(self, cases, case_factory):
        """Test a blank slug is derived from the title."""
        created = cases.create(case_factory(title='Fresh Start 2024', slug=''))
        assert created.slug == 'fresh-start-2024'

    def test_duplicate_slug(self, cases, case_factory):
        """Test the store's unique constraint surfaces as a persistence error."""
        cases.create(case_factory())
        with pytest.raises(PersistenceError) as exc_info:
            cases.create(case_factory(title='Other'))
        assert exc_info.value.code == '23505'
        assert str(exc_info.value) == 'An error occurred while saving the case. Please try again.'
        assert len(cases.list()) == 1

    def test_update_case_via_upsert(self, cases, store, case_factory):
        """Test case updates go through upsert and keep the id."""
        created = cases.create(case_factory())
        with patch.object(store, 'upsert', wraps=store.upsert) as upsert:
            updated = cases.update(created.model_copy(update={'tools': ('Ads',)}))
        assert upsert.call_count == 1
        assert updated.id == created.id
        assert updated.tools == ('Ads',)


class TestRemoteChanges:
    """Test cases for change notifications from other writers."""

    @pytest.fixture
    def other(self, store):
        with ContentRepository(POST_KIND, store) as repo:
            yield repo

    def test_remote_insert_update_delete(self, posts, other, post_factory):
        """Test another writer's changes show up without a reload."""
        assert posts.list() == ()
        created = other.create(post_factory(title='From elsewhere'))
        assert [p.id for p in posts.list()] == [created.id]

        other.update(created.model_copy(update={'title': 'Edited elsewhere'}))
        assert posts.get(created.id).title == 'Edited elsewhere'

        other.delete(created.id)
        assert posts.list() == ()

    def test_listeners(self, posts, other, post_factory):
        """Test listeners see each new collection and can be removed."""
        posts.list()
        seen = []
        remove = posts.add_listener(seen.append)
        other.create(post_factory())
        assert len(seen) == 1 and len(seen[0]) == 1
        remove()
        other.create(post_factory(title='Another'))
        assert len(seen) == 1

    def test_duplicate_insert_notification(self, posts, post_factory):
        """Test a repeated insert for a present id does not duplicate it."""
        created = posts.create(post_factory())
        posts.apply_change(ChangeEvent('insert', 'posts', post_to_wire(created)))
        assert len(posts.list()) == 1

    def test_delete_notification_for_unknown_id(self, posts, seeded_rows):
        """Test a delete for an id not held locally is a no-op."""
        before = posts.list()
        seen = []
        posts.add_listener(seen.append)
        posts.apply_change(ChangeEvent('delete', 'posts', {'id': 'not-here'}))
        assert posts.list() is before
        assert seen == []

    def test_update_notification_for_unknown_id(self, posts, seeded_rows):
        """Test an update never inserts."""
        before = posts.list()
        posts.apply_change(ChangeEvent('update', 'posts', {'id': 'not-here', 'title': 'x'}))
        assert posts.list() is before

    def test_malformed_notification_ignored(self, posts, seeded_rows):
        """Test a notification that does not map is dropped."""
        before = posts.list()
        posts.apply_change(ChangeEvent('insert', 'posts', {'id': 'x', 'date': 'whenever'}))
        assert posts.list() is before

    def test_other_table_ignored(self, posts, seeded_rows):
        """Test events for another table are not applied."""
        before = posts.list()
        posts.apply_change(ChangeEvent('insert', 'cases', {'id': 'c-9', 'title': 'Case'}))
        assert posts.list() is before

    def test_closed_repository_stops_listening(self, posts, other, post_factory):
        """Test a closed repository no longer changes."""
        posts.list()
        posts.close()
        other.create(post_factory())
        assert posts.records == ()


class WriteDuringSelect:
    """Store wrapper that runs ``write`` once, after its first select returns."""

    def __init__(self, inner, write):
        self._inner = inner
        self._write = write
        self.fired = False

    def select(self, *args, **kwargs):
        rows = self._inner.select(*args, **kwargs)
        if not self.fired:
            self.fired = True
            self._write()
        return rows

    def __getattr__(self, name):
        return getattr(self._inner, name)


class TestReloadRace:
    """Test cases for changes committed while a load is in flight."""

    def test_insert_during_load_is_kept(self, store, post_factory):
        """Test a record created by another writer mid-load is in the snapshot."""
        created = []

        def write():
            with ContentRepository(POST_KIND, store) as other:
                created.append(other.create(post_factory(title='Written mid-load')))

        with ContentRepository(POST_KIND, WriteDuringSelect(store, write)) as repo:
            repo.load()
            assert repo.get(created[0].id) is not None
            assert [p.title for p in repo.list()] == ['Written mid-load']

    def test_delete_during_load_is_applied(self, store, seeded_rows):
        """Test a record deleted by another writer mid-load stays gone."""

        def write():
            with ContentRepository(POST_KIND, store) as other:
                other.delete('p-1')

        with ContentRepository(POST_KIND, WriteDuringSelect(store, write)) as repo:
            repo.load()
            assert repo.get('p-1') is None
            assert len(repo.list()) == 3

    def test_reload_after_race_matches_store(self, store, post_factory):
        """Test the next reload agrees with the replayed snapshot."""
        created = []

        def write():
            with ContentRepository(POST_KIND, store) as other:
                created.append(other.create(post_factory()))

        with ContentRepository(POST_KIND, WriteDuringSelect(store, write)) as repo:
            first = repo.load()
            assert repo.refresh() == first
            assert [p.id for p in first] == [created[0].id]
