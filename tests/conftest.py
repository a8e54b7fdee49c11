"""Test configuration and fixtures for the content service."""

from datetime import date, datetime, timezone
from typing import Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient
from sqlalchemy.pool import StaticPool

from virtualmark import create_app
from virtualmark.content.kinds import CASE_KIND, POST_KIND
from virtualmark.content.repository import ContentRepository
from virtualmark.extensions import db
from virtualmark.models import CaseRow, PostRow, User
from virtualmark.schemas.content import BlogPost, CaseStudy, Metric
from virtualmark.store import ChangeFeed, SQLContentStore, StoreSession
from virtualmark.utils.crypto import hash_password

ADMIN_SESSION = StoreSession(user_id="admin-1", username="testadmin", is_admin=True)


@pytest.fixture
def app() -> Generator[Flask, None, None]:
    """Create and configure a test Flask application."""
    test_config = {
        'TESTING': True,
        'WTF_CSRF_ENABLED': False,  # Disable CSRF for testing
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SQLALCHEMY_ENGINE_OPTIONS': {
            'poolclass': StaticPool,
            'connect_args': {'check_same_thread': False}
        },
        'SECRET_KEY': 'test-secret-key',
        'SESSION_COOKIE_SECURE': False,
        'RATELIMIT_ENABLED': False,  # Disable rate limiting for tests
        'CONTENT_MAX_AGE_SECONDS': 0,
    }

    app = create_app(test_config)

    with app.app_context():
        db.create_all()
        yield app

        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create a test client."""
    return app.test_client()


@pytest.fixture
def runner(app: Flask):
    """Create a test CLI runner."""
    return app.test_cli_runner()


@pytest.fixture
def test_admin_user(app: Flask):
    """Create the site's admin user."""
    admin_user = User(
        username='testadmin',
        email='admin@example.com',
        password_hash=hash_password('adminpassword'),
        is_admin=True,
        created_at=datetime.now(timezone.utc)
    )
    db.session.add(admin_user)
    db.session.commit()
    db.session.refresh(admin_user)
    return admin_user


@pytest.fixture
def test_regular_user(app: Flask):
    """Create a logged-in user without admin rights."""
    user = User(
        username='visitor',
        email='visitor@example.com',
        password_hash=hash_password('visitorpassword'),
        is_admin=False,
    )
    db.session.add(user)
    db.session.commit()
    db.session.refresh(user)
    return user


@pytest.fixture
def authenticated_client(client: FlaskClient, test_admin_user: User) -> FlaskClient:
    """Create a client with an authenticated admin session."""
    with client.session_transaction() as sess:
        sess['_user_id'] = str(test_admin_user.id)
        sess['_fresh'] = True
    return client


@pytest.fixture
def store(app: Flask) -> SQLContentStore:
    """SQL store whose session is always the admin, with its own change feed."""
    return SQLContentStore(session_provider=lambda: ADMIN_SESSION, feed=ChangeFeed())


@pytest.fixture
def anonymous_store(app: Flask, store: SQLContentStore) -> SQLContentStore:
    """Same database and feed as ``store``, but with no session."""
    return SQLContentStore(session_provider=lambda: None, feed=store.feed)


@pytest.fixture
def posts(store: SQLContentStore) -> Generator[ContentRepository, None, None]:
    with ContentRepository(POST_KIND, store) as repo:
        yield repo


@pytest.fixture
def cases(store: SQLContentStore) -> Generator[ContentRepository, None, None]:
    with ContentRepository(CASE_KIND, store) as repo:
        yield repo


def make_post(**overrides) -> BlogPost:
    fields = dict(
        title='Growth Marketing 101',
        excerpt='How we grew a client 10x',
        content='<p>Body text</p>',
        category='marketing',
        author='Jane Doe',
        date=date(2024, 3, 1),
        read_time='5 min',
        image_url='/blog/growth.jpg',
        featured=False,
        status='draft',
    )
    fields.update(overrides)
    return BlogPost(**fields)


def make_case(**overrides) -> CaseStudy:
    fields = dict(
        title='Acme Rebrand',
        slug='acme-rebrand',
        description='<p>Full rebrand</p>',
        challenge='<p>Low awareness</p>',
        solution='<p>New identity</p>',
        results='<p>More leads</p>',
        client_name='Acme Corp',
        client_industry='technology',
        client_size='medium',
        duration='3 months',
        image_url='https://example.com/acme.jpg',
        featured=False,
        tools=('Figma', 'HubSpot'),
        metrics=(Metric(value='+10%', label='ROI'),),
        status='draft',
    )
    fields.update(overrides)
    return CaseStudy(**fields)


@pytest.fixture
def seeded_rows(app: Flask):
    """Rows written straight to the tables, bypassing the store."""
    rows = [
        PostRow(id='p-1', title='Published marketing', excerpt='SEO tips inside', content='<p>a</p>',
                category='marketing', author='Jane', date=date(2024, 1, 10), read_time='4 min',
                image_url='/blog/a.jpg', featured=True, status='published'),
        PostRow(id='p-2', title='Draft post', excerpt='Not yet', content='<p>b</p>',
                category='marketing', author='Jane', date=date(2024, 2, 10), read_time='4 min',
                image_url='/blog/b.jpg', featured=False, status='draft'),
        PostRow(id='p-3', title='Analytics deep dive', excerpt='Dashboards', content='<p>c</p>',
                category='analytics', author='Sam', date=date(2024, 3, 10), read_time='7 min',
                image_url='/blog/c.jpg', featured=False, status='published'),
        PostRow(id='p-4', title='Legacy post', excerpt='Before drafts existed', content='<p>d</p>',
                category='marketing', author='Sam', date=date(2023, 12, 1), read_time='3 min',
                image_url='/blog/d.jpg', featured=False, status=None),
        CaseRow(id='c-1', title='Clinic growth', slug='clinic-growth', description='<p>Patients</p>',
                challenge='x', solution='y', results='z', client_name='Clinic', client_industry='healthcare',
                client_size='small', duration='6 months', image_url='/blog/clinic.jpg', featured=True,
                tools=['Ads'], metrics=[{'value': '2x', 'label': 'Bookings'}], status='published'),
        CaseRow(id='c-2', title='Bank rollout', slug='bank-rollout', description='<p>Secret</p>',
                challenge='x', solution='y', results='z', client_name='Bank', client_industry='finance',
                client_size='enterprise', duration='1 year', image_url='/blog/bank.jpg', featured=False,
                tools=[], metrics=[], status='draft'),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return rows


@pytest.fixture
def post_factory():
    """Build a valid ``BlogPost``; keyword arguments override fields."""
    return make_post


@pytest.fixture
def case_factory():
    """Build a valid ``CaseStudy``; keyword arguments override fields."""
    return make_case
