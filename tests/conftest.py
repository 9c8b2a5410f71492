"""Test configuration and fixtures for the Quillpress API and client."""

from typing import Generator
from urllib.parse import urlsplit

import pytest
import requests
from flask import Flask
from flask.testing import FlaskClient
from sqlalchemy.pool import StaticPool

from quillpress import create_app
from quillpress.extensions import db
from quillpress.models import User, Category, Post
from quillpress.models.user import ROLE_ADMIN, ROLE_USER
from quillpress.repositories import blog as blog_repo
from quillpress.utils.crypto import hash_password


@pytest.fixture
def app() -> Generator[Flask, None, None]:
    """Create and configure a test Flask application."""
    # Use in-memory SQLite for each test
    test_config = {
        'TESTING': True,
        'WTF_CSRF_ENABLED': False,  # Disable CSRF for testing
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SQLALCHEMY_ENGINE_OPTIONS': {
            'poolclass': StaticPool,
            'pool_pre_ping': True,
            'connect_args': {'check_same_thread': False}
        },
        'SECRET_KEY': 'test-secret-key',
        'SESSION_COOKIE_SECURE': False,
        'RATELIMIT_ENABLED': False,  # Disable rate limiting for tests
    }

    app = create_app(test_config)

    with app.app_context():
        db.create_all()
        yield app

        # Cleanup
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
    """Create an admin user; password is 'adminpassword'."""
    admin_user = User(
        name='Test Admin',
        email='admin@example.com',
        password_hash=hash_password('adminpassword', rounds=4),
        role=ROLE_ADMIN,
    )
    db.session.add(admin_user)
    db.session.commit()
    db.session.refresh(admin_user)
    yield admin_user


@pytest.fixture
def test_user(app: Flask):
    """Create a regular user; password is 'userpassword'."""
    user = User(
        name='Test Reader',
        email='reader@example.com',
        password_hash=hash_password('userpassword', rounds=4),
        role=ROLE_USER,
    )
    db.session.add(user)
    db.session.commit()
    db.session.refresh(user)
    yield user


@pytest.fixture
def test_category(app: Flask):
    """Create an empty category."""
    category = Category(
        name='Test Category',
        slug='test-category',
        description='A test category',
        post_count=0,
    )
    db.session.add(category)
    db.session.commit()
    db.session.refresh(category)
    yield category


@pytest.fixture
def test_post(app: Flask, test_category: Category, test_admin_user: User):
    """Create a post through the repository so the category count is 1."""
    post = blog_repo.create_post(
        title='Test Post',
        content='This is a test post about Flask and SQLAlchemy.',
        excerpt='Test post excerpt',
        tags=['python', 'flask'],
        category=test_category,
        author_id=test_admin_user.id,
    )
    db.session.refresh(post)
    yield post


def _login_as(client: FlaskClient, user: User) -> FlaskClient:
    with client.session_transaction() as sess:
        sess['_user_id'] = str(user.id)
        sess['_fresh'] = True
    return client


@pytest.fixture
def admin_client(client: FlaskClient, test_admin_user: User) -> FlaskClient:
    """Create a client with an authenticated admin session."""
    return _login_as(client, test_admin_user)


@pytest.fixture
def user_client(client: FlaskClient, test_user: User) -> FlaskClient:
    """Create a client with an authenticated regular user session."""
    return _login_as(client, test_user)


class _TransportResponse:
    """The slice of ``requests.Response`` the API client reads."""

    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code

    def json(self):
        payload = self._response.get_json(silent=True)
        if payload is None:
            raise ValueError("No JSON body")
        return payload


class FlaskTransport:
    """Stands in for ``requests.Session`` by routing calls to the Flask test client.

    ``cookies`` is the source of truth for the session cookie, as on a real
    ``requests.Session``: it is pushed into the test client before each call
    and refreshed from the response afterwards.
    """

    def __init__(self, client: FlaskClient):
        self.client = client
        self.cookies = requests.cookies.RequestsCookieJar()
        self.calls = []
        self._cookie_name = client.application.config["SESSION_COOKIE_NAME"]

    def _push_cookie(self) -> None:
        value = self.cookies.get(self._cookie_name)
        if value is None:
            self.client.delete_cookie(self._cookie_name)
        else:
            self.client.set_cookie(self._cookie_name, value)

    def _pull_cookie(self) -> None:
        cookie = self.client.get_cookie(self._cookie_name)
        if cookie is None:
            self.cookies.pop(self._cookie_name, None)
        else:
            self.cookies.set(self._cookie_name, cookie.value)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append((method, path, headers or {}))
        self._push_cookie()
        response = self.client.open(
            path,
            method=method,
            query_string=params,
            json=json,
            headers=headers,
        )
        self._pull_cookie()
        return _TransportResponse(response)


@pytest.fixture
def transport(client: FlaskClient) -> FlaskTransport:
    return FlaskTransport(client)


@pytest.fixture
def make_api(app: Flask):
    """Build an API client on a brand new test client with an empty cookie jar."""
    from quillpress.client.api import BlogApiClient

    def factory():
        return BlogApiClient('http://localhost', session=FlaskTransport(app.test_client()))

    return factory


@pytest.fixture
def api(transport: FlaskTransport):
    """API client wired to the test application."""
    from quillpress.client.api import BlogApiClient

    return BlogApiClient('http://localhost', session=transport)
