"""HTTP client for the Quillpress REST API."""
from __future__ import annotations

from typing import Any
from urllib.parse import urljoin

import requests
import structlog

from quillpress.config import ClientConfig

log = structlog.get_logger(__name__)

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class ApiError(Exception):
    """A failed API call, carrying the server's error message when it sent one."""

    def __init__(self, message: str, status_code: int | None = None, errors: list[dict] | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []


class BlogApiClient:
    """Client for the JSON API.

    Responses are unwrapped from the ``{success, data, count, error}``
    envelope: methods return ``data`` and raise :class:`ApiError` on any
    failure. The session cookie and CSRF token live on the underlying
    ``requests.Session``.
    """

    def __init__(self, base_url: str | None = None, session: requests.Session | None = None, timeout: float | None = None):
        self.base_url = base_url or ClientConfig.API_URL
        if not self.base_url.startswith(('http://', 'https://')):
            self.base_url = f'http://{self.base_url}'
        if not self.base_url.endswith('/'):
            self.base_url += '/'
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else ClientConfig.TIMEOUT
        self._csrf_token: str | None = None

    def _build_url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip('/'))

    def _headers(self, method: str) -> dict[str, str]:
        headers = {'Accept': 'application/json'}
        if method in MUTATING_METHODS:
            headers['X-CSRFToken'] = self._get_csrf_token()
            # Flask-WTF checks the referrer on HTTPS requests
            headers['Referer'] = self.base_url
        return headers

    def _get_csrf_token(self) -> str:
        if self._csrf_token is None:
            data = self._send('GET', '/api/auth/csrf')
            self._csrf_token = data['csrfToken']
        return self._csrf_token

    def _send(self, method: str, path: str, *, params: dict | None = None, json: Any = None) -> Any:
        url = self._build_url(path)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(method),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("api_request_failed", method=method, url=url, error=str(e))
            raise ApiError(str(e)) from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            raise ApiError(f"Unexpected response ({response.status_code})", response.status_code)

        if response.status_code >= 400 or not payload.get('success', False):
            errors = payload.get('errors') or []
            message = payload.get('error') or (errors[0].get('msg') if errors else None) or 'An error occurred'
            raise ApiError(message, response.status_code, errors)

        return payload.get('data')

    def request(self, method: str, path: str, **kwargs) -> Any:
        return self._send(method.upper(), path, **kwargs)

    # Session persistence
    def export_cookies(self) -> dict[str, str]:
        return requests.utils.dict_from_cookiejar(self.session.cookies)

    def load_cookies(self, cookies: dict[str, str]) -> None:
        requests.utils.add_dict_to_cookiejar(self.session.cookies, cookies)
        self._csrf_token = None

    # Auth
    def login(self, email: str, password: str) -> dict:
        user = self._send('POST', '/api/auth/login', json={'email': email, 'password': password})
        self._csrf_token = None
        return user

    def register(self, name: str, email: str, password: str) -> dict:
        user = self._send('POST', '/api/auth/register', json={'name': name, 'email': email, 'password': password})
        self._csrf_token = None
        return user

    def logout(self) -> None:
        try:
            self._send('POST', '/api/auth/logout')
        finally:
            self.session.cookies.clear()
            self._csrf_token = None

    def current_user(self) -> dict:
        return self._send('GET', '/api/auth/me')

    # Posts
    def get_all_posts(self) -> list[dict]:
        return self._send('GET', '/api/posts')

    def get_post(self, post_id: str) -> dict:
        return self._send('GET', f'/api/posts/{post_id}')

    def search_posts(self, query: str) -> list[dict]:
        return self._send('GET', '/api/posts/search', params={'q': query})

    def create_post(self, post: dict) -> dict:
        return self._send('POST', '/api/posts', json=post)

    def update_post(self, post_id: str, changes: dict) -> dict:
        return self._send('PUT', f'/api/posts/{post_id}', json=changes)

    def delete_post(self, post_id: str) -> None:
        self._send('DELETE', f'/api/posts/{post_id}')

    def add_comment(self, post_id: str, content: str) -> dict:
        return self._send('POST', f'/api/posts/{post_id}/comments', json={'content': content})

    # Categories
    def get_categories(self) -> list[dict]:
        return self._send('GET', '/api/categories')

    def get_category(self, category_id: str) -> dict:
        return self._send('GET', f'/api/categories/{category_id}')

    def create_category(self, name: str, description: str | None = None) -> dict:
        body: dict[str, Any] = {'name': name}
        if description is not None:
            body['description'] = description
        return self._send('POST', '/api/categories', json=body)

    def update_category(self, category_id: str, changes: dict) -> dict:
        return self._send('PUT', f'/api/categories/{category_id}', json=changes)

    def delete_category(self, category_id: str) -> None:
        self._send('DELETE', f'/api/categories/{category_id}')
