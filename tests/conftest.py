"""Shared fixtures: one app per backend (SQL and local mock), fake HTTP sessions."""

import pytest

from app import create_app


def make_app(tmp_path, backend, **overrides):
    config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'taskboard.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {},
        'USE_MOCK_BACKEND': backend == 'mock',
        'MOCK_STORAGE_PATH': str(tmp_path / 'mock_storage.json'),
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'ACCESS_TOKEN_SECRET': 'test-secret',
        'BCRYPT_LOG_ROUNDS': 4,
        'PUBLIC_BASE_URL': 'https://board.example.com',
        'SUMMARY_PROXY_URL': '',
        'GEMINI_API_URL': '',
        'GEMINI_API_KEY': '',
        'GOOGLE_SERVICE_ACCOUNT_JSON': '',
        'OPENWEATHER_API_KEY': '',
    }
    config.update(overrides)
    return create_app(config)


@pytest.fixture(params=['sql', 'mock'])
def app(request, tmp_path):
    return make_app(tmp_path, request.param)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def store(ctx):
    return ctx.extensions['taskboard']['store']


@pytest.fixture
def blobs(ctx):
    return ctx.extensions['taskboard']['blobs']


def signup(client, name="Ana", email="ana@example.com", password="secret"):
    response = client.post('/api/auth/signup', json={'name': name, 'email': email, 'password': password})
    assert response.status_code == 201, response.get_json()
    body = response.get_json()
    return body['user'], {'Authorization': f"Bearer {body['access_token']}"}


class FakeResponse:
    def __init__(self, status_code=200, payload=None, error=None):
        self.status_code = status_code
        self._payload = payload
        self._error = error

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        import requests

        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    """Stands in for requests.Session: answers by URL, records every call."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []

    def _answer(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        answer = self.routes.get(url)
        if answer is None:
            import requests

            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(answer, Exception):
            raise answer
        return answer

    def post(self, url, **kwargs):
        return self._answer('POST', url, kwargs)

    def get(self, url, **kwargs):
        return self._answer('GET', url, kwargs)
