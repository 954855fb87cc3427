import json

import pytest
import requests

from config import Settings
from gemini_proxy import GeminiProxy
from main import create_app

API_KEY = "test-secret-key"


def make_response(status_code=200, body=b"", headers=None, url=""):
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = json.dumps(body).encode() if isinstance(body, (dict, list)) else body
    resp.headers.update(headers or {"Content-Type": "application/json"})
    resp.url = url
    return resp


class FakeSession:
    """Records outbound calls and answers them from a queue or a url map."""

    def __init__(self, responses=None, routes=None, error=None):
        self.responses = list(responses or [])
        self.routes = dict(routes or {})
        self.error = error
        self.calls = []

    def _answer(self, url):
        if self.error is not None:
            raise self.error
        if url in self.routes:
            return self.routes[url]
        return self.responses.pop(0)

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return self._answer(url)

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self._answer(url)


@pytest.fixture
def settings():
    return Settings(gemini_key=API_KEY)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def proxy(settings, session):
    return GeminiProxy(settings, session=session)


@pytest.fixture
def client(settings, proxy):
    app = create_app(settings, proxy=proxy)
    app.testing = True
    return app.test_client()
