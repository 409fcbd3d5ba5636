"""Shared fixtures: fake upstream image API behind httpx.MockTransport and a FastAPI TestClient."""

import httpx
import pytest
from starlette.testclient import TestClient

UPSTREAM = "https://upstream.test"
SESSION_SECRET = "test-session-secret"

IMAGE_URL = "https://img/a.jpg"
OK_BODY = {"code": 200, "url": IMAGE_URL, "width": 100, "height": 200}


class FakeUpstream:
    """Callable for httpx.MockTransport: records every request, answers via ``responder``."""

    def __init__(self):
        self.calls: list[httpx.Request] = []
        self.responder = lambda request: httpx.Response(200, json=OK_BODY)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return self.responder(request)

    def respond_json(self, body, status_code: int = 200) -> None:
        self.responder = lambda request: httpx.Response(status_code, json=body)

    def respond_raw(self, content: bytes, status_code: int = 200) -> None:
        self.responder = lambda request: httpx.Response(status_code, content=content)

    def fail_transport(self) -> None:
        def _raise(request):
            raise httpx.ConnectError("connection refused", request=request)

        self.responder = _raise


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def app(upstream):
    from image_redirect.api.main import create_app

    return create_app(
        upstream_base_url=UPSTREAM,
        transport=httpx.MockTransport(upstream),
        session_secret=SESSION_SECRET,
    )


@pytest.fixture
def client(app):
    """TestClient that does not follow redirects, so Location can be asserted."""
    with TestClient(app, follow_redirects=False) as c:
        yield c


@pytest.fixture
def cache(app):
    return app.state.resolver_cache
