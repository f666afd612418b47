import httpx
import pytest

from regclient import Client

REGISTRY = "https://registry.test"
REALM = "https://auth.test/token"
CHALLENGE = f'Bearer realm="{REALM}",service="registry.test",scope="repository:library/busybox:pull"'


class FakeRegistry:
    """
    In-memory stand-in for a registry and its token service.

    Responses are queued per (method, path); the last queued response is
    repeated once the queue drains. Every request is recorded.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, *responses):
        self.routes.setdefault((method, path), []).extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            raise AssertionError(f"unexpected request {request.method} {request.url}")
        resp = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(resp):
            return resp(request)
        # Hand out a fresh copy so a queued response can be served repeatedly.
        return httpx.Response(resp.status_code, headers=resp.headers, content=resp.content)

    def requests_to(self, path, method=None):
        return [
            r for r in self.calls
            if r.url.path == path and (method is None or r.method == method)
        ]


def challenge_response(header=CHALLENGE):
    headers = {"WWW-Authenticate": header} if header is not None else {}
    return httpx.Response(
        401,
        headers=headers,
        json={"errors": [{"code": "UNAUTHORIZED", "message": "authentication required", "detail": None}]},
    )


def token_response(token="tok-1", field="token", **extra):
    return httpx.Response(200, json={field: token, **extra})


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def make_client(registry):
    def _make(**kwargs):
        transport = httpx.AsyncClient(
            transport=httpx.MockTransport(registry.handler),
            follow_redirects=True,
        )
        return Client(REGISTRY, transport=transport, **kwargs)

    return _make


@pytest.fixture
def client(make_client):
    return make_client()
