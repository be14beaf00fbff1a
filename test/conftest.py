import json
import sys
from pathlib import Path

import pytest
import requests

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def make_response(status: int = 200, payload=None, text: str | None = None, headers: dict | None = None):
    resp = requests.Response()
    resp.status_code = status
    resp.encoding = "utf-8"
    if text is not None:
        resp._content = text.encode("utf-8")
        resp.headers["Content-Type"] = "text/plain"
    elif payload is not None:
        resp._content = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = b""
    resp.headers.update(headers or {})
    return resp


class FakeSession:
    """Stands in for requests.Session: records calls, replays queued responses or exceptions."""

    def __init__(self, *responses):
        self.queue = list(responses)
        self.calls: list[dict] = []

    def push(self, *responses):
        self.queue.extend(responses)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "params": params,
            "json": json,
            "headers": dict(headers or {}),
            "timeout": timeout,
        })
        item = self.queue.pop(0) if self.queue else make_response(200, [])
        if isinstance(item, BaseException):
            raise item
        return item


class RecordingClient:
    """Service-level fake: returns canned data per (method, endpoint)."""

    def __init__(self, routes: dict | None = None):
        self.routes = dict(routes or {})
        self.calls: list[tuple] = []
        self.cache_cleared = 0

    def _answer(self, method, endpoint, **kw):
        self.calls.append((method, endpoint, kw))
        answer = self.routes.get((method, endpoint))
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def get(self, endpoint, params=None, skip_cache=False, tenant=None):
        return self._answer("GET", endpoint, params=params, tenant=tenant)

    def post(self, endpoint, data=None):
        return self._answer("POST", endpoint, data=data)

    def put(self, endpoint, data=None):
        return self._answer("PUT", endpoint, data=data)

    def delete(self, endpoint):
        return self._answer("DELETE", endpoint)

    def clear_cache(self):
        self.cache_cleared += 1


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def recording_client():
    return RecordingClient()
