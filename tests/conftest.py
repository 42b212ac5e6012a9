import json as _json
from typing import Any, Dict, List, Tuple

import pytest

from application.client import TaskdeckClient
from infrastructure.credential_store import MemoryCredentialStore

API = "https://api.example/api"


class DummyResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self.text = "" if payload is None else _json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeHttp:
    """requests.Session stand-in routing on (METHOD, path)."""

    def __init__(self, routes=None):
        self.routes: Dict[Tuple[str, str], Any] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []

    def route(self, method, path, *responses):
        self.routes[(method.upper(), path)] = list(responses) if len(responses) > 1 else responses[0]

    def request(self, method, url, **kwargs):
        path = url[len(API):] if url.startswith(API) else url
        self.calls.append({"method": method, "path": path, **kwargs})
        resp = self.routes.get((method, path))
        if resp is None:
            return DummyResponse(404, {"message": f"no route {method} {path}"})
        if isinstance(resp, list):
            resp = resp.pop(0) if len(resp) > 1 else resp[0]
        if isinstance(resp, Exception):
            raise resp
        if callable(resp):
            return resp(method, path, kwargs)
        return resp

    def paths(self, method=None):
        return [c["path"] for c in self.calls if method is None or c["method"] == method]


def task_json(task_id, title="Task", status="pending", priority="medium", **extra):
    data = {
        "_id": task_id,
        "title": title,
        "status": status,
        "priority": priority,
        "attachments": [],
        "createdAt": "2026-10-01T09:00:00.000Z",
        "updatedAt": "2026-10-01T09:00:00.000Z",
    }
    data.update(extra)
    return data


USER = {"_id": "u1", "name": "Ada", "email": "ada@example.com"}


@pytest.fixture
def http():
    fake = FakeHttp()
    fake.route("POST", "/auth/login", DummyResponse(200, {"token": "tok-1", "user": USER}))
    fake.route("GET", "/auth/me", DummyResponse(200, USER))
    fake.route("GET", "/tasks", DummyResponse(200, [task_json("t1", "Quarterly report"), task_json("t2", "Buy milk", status="completed")]))
    fake.route("GET", "/categories", DummyResponse(200, [{"_id": "c1", "name": "Work", "color": "#3498db"}]))
    return fake


@pytest.fixture
def client(http):
    c = TaskdeckClient(API, credentials=MemoryCredentialStore(), http=http, timeout=1)
    yield c
    c.close()


@pytest.fixture
def signed_in(client):
    client.session.login({"email": "ada@example.com", "password": "secret"})
    return client
