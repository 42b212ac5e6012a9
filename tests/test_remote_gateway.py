from datetime import datetime, timezone

import pytest
import requests

from conftest import API, DummyResponse, FakeHttp
from core.errors import AuthError, NetworkError, NotFoundError, RemoteError, ValidationError
from infrastructure.remote_gateway import RemoteGateway, encode_form_fields


def _gateway(http, token="tok"):
    return RemoteGateway(API, http, lambda: token, timeout=1)


def test_authenticated_request_carries_bearer_token():
    http = FakeHttp({("GET", "/tasks"): DummyResponse(200, [])})
    assert _gateway(http).request("get", "/tasks") == []

    call = http.calls[0]
    assert call["method"] == "GET"
    assert call["headers"]["Authorization"] == "Bearer tok"
    assert call["timeout"] == 1


def test_unauthenticated_request_has_no_authorization_header():
    http = FakeHttp({("POST", "/auth/login"): DummyResponse(200, {"token": "t"})})
    _gateway(http, token=None).request("POST", "/auth/login", {"email": "a"})

    call = http.calls[0]
    assert "Authorization" not in call["headers"]
    assert call["json"] == {"email": "a"}
    assert "files" not in call


def test_token_is_read_per_request():
    tokens = ["first", None]
    http = FakeHttp({("GET", "/auth/me"): DummyResponse(200, {})})
    gateway = RemoteGateway(API, http, lambda: tokens[0])
    gateway.get("/auth/me")
    tokens[0] = None
    gateway.get("/auth/me")

    assert http.calls[0]["headers"]["Authorization"] == "Bearer first"
    assert "Authorization" not in http.calls[1]["headers"]


def test_multipart_body_uses_form_fields_and_repeated_attachments():
    http = FakeHttp({("POST", "/tasks"): DummyResponse(201, {"_id": "t1"})})
    files = [
        ("attachments", ("a.png", b"png", "image/png")),
        ("attachments", ("b.pdf", b"pdf", "application/pdf")),
    ]
    body = {"title": "Doc", "description": None, "addToCalendar": False, "dueDate": datetime(2026, 10, 20, tzinfo=timezone.utc)}

    _gateway(http).request("POST", "/tasks", body, files=files)

    call = http.calls[0]
    assert "json" not in call
    assert call["data"] == {"title": "Doc", "addToCalendar": "false", "dueDate": "2026-10-20T00:00:00Z"}
    assert [name for name, _ in call["files"]] == ["attachments", "attachments"]


@pytest.mark.parametrize(
    "status, error_type",
    [(401, AuthError), (400, ValidationError), (422, ValidationError), (404, NotFoundError), (500, RemoteError)],
)
def test_http_errors_are_normalized(status, error_type):
    http = FakeHttp({("GET", "/tasks/x"): DummyResponse(status, {"message": "nope"})})
    with pytest.raises(error_type) as info:
        _gateway(http).get("/tasks/x")
    assert info.value.status == status
    assert info.value.message == "nope"
    assert info.value.detail == "nope"


def test_error_without_server_message_has_no_detail():
    http = FakeHttp({("DELETE", "/tasks/x"): DummyResponse(503)})
    with pytest.raises(RemoteError) as info:
        _gateway(http).delete("/tasks/x")
    assert info.value.message == "HTTP 503"
    assert info.value.detail is None


def test_transport_failure_becomes_network_error():
    http = FakeHttp({("GET", "/tasks"): requests.ConnectionError("refused")})
    with pytest.raises(NetworkError) as info:
        _gateway(http).get("/tasks")
    assert info.value.status is None
    assert isinstance(info.value, RemoteError)


def test_empty_body_returns_none():
    http = FakeHttp({("DELETE", "/tasks/t1"): DummyResponse(204)})
    assert _gateway(http).delete("/tasks/t1") is None


def test_encode_form_fields_stringifies_scalars():
    assert encode_form_fields({"a": 1, "b": True, "c": None, "d": "x"}) == {"a": "1", "b": "true", "d": "x"}
    assert encode_form_fields(None) == {}
