import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

import requests

from application.ports import FileField
from core.errors import AuthError, NetworkError, NotFoundError, RemoteError, ValidationError
from core.wire import format_timestamp

logger = logging.getLogger("taskdeck.gateway")


def encode_form_fields(body: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Scalar fields of a multipart body; ``None`` values are left out."""
    fields: Dict[str, str] = {}
    for key, value in dict(body or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            fields[key] = "true" if value else "false"
        elif isinstance(value, datetime):
            fields[key] = format_timestamp(value) or ""
        else:
            fields[key] = str(value)
    return fields


def _server_detail(response: Any) -> str:
    try:
        payload = response.json()
    except ValueError:
        return ""
    if not isinstance(payload, dict):
        return ""
    return str(payload.get("message", "") or payload.get("error", "") or "").strip()


def _error_for_response(response: Any) -> RemoteError:
    status = response.status_code
    detail = _server_detail(response)
    message = detail or f"HTTP {status}"
    if status == 401:
        return AuthError(message, status, detail or None)
    if status in (400, 422):
        return ValidationError(message, status, detail or None)
    if status == 404:
        return NotFoundError(message, status, detail or None)
    return RemoteError(message, status, detail or None)


class RemoteGateway:
    """HTTP client for the task API.

    Every request made while a token is available carries
    ``Authorization: Bearer <token>``; requests made without one carry no
    Authorization header at all. Failures never leave this class as
    ``requests`` exceptions: they are mapped onto :class:`RemoteError`.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session],
        token_provider: Callable[[], Optional[str]],
        timeout: float = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.token_provider = token_provider
        self.timeout = timeout

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        *,
        files: Optional[Sequence[FileField]] = None,
    ) -> Any:
        method = method.upper()
        url = self.url_for(path)
        kwargs: Dict[str, Any] = {"headers": self._headers(), "timeout": self.timeout}
        if files:
            kwargs["data"] = encode_form_fields(body)
            kwargs["files"] = list(files)
        elif body is not None:
            kwargs["json"] = body
        logger.debug("%s %s%s", method, path, f" ({len(files)} file(s))" if files else "")
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"Network error: {exc}") from exc
        if response.status_code >= 400:
            error = _error_for_response(response)
            logger.debug("%s %s -> %s %s", method, path, response.status_code, error.message)
            raise error
        if response.status_code == 204 or not str(getattr(response, "text", "") or "").strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError(f"Invalid JSON in response to {method} {path}", response.status_code) from exc

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, body: Optional[Dict[str, Any]] = None, *, files: Optional[Sequence[FileField]] = None) -> Any:
        return self.request("POST", path, body, files=files)

    def put(self, path: str, body: Optional[Dict[str, Any]] = None, *, files: Optional[Sequence[FileField]] = None) -> Any:
        return self.request("PUT", path, body, files=files)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


__all__ = ["RemoteGateway", "encode_form_fields"]
