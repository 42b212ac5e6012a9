"""JSON envelopes printed by every taskdeck command."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.errors import AuthError, NetworkError, NotFoundError, RemoteError, ValidationError
from core.wire import format_timestamp

# Most specific class first; RemoteError is the fallback.
_ERROR_STATUS = (
    (AuthError, "UNAUTHORIZED"),
    (ValidationError, "INVALID"),
    (NotFoundError, "NOT_FOUND"),
    (NetworkError, "UNREACHABLE"),
)


def _emit(body: Dict[str, Any]) -> None:
    print(json.dumps(body, ensure_ascii=False, indent=2))


def structured_response(
    command: str,
    *,
    status: str = "OK",
    message: str = "",
    payload: Optional[Dict[str, Any]] = None,
    summary: Optional[str] = None,
    exit_code: int = 0,
) -> int:
    body: Dict[str, Any] = {
        "command": command,
        "status": status,
        "message": message,
        "timestamp": format_timestamp(datetime.now(timezone.utc)),
        "payload": payload or {},
    }
    if summary:
        body["summary"] = summary
    _emit(body)
    return exit_code


def structured_error(command: str, message: str, *, payload: Optional[Dict[str, Any]] = None, status: str = "ERROR") -> int:
    return structured_response(command, status=status, message=message, payload=payload, exit_code=1)


def error_status(exc: RemoteError) -> str:
    for error_type, status in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status
    return "ERROR"


def error_response(command: str, exc: RemoteError, component_error: Optional[str] = None) -> int:
    """Report a failed remote operation.

    ``component_error`` is the message the session store or entity cache
    recorded for the failure; the server's own explanation goes in ``detail``.
    """
    payload: Dict[str, Any] = {"http_status": exc.status, "error": component_error}
    if exc.detail and exc.detail != component_error:
        payload["detail"] = exc.detail
    return structured_error(command, exc.message, payload=payload, status=error_status(exc))


__all__ = ["structured_response", "structured_error", "error_response", "error_status"]
