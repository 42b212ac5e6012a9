from typing import Optional


class RemoteError(RuntimeError):
    """Transport or HTTP failure reported by the remote task API.

    ``message`` is always populated; ``detail`` holds the server-provided
    explanation (the JSON ``message`` field) when the server sent one.
    """

    def __init__(self, message: str, status: Optional[int] = None, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.detail = detail

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, message={self.message!r})"


class AuthError(RemoteError):
    """Invalid credentials or expired session (HTTP 401)."""


class ValidationError(RemoteError):
    """Malformed request body or value outside the accepted domain."""


class NotFoundError(RemoteError):
    """Entity id absent on the server or in the local cache."""


class NetworkError(RemoteError):
    """Request never produced an HTTP response (connection, timeout)."""


__all__ = ["RemoteError", "AuthError", "ValidationError", "NotFoundError", "NetworkError"]
