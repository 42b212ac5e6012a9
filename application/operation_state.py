"""Loading/error bookkeeping shared by the session store and entity cache."""

from contextlib import contextmanager
from threading import Lock
from typing import Iterator, Optional

from core.errors import RemoteError


class OperationState:
    """``loading`` stays true while at least one tracked call is running.

    Nested calls (an operation that re-fetches through another tracked
    operation) keep the flag set until the outermost one finishes.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._depth = 0
        self.error: Optional[str] = None

    @property
    def loading(self) -> bool:
        with self._lock:
            return self._depth > 0

    @contextmanager
    def busy(self) -> Iterator[None]:
        with self._lock:
            self._depth += 1
        try:
            yield
        finally:
            with self._lock:
                self._depth -= 1

    @contextmanager
    def track(self, default_error: str, *, prefer_detail: bool = False) -> Iterator[None]:
        """Run a remote-call-bearing block.

        The previous error is cleared on entry. A failure records a
        human-readable error (the server's own message when ``prefer_detail``
        and the server sent one) and is re-raised to the caller.
        """
        with self.busy():
            self.error = None
            try:
                yield
            except (RemoteError, ValueError) as exc:
                detail = getattr(exc, "detail", None) if prefer_detail else None
                self.error = detail or default_error
                raise
