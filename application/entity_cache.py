"""In-memory mirror of the server-held task and category collections.

Every mutation is confirm-then-apply: the local collections change only
after the server responded, and only from the response payload, so the cache
holds exactly what the server persisted (ids, category snapshots, attachment
metadata). Records are always replaced whole, by id.

Concurrent mutations of the same id are not serialized: the collection
reflects whichever response settles last.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from application.attachment_pipeline import as_file_fields
from application.operation_state import OperationState
from application.ports import Gateway
from core.category import Category
from core.errors import AuthError, RemoteError, ValidationError
from core.task import Task, category_draft_to_wire, task_draft_to_wire

logger = logging.getLogger("taskdeck.cache")


class EntityCache:
    def __init__(self, gateway: Gateway, token_provider: Callable[[], Optional[str]]) -> None:
        self.gateway = gateway
        self.token_provider = token_provider
        self.state = OperationState()
        self._lock = Lock()
        self._tasks: List[Task] = []
        self._categories: List[Category] = []
        self._disposed = False
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ---- snapshots -------------------------------------------------------

    @property
    def tasks(self) -> Tuple[Task, ...]:
        with self._lock:
            return tuple(self._tasks)

    @property
    def categories(self) -> Tuple[Category, ...]:
        with self._lock:
            return tuple(self._categories)

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    @property
    def disposed(self) -> bool:
        return self._disposed

    def find_task(self, task_id: str) -> Optional[Task]:
        with self._lock:
            return next((t for t in self._tasks if t.id == task_id), None)

    def find_category(self, category_id: str) -> Optional[Category]:
        with self._lock:
            return next((c for c in self._categories if c.id == category_id), None)

    # ---- lifecycle -------------------------------------------------------

    def attach(self, session: Any) -> None:
        """Follow ``session``'s authentication transitions."""
        self.detach()
        self._unsubscribe = session.subscribe(self.on_authentication_changed)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def dispose(self) -> None:
        """Tear down; settlements arriving afterwards are ignored."""
        self.detach()
        with self._lock:
            self._disposed = True
            self._tasks = []
            self._categories = []

    def on_authentication_changed(self, authenticated: bool) -> None:
        if not authenticated:
            self._apply(self._reset)
            return
        try:
            self.load()
        except RemoteError as exc:
            # Already recorded in ``error``; the login itself succeeded.
            logger.warning("Initial load after sign-in failed: %s", exc)

    def _reset(self) -> None:
        self._tasks = []
        self._categories = []

    def _apply(self, mutation: Callable[[], None]) -> None:
        with self._lock:
            if self._disposed:
                logger.debug("Cache disposed; dropping late update")
                return
            mutation()

    def _require_token(self) -> None:
        if not self.token_provider():
            raise AuthError("Not authenticated")

    # ---- loading ---------------------------------------------------------

    def load(self) -> None:
        self.fetch_tasks()
        self.fetch_categories()

    def fetch_tasks(self) -> Tuple[Task, ...]:
        if not self.token_provider():
            return self.tasks
        with self.state.track("Failed to load tasks"):
            tasks = [Task.from_dict(item) for item in _as_list(self.gateway.request("GET", "/tasks"))]

        def mutation() -> None:
            self._tasks = _dedupe(tasks)

        self._apply(mutation)
        return self.tasks

    def fetch_categories(self) -> Tuple[Category, ...]:
        if not self.token_provider():
            return self.categories
        with self.state.track("Failed to load categories"):
            categories = [Category.from_dict(item) for item in _as_list(self.gateway.request("GET", "/categories"))]

        def mutation() -> None:
            self._categories = _dedupe(categories)

        self._apply(mutation)
        return self.categories

    def get_by_id(self, task_id: str) -> Task:
        """Always fetched from the server; detail views need the latest state."""
        with self.state.track("Failed to load task details"):
            self._require_token()
            return Task.from_dict(self.gateway.request("GET", f"/tasks/{task_id}") or {})

    # ---- task mutations --------------------------------------------------

    def _send_task(self, method: str, path: str, draft: Dict[str, Any], files: Sequence[Any]) -> Task:
        body = task_draft_to_wire(draft)
        file_fields = as_file_fields(files)
        if file_fields:
            payload = self.gateway.request(method, path, body, files=file_fields)
        else:
            payload = self.gateway.request(method, path, body)
        return Task.from_dict(payload or {})

    def create(self, draft: Dict[str, Any], files: Sequence[Any] = ()) -> Task:
        with self.state.track("Failed to create task"):
            self._require_token()
            task = self._send_task("POST", "/tasks", draft, files)
        self._apply(lambda: _upsert(self._tasks, task, append=True))
        return task

    def update(self, task_id: str, patch: Dict[str, Any], files: Sequence[Any] = ()) -> Task:
        with self.state.track("Failed to update task"):
            self._require_token()
            task = self._send_task("PUT", f"/tasks/{task_id}", patch, files)
        self._apply(lambda: _upsert(self._tasks, task, append=False, match_id=task_id))
        return task

    def remove(self, task_id: str) -> None:
        with self.state.track("Failed to delete task"):
            self._require_token()
            self.gateway.request("DELETE", f"/tasks/{task_id}")
        self._apply(lambda: _remove(self._tasks, task_id))

    def remove_attachment(self, task_id: str, attachment_id: str) -> Task:
        """Delete one attachment, then replace the task from a fresh fetch."""
        with self.state.track("Failed to remove attachment"):
            self._require_token()
            self.gateway.request("DELETE", f"/tasks/{task_id}/attachments/{attachment_id}")
            task = self.get_by_id(task_id)
        self._apply(lambda: _upsert(self._tasks, task, append=False, match_id=task_id))
        return task

    def add_to_calendar(self, task_id: str) -> str:
        with self.state.track("Failed to add task to calendar"):
            self._require_token()
            cached = self.find_task(task_id)
            if cached is not None and cached.due_date is None:
                raise ValidationError(f"Task {task_id} has no due date")
            payload = self.gateway.request("POST", f"/calendar/tasks/{task_id}") or {}
            if not isinstance(payload, dict):
                raise ValidationError("Malformed calendar response")
            event_id = str(payload.get("eventId", "") or "").strip()
            if not event_id:
                raise ValidationError("Calendar response did not include an event id")
        self._apply(lambda: _set_calendar_event(self._tasks, task_id, event_id))
        return event_id

    def remove_from_calendar(self, task_id: str) -> None:
        with self.state.track("Failed to remove task from calendar"):
            self._require_token()
            self.gateway.request("DELETE", f"/calendar/tasks/{task_id}")
        self._apply(lambda: _set_calendar_event(self._tasks, task_id, None))

    # ---- category mutations ----------------------------------------------

    def create_category(self, draft: Dict[str, Any]) -> Category:
        with self.state.track("Failed to create category"):
            self._require_token()
            payload = self.gateway.request("POST", "/categories", category_draft_to_wire(draft))
            category = Category.from_dict(payload or {})
        self._apply(lambda: _upsert(self._categories, category, append=True))
        return category

    def update_category(self, category_id: str, patch: Dict[str, Any]) -> Category:
        with self.state.track("Failed to update category"):
            self._require_token()
            payload = self.gateway.request("PUT", f"/categories/{category_id}", category_draft_to_wire(patch))
            category = Category.from_dict(payload or {})
        self._apply(lambda: _upsert(self._categories, category, append=False, match_id=category_id))
        return category

    def remove_category(self, category_id: str) -> None:
        with self.state.track("Failed to delete category"):
            self._require_token()
            self.gateway.request("DELETE", f"/categories/{category_id}")
        self._apply(lambda: _remove(self._categories, category_id))


def _as_list(payload: Any) -> List[Dict[str, Any]]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValidationError("Expected a JSON array")
    return payload


def _dedupe(items: Iterable[Any]) -> List[Any]:
    """Keep the last record per id, at the position of its first occurrence."""
    order: List[str] = []
    latest: Dict[str, Any] = {}
    for item in items:
        if item.id not in latest:
            order.append(item.id)
        latest[item.id] = item
    return [latest[i] for i in order]


def _upsert(collection: List[Any], record: Any, *, append: bool, match_id: Optional[str] = None) -> None:
    """Replace the entry with ``match_id`` (default: record id) in place.

    With ``append`` a missing entry is added at the end; the collection never
    ends up with two entries sharing an id.
    """
    target = match_id or record.id
    replaced = False
    result: List[Any] = []
    for item in collection:
        if item.id in (target, record.id):
            if not replaced:
                result.append(record)
                replaced = True
            continue
        result.append(item)
    if not replaced and append:
        result.append(record)
    collection[:] = result


def _remove(collection: List[Any], record_id: str) -> None:
    collection[:] = [item for item in collection if item.id != record_id]


def _set_calendar_event(collection: List[Task], task_id: str, event_id: Optional[str]) -> None:
    for idx, task in enumerate(collection):
        if task.id == task_id:
            if event_id and task.due_date is None:
                logger.warning("Task %s has no due date; calendar event %s not recorded", task_id, event_id)
                return
            collection[idx] = task.with_calendar_event(event_id)
            return
