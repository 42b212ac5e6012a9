from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from .attachment import Attachment
from .category import Category
from .errors import ValidationError
from .status import normalize_task_priority, normalize_task_status
from .wire import entity_id, format_timestamp, parse_timestamp


# Python draft keys -> wire keys expected by POST/PUT /tasks.
_DRAFT_WIRE_KEYS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "category_id": "categoryId",
    "due_date": "dueDate",
    "add_to_calendar": "addToCalendar",
}


def _aware(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    return now if now.tzinfo else now.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    status: str = "pending"
    priority: str = "medium"
    description: str = ""
    category: Optional[Category] = None  # Denormalized snapshot, never a live reference
    due_date: Optional[datetime] = None
    attachments: Tuple[Attachment, ...] = field(default_factory=tuple)
    external_calendar_event_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", normalize_task_status(self.status))
        object.__setattr__(self, "priority", normalize_task_priority(self.priority))
        object.__setattr__(self, "attachments", tuple(self.attachments or ()))
        if self.due_date is None and self.external_calendar_event_id:
            # A calendar event only exists for dated tasks.
            object.__setattr__(self, "external_calendar_event_id", None)

    @property
    def category_id(self) -> str:
        return self.category.id if self.category else ""

    @property
    def has_calendar_event(self) -> bool:
        return bool(self.external_calendar_event_id)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        if self.due_date is None or self.status == "completed":
            return False
        return _aware(self.due_date) < _aware(now)

    def is_due_today(self, now: Optional[datetime] = None) -> bool:
        if self.due_date is None:
            return False
        current = _aware(now)
        return _aware(self.due_date).astimezone(current.tzinfo).date() == current.date()

    def with_calendar_event(self, event_id: Optional[str]) -> "Task":
        """Copy of the task with only the calendar event id changed."""
        if event_id and self.due_date is None:
            raise ValidationError(f"Task {self.id} has no due date; it cannot be added to the calendar")
        return replace(self, external_calendar_event_id=event_id or None)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "category": self.category.to_dict() if self.category else None,
            "due_date": format_timestamp(self.due_date),
            "attachments": [a.to_dict() for a in self.attachments],
            "external_calendar_event_id": self.external_calendar_event_id,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }
        return {k: v for k, v in payload.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        if not isinstance(data, dict):
            raise ValidationError("task must be object")
        raw_category = data.get("category")
        category: Optional[Category] = None
        if isinstance(raw_category, dict):
            category = Category.from_dict(raw_category)
        elif raw_category:
            category = Category(id=str(raw_category), name="")
        try:
            due_date = parse_timestamp(data.get("dueDate"))
            created_at = parse_timestamp(data.get("createdAt"))
            updated_at = parse_timestamp(data.get("updatedAt"))
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        return cls(
            id=entity_id(data),
            title=str(data.get("title", "") or "").strip(),
            description=str(data.get("description", "") or ""),
            status=str(data.get("status", "") or "pending"),
            priority=str(data.get("priority", "") or "medium"),
            category=category,
            due_date=due_date,
            attachments=tuple(Attachment.from_dict(a) for a in list(data.get("attachments") or [])),
            external_calendar_event_id=str(data.get("googleCalendarEventId", "") or "").strip() or None,
            created_at=created_at,
            updated_at=updated_at,
        )


def task_draft_to_wire(draft: Mapping[str, Any]) -> Dict[str, Any]:
    """Map a task draft/patch (snake_case keys) to the API request body.

    Unknown keys are rejected; status and priority are normalized so the
    server never receives a value outside the enumerations.
    """
    body: Dict[str, Any] = {}
    for key, value in dict(draft or {}).items():
        wire_key = _DRAFT_WIRE_KEYS.get(key)
        if wire_key is None:
            raise ValidationError(f"Unknown task field: {key!r}")
        if key == "status" and value is not None:
            value = normalize_task_status(str(value))
        elif key == "priority" and value is not None:
            value = normalize_task_priority(str(value))
        elif key == "due_date" and isinstance(value, datetime):
            value = format_timestamp(value)
        body[wire_key] = value
    return body


def category_draft_to_wire(draft: Mapping[str, Any]) -> Dict[str, Any]:
    body: Dict[str, Any] = {}
    for key, value in dict(draft or {}).items():
        if key not in ("name", "color"):
            raise ValidationError(f"Unknown category field: {key!r}")
        body[key] = value
    return body
