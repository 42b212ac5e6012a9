from enum import Enum
from typing import Final, Literal

from .errors import ValidationError


class Status(Enum):
    PENDING = ("pending", "red", "○")
    IN_PROGRESS = ("in-progress", "yellow", "●")
    COMPLETED = ("completed", "green", "✓")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def color(self) -> str:
        return self.value[1]

    @property
    def icon(self) -> str:
        return self.value[2]

    @classmethod
    def from_string(cls, value: str) -> "Status":
        code = normalize_task_status(value)
        for status in cls:
            if status.code == code:
                return status
        raise ValidationError(f"Invalid task status: {value!r}")


TaskStatusCode = Literal["pending", "in-progress", "completed"]
TaskPriorityCode = Literal["low", "medium", "high"]

STATUS_CODES: Final[frozenset[str]] = frozenset({"pending", "in-progress", "completed"})
PRIORITY_CODES: Final[frozenset[str]] = frozenset({"low", "medium", "high"})
PRIORITY_RANK: Final[dict[str, int]] = {"high": 3, "medium": 2, "low": 1}

_STATUS_ALIASES: Final[dict[str, str]] = {
    "todo": "pending",
    "active": "in-progress",
    "in_progress": "in-progress",
    "inprogress": "in-progress",
    "done": "completed",
}


def normalize_task_status(value: str) -> TaskStatusCode:
    """Normalize task status input to the API status code.

    Canonical statuses: pending, in-progress, completed. A few CLI-friendly
    aliases (todo/active/done) are accepted as well.
    """
    token = (value or "").strip().lower().replace(" ", "-")
    token = _STATUS_ALIASES.get(token, token)
    if token in STATUS_CODES:
        return token  # type: ignore[return-value]
    raise ValidationError(f"Invalid task status: {value!r}")


def normalize_task_priority(value: str) -> TaskPriorityCode:
    token = (value or "").strip().lower()
    if token in PRIORITY_CODES:
        return token  # type: ignore[return-value]
    raise ValidationError(f"Invalid task priority: {value!r}")
