from .attachment import Attachment
from .category import Category
from .errors import AuthError, NetworkError, NotFoundError, RemoteError, ValidationError
from .status import (
    PRIORITY_CODES,
    PRIORITY_RANK,
    STATUS_CODES,
    Status,
    normalize_task_priority,
    normalize_task_status,
)
from .task import Task, category_draft_to_wire, task_draft_to_wire
from .user import User

__all__ = [
    "Attachment",
    "Category",
    "Task",
    "User",
    "Status",
    "STATUS_CODES",
    "PRIORITY_CODES",
    "PRIORITY_RANK",
    "normalize_task_status",
    "normalize_task_priority",
    "task_draft_to_wire",
    "category_draft_to_wire",
    # Errors
    "RemoteError",
    "AuthError",
    "ValidationError",
    "NotFoundError",
    "NetworkError",
]
