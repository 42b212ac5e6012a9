"""Filtered views over the cached task collection.

``filter_tasks`` is pure and order-preserving: it never re-sorts, so the
result keeps the order of the source collection. All predicates are ANDed.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from core.errors import ValidationError
from core.status import normalize_task_priority, normalize_task_status
from core.task import Task

TAB_ALL = "all"
TABS = (TAB_ALL, "in-progress", "completed", "pending")


@dataclass(frozen=True)
class FilterCriteria:
    tab: str = TAB_ALL
    status: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    search_text: str = ""

    def __post_init__(self) -> None:
        tab = (self.tab or TAB_ALL).strip().lower()
        if tab != TAB_ALL:
            tab = normalize_task_status(tab)
        if tab not in TABS:
            raise ValidationError(f"Invalid tab: {self.tab!r}")
        object.__setattr__(self, "tab", tab)
        object.__setattr__(self, "status", normalize_task_status(self.status) if self.status else None)
        object.__setattr__(self, "priority", normalize_task_priority(self.priority) if self.priority else None)
        object.__setattr__(self, "category", (self.category or "").strip() or None)
        object.__setattr__(self, "search_text", self.search_text or "")

    @property
    def is_default(self) -> bool:
        return self == FilterCriteria()


def _matches(task: Task, criteria: FilterCriteria, query: str) -> bool:
    if criteria.tab != TAB_ALL and task.status != criteria.tab:
        return False
    if criteria.status and task.status != criteria.status:
        return False
    if criteria.category and task.category_id != criteria.category:
        return False
    if criteria.priority and task.priority != criteria.priority:
        return False
    if query:
        in_title = query in (task.title or "").lower()
        in_description = query in (task.description or "").lower()
        if not (in_title or in_description):
            return False
    return True


def filter_tasks(tasks: Iterable[Task], criteria: FilterCriteria) -> List[Task]:
    query = criteria.search_text.lower()
    return [task for task in tasks if _matches(task, criteria, query)]


__all__ = ["FilterCriteria", "TABS", "TAB_ALL", "filter_tasks"]
