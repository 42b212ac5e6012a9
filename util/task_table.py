"""Width-aware plain-text table for task listings."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from wcwidth import wcwidth

from core.status import Status
from core.task import Task


def display_width(text: str) -> int:
    """Visual width of text accounting for wide/narrow characters."""
    width = 0
    for ch in text:
        w = wcwidth(ch)
        if w is None:
            w = 0
        width += max(0, w)
    return width


def trim_display(text: str, width: int) -> str:
    acc = []
    used = 0
    for ch in text:
        w = wcwidth(ch) or 0
        if w < 0:
            w = 0
        if used + w > width:
            break
        acc.append(ch)
        used += w
    return "".join(acc)


def pad_display(text: str, width: int) -> str:
    """Trim and pad with spaces to exact visible width."""
    trimmed = trim_display(text, width)
    trimmed_width = display_width(trimmed)
    if trimmed_width < width:
        trimmed += " " * (width - trimmed_width)
    return trimmed


@dataclass
class ColumnLayout:
    """Responsive table layout definition."""
    min_width: int
    columns: List[str]
    title_min: int = 16

    def _base_min_widths(self) -> Dict[str, int]:
        base = {
            'idx': 3,
            'stat': 2,
            'prio': 6,
            'title': self.title_min,
            'due': 10,
            'category': 10,
        }
        return {col: base.get(col, 8) for col in self.columns}

    def required_width(self) -> int:
        return sum(self._base_min_widths().values()) + len(self.columns) + 1

    def calculate_widths(self, term_width: int) -> Dict[str, int]:
        """Compute column widths that fit into the terminal; title takes the slack."""
        separators = len(self.columns) + 1
        usable_width = max(len(self.columns), term_width - separators)
        widths = self._base_min_widths()
        remaining = usable_width - sum(widths.values())
        if remaining > 0:
            widths['title'] += remaining
        elif remaining < 0:
            widths['title'] = max(6, widths['title'] + remaining)
        return widths


LAYOUTS = [
    ColumnLayout(min_width=90, columns=['idx', 'stat', 'prio', 'title', 'due', 'category'], title_min=24),
    ColumnLayout(min_width=64, columns=['idx', 'stat', 'prio', 'title', 'due'], title_min=18),
    ColumnLayout(min_width=0, columns=['idx', 'stat', 'title'], title_min=10),
]


def select_layout(term_width: int) -> ColumnLayout:
    for layout in LAYOUTS:
        effective_min = max(layout.min_width, layout.required_width())
        if term_width >= effective_min:
            return layout
    return LAYOUTS[-1]


def _cell(task: Task, col: str, idx: int, now: Optional[datetime]) -> str:
    if col == 'idx':
        return str(idx)
    if col == 'stat':
        return Status.from_string(task.status).icon
    if col == 'prio':
        return task.priority
    if col == 'title':
        marks = "!" if task.is_overdue(now) else ""
        if task.has_calendar_event:
            marks += "@"
        return f"{task.title} {marks}".rstrip()
    if col == 'due':
        return task.due_date.strftime("%Y-%m-%d") if task.due_date else "-"
    if col == 'category':
        return task.category.name if task.category else "-"
    return ""


def render_task_table(tasks: Sequence[Task], term_width: int = 100, now: Optional[datetime] = None) -> List[str]:
    """Render tasks as table rows; ``!`` marks overdue and ``@`` calendar-linked tasks."""
    layout = select_layout(term_width)
    widths = layout.calculate_widths(term_width)
    lines = []
    for idx, task in enumerate(tasks, start=1):
        cells = [pad_display(_cell(task, col, idx, now), widths[col]) for col in layout.columns]
        lines.append("|" + "|".join(cells) + "|")
    return lines


__all__ = ["display_width", "pad_display", "trim_display", "render_task_table", "select_layout", "ColumnLayout"]
