from datetime import datetime, timezone

import pytest

from core import Category, Status, Task, ValidationError, category_draft_to_wire, task_draft_to_wire
from core.status import normalize_task_status

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_task_from_wire_payload():
    task = Task.from_dict(
        {
            "_id": "t1",
            "title": "  Report ",
            "status": "in-progress",
            "priority": "high",
            "category": {"_id": "c1", "name": "Work", "color": "#3498db"},
            "dueDate": "2026-10-20T09:00:00.000Z",
            "attachments": [{"_id": "a1", "originalName": "scan.pdf", "filename": "169-scan.pdf", "size": 1536}],
            "googleCalendarEventId": "evt-1",
            "createdAt": "2026-10-01T00:00:00Z",
        }
    )

    assert task.id == "t1"
    assert task.title == "Report"
    assert task.category == Category("c1", "Work", "#3498db")
    assert task.category_id == "c1"
    assert task.due_date == datetime(2026, 10, 20, 9, 0, tzinfo=timezone.utc)
    assert task.attachments[0].size_kb == 1.5
    assert task.has_calendar_event
    assert task.to_dict()["due_date"] == "2026-10-20T09:00:00Z"


def test_category_id_only_reference():
    task = Task.from_dict({"_id": "t1", "title": "x", "category": "c9"})
    assert task.category_id == "c9"
    assert task.category.name == ""


def test_calendar_event_dropped_without_due_date():
    task = Task.from_dict({"_id": "t1", "title": "x", "googleCalendarEventId": "evt"})
    assert task.external_calendar_event_id is None
    with pytest.raises(ValidationError):
        task.with_calendar_event("evt")


def test_with_calendar_event_changes_only_event_id():
    task = Task("t1", "x", due_date=NOW, description="keep")
    linked = task.with_calendar_event("evt")
    assert linked.external_calendar_event_id == "evt"
    assert linked.description == "keep"
    assert linked.with_calendar_event(None).external_calendar_event_id is None


def test_invalid_status_or_priority_rejected():
    with pytest.raises(ValidationError):
        Task("t1", "x", status="blocked")
    with pytest.raises(ValidationError):
        Task.from_dict({"_id": "t1", "title": "x", "priority": "urgent"})
    with pytest.raises(ValidationError):
        Task.from_dict({"_id": "t1", "title": "x", "dueDate": "next week"})


def test_status_aliases():
    assert normalize_task_status("Done") == "completed"
    assert normalize_task_status("in progress") == "in-progress"
    assert Status.from_string("todo") is Status.PENDING


def test_overdue_and_due_today():
    yesterday = Task("t1", "x", due_date=datetime(2026, 10, 18, tzinfo=timezone.utc))
    today = Task("t2", "x", due_date=datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc))
    done = Task("t3", "x", status="completed", due_date=datetime(2026, 10, 1, tzinfo=timezone.utc))

    assert yesterday.is_overdue(NOW) and not yesterday.is_due_today(NOW)
    assert today.is_due_today(NOW) and not today.is_overdue(NOW)
    assert not done.is_overdue(NOW)
    assert not Task("t4", "x").is_overdue(NOW)


def test_task_draft_to_wire():
    body = task_draft_to_wire(
        {
            "title": "Doc",
            "status": "todo",
            "priority": "HIGH",
            "category_id": "c1",
            "due_date": datetime(2026, 10, 20, tzinfo=timezone.utc),
            "add_to_calendar": True,
        }
    )
    assert body == {
        "title": "Doc",
        "status": "pending",
        "priority": "high",
        "categoryId": "c1",
        "dueDate": "2026-10-20T00:00:00Z",
        "addToCalendar": True,
    }
    with pytest.raises(ValidationError):
        task_draft_to_wire({"owner": "me"})


def test_category_draft_to_wire():
    assert category_draft_to_wire({"name": "Home", "color": "#fff"}) == {"name": "Home", "color": "#fff"}
    with pytest.raises(ValidationError):
        category_draft_to_wire({"user": "u1"})


@pytest.mark.parametrize("payload", ["c1", ["c1"], None])
def test_non_object_payloads_are_validation_errors(payload):
    from core import Attachment, User

    for model in (Category, User, Attachment, Task):
        with pytest.raises(ValidationError):
            model.from_dict(payload)


def test_bad_attachment_size_is_validation_error():
    with pytest.raises(ValidationError):
        Task.from_dict({"_id": "t1", "title": "x", "attachments": [{"_id": "a1", "size": "big"}]})
