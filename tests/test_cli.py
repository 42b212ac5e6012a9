import json
from datetime import datetime, timezone

from conftest import DummyResponse, task_json
from core.category import Category
from core.task import Task
from interface.taskdeck_app import main
from util.task_table import display_width, pad_display, render_task_table


def _run(capsys, argv, client):
    code = main(argv, client=client)
    out = capsys.readouterr().out
    return code, out


def test_list_outputs_filtered_json(capsys, signed_in):
    code, out = _run(capsys, ["list", "--search", "report"], signed_in)
    body = json.loads(out)
    assert code == 0
    assert body["command"] == "list"
    assert [t["id"] for t in body["payload"]["tasks"]] == ["t1"]
    assert body["payload"]["total"] == 2


def test_list_table(capsys, signed_in):
    code, out = _run(capsys, ["list", "--tab", "completed", "--table", "--width", "60"], signed_in)
    lines = out.splitlines()
    assert code == 0
    assert len(lines) == 1
    assert "Buy milk" in lines[0]


def test_commands_require_session(capsys, client):
    code, out = _run(capsys, ["list"], client)
    body = json.loads(out)
    assert code == 1
    assert body["status"] == "UNAUTHORIZED"
    assert "login" in body["message"]


def test_whoami(capsys, signed_in):
    code, out = _run(capsys, ["whoami"], signed_in)
    assert code == 0
    assert json.loads(out)["payload"]["user"]["email"] == "ada@example.com"


def test_create_with_attachment(capsys, signed_in, http, tmp_path):
    scan = tmp_path / "scan.pdf"
    scan.write_bytes(b"%PDF")
    http.route("POST", "/tasks", DummyResponse(201, task_json("t3", "Scan", priority="high")))

    code, out = _run(capsys, ["create", "Scan", "--priority", "high", "--attach", str(scan)], signed_in)

    assert code == 0
    call = http.calls[-1]
    assert call["data"]["title"] == "Scan"
    assert call["files"] == [("attachments", ("scan.pdf", b"%PDF", "application/pdf"))]
    assert "t3" in [t.id for t in signed_in.cache.tasks]
    assert json.loads(out)["payload"]["task"]["id"] == "t3"


def test_server_error_is_reported(capsys, signed_in, http):
    http.route("DELETE", "/tasks/t1", DummyResponse(500, {"message": "boom"}))
    code, out = _run(capsys, ["delete", "t1"], signed_in)
    body = json.loads(out)
    assert code == 1
    assert body["status"] == "ERROR"
    assert body["message"] == "boom"
    assert body["payload"] == {"http_status": 500, "error": "Failed to delete task", "detail": "boom"}


def test_render_task_table_marks():
    now = datetime(2026, 10, 19, tzinfo=timezone.utc)
    tasks = [
        Task("t1", "Late", due_date=datetime(2026, 10, 1, tzinfo=timezone.utc), external_calendar_event_id="e"),
        Task("t2", "Later", category=Category("c1", "Work")),
    ]
    lines = render_task_table(tasks, term_width=100, now=now)
    assert "Late !@" in lines[0]
    assert "Work" in lines[1]
    assert len({display_width(line) for line in lines}) == 1


def test_pad_display_handles_wide_characters():
    assert display_width("任务") == 4
    assert pad_display("任务清单", 5) == "任务 "


def test_error_response_maps_error_types(capsys):
    from core.errors import NetworkError, NotFoundError, ValidationError
    from interface.cli_io import error_response

    assert error_response("show", NotFoundError("Task not found", 404, "Task not found"), "Failed to load task details") == 1
    body = json.loads(capsys.readouterr().out)
    assert body["status"] == "NOT_FOUND"
    assert body["payload"] == {"http_status": 404, "error": "Failed to load task details", "detail": "Task not found"}
    assert body["timestamp"].endswith("Z")

    error_response("login", ValidationError("Invalid credentials", 400, "Invalid credentials"), "Invalid credentials")
    body = json.loads(capsys.readouterr().out)
    assert body["status"] == "INVALID"
    assert body["payload"] == {"http_status": 400, "error": "Invalid credentials"}

    error_response("list", NetworkError("Network error: refused"))
    body = json.loads(capsys.readouterr().out)
    assert body["status"] == "UNREACHABLE"
    assert body["payload"] == {"http_status": None, "error": None}


def test_login_as_other_user_lists_their_tasks(capsys, signed_in, http):
    http.route("POST", "/auth/login", DummyResponse(200, {"token": "tok-2", "user": {"_id": "u2", "name": "Bo", "email": "bo@example.com"}}))
    http.route("GET", "/tasks", DummyResponse(200, [task_json("b1", "Bo's task")]))

    code, _ = _run(capsys, ["login", "--email", "bo@example.com", "--password", "pw"], signed_in)
    assert code == 0

    code, out = _run(capsys, ["list"], signed_in)
    assert [t["id"] for t in json.loads(out)["payload"]["tasks"]] == ["b1"]
