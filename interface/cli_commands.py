from typing import Any, Dict

from application.attachment_pipeline import AttachmentPipeline
from application.client import TaskdeckClient
from application.view_filter import FilterCriteria, filter_tasks
from core.errors import AuthError, ValidationError
from core.wire import parse_timestamp
from interface.cli_io import structured_error, structured_response
from util.task_table import render_task_table


def _require_session(client: TaskdeckClient) -> None:
    if not client.session.authenticated:
        raise AuthError("Not signed in; run `taskdeck login` first")


def _task_fields(args, *, creating: bool) -> Dict[str, Any]:
    draft: Dict[str, Any] = {}
    if creating or getattr(args, "title", None):
        draft["title"] = args.title
    for key in ("description", "status", "priority", "category_id"):
        value = getattr(args, key, None)
        if value is not None:
            draft[key] = value
    if getattr(args, "due", None):
        try:
            draft["due_date"] = parse_timestamp(args.due)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
    if getattr(args, "calendar", False):
        draft["add_to_calendar"] = True
    return draft


# ---- session ---------------------------------------------------------------


def cmd_login(args, client: TaskdeckClient) -> int:
    user = client.session.login({"email": args.email, "password": args.password})
    return structured_response("login", message="Signed in", payload={"user": user.to_dict()})


def cmd_register(args, client: TaskdeckClient) -> int:
    user = client.session.register({"name": args.name, "email": args.email, "password": args.password})
    return structured_response("register", message="Account created", payload={"user": user.to_dict()})


def cmd_google_login(args, client: TaskdeckClient) -> int:
    user = client.session.login_with_external_identity(args.id_token)
    return structured_response("google-login", message="Signed in", payload={"user": user.to_dict()})


def cmd_logout(args, client: TaskdeckClient) -> int:
    client.session.logout()
    return structured_response("logout", message="Signed out")


def cmd_whoami(args, client: TaskdeckClient) -> int:
    if not client.session.authenticated or client.session.user is None:
        return structured_error("whoami", "Not signed in")
    return structured_response("whoami", payload={"user": client.session.user.to_dict()})


def cmd_profile(args, client: TaskdeckClient) -> int:
    _require_session(client)
    fields = {k: v for k, v in {"name": args.name, "email": args.email}.items() if v}
    if not fields:
        return structured_error("profile", "Nothing to update: pass --name and/or --email")
    user = client.session.update_profile(fields)
    return structured_response("profile", message="Profile updated", payload={"user": user.to_dict()})


def cmd_password(args, client: TaskdeckClient) -> int:
    _require_session(client)
    client.session.change_password(args.current, args.new)
    return structured_response("password", message="Password changed")


# ---- tasks -----------------------------------------------------------------


def cmd_list(args, client: TaskdeckClient) -> int:
    _require_session(client)
    criteria = FilterCriteria(
        tab=args.tab,
        status=args.status,
        category=args.category,
        priority=args.priority,
        search_text=args.search,
    )
    tasks = filter_tasks(client.cache.tasks, criteria)
    if args.table:
        for line in render_task_table(tasks, term_width=args.width):
            print(line)
        return 0
    return structured_response(
        "list",
        payload={"tasks": [t.to_dict() for t in tasks], "total": len(client.cache.tasks)},
        summary=f"{len(tasks)} task(s)",
    )


def cmd_show(args, client: TaskdeckClient) -> int:
    _require_session(client)
    task = client.cache.get_by_id(args.task_id)
    payload = task.to_dict()
    payload["overdue"] = task.is_overdue()
    payload["due_today"] = task.is_due_today()
    return structured_response("show", payload={"task": payload})


def _submit_task(args, client: TaskdeckClient, *, creating: bool) -> int:
    command = "create" if creating else "update"
    draft = _task_fields(args, creating=creating)
    with AttachmentPipeline() as pipeline:
        staged = pipeline.stage(args.attach or [])
        if args.attach and not staged:
            return structured_error(command, "No attachment was accepted", payload={"rejected": [r.message for r in pipeline.rejections]})
        if creating:
            task = client.cache.create(draft, staged)
        else:
            task = client.cache.update(args.task_id, draft, staged)
        rejected = [r.message for r in pipeline.rejections]
    payload: Dict[str, Any] = {"task": task.to_dict()}
    if rejected:
        payload["rejected"] = rejected
    return structured_response(command, message=f"Task {task.id} saved", payload=payload)


def cmd_create(args, client: TaskdeckClient) -> int:
    _require_session(client)
    return _submit_task(args, client, creating=True)


def cmd_update(args, client: TaskdeckClient) -> int:
    _require_session(client)
    return _submit_task(args, client, creating=False)


def cmd_delete(args, client: TaskdeckClient) -> int:
    _require_session(client)
    client.cache.remove(args.task_id)
    return structured_response("delete", message=f"Task {args.task_id} deleted")


def cmd_detach(args, client: TaskdeckClient) -> int:
    _require_session(client)
    task = client.cache.remove_attachment(args.task_id, args.attachment_id)
    return structured_response("detach", message="Attachment removed", payload={"task": task.to_dict()})


def cmd_calendar(args, client: TaskdeckClient) -> int:
    _require_session(client)
    if args.action == "add":
        event_id = client.cache.add_to_calendar(args.task_id)
        return structured_response("calendar", message="Task added to calendar", payload={"event_id": event_id})
    client.cache.remove_from_calendar(args.task_id)
    return structured_response("calendar", message="Task removed from calendar")


# ---- categories ------------------------------------------------------------


def cmd_category_list(args, client: TaskdeckClient) -> int:
    _require_session(client)
    return structured_response("categories.list", payload={"categories": [c.to_dict() for c in client.cache.categories]})


def cmd_category_create(args, client: TaskdeckClient) -> int:
    _require_session(client)
    category = client.cache.create_category({"name": args.name, "color": args.color})
    return structured_response("categories.create", payload={"category": category.to_dict()})


def cmd_category_update(args, client: TaskdeckClient) -> int:
    _require_session(client)
    patch = {k: v for k, v in {"name": args.name, "color": args.color}.items() if v}
    if not patch:
        return structured_error("categories.update", "Nothing to update: pass --name and/or --color")
    category = client.cache.update_category(args.category_id, patch)
    return structured_response("categories.update", payload={"category": category.to_dict()})


def cmd_category_delete(args, client: TaskdeckClient) -> int:
    _require_session(client)
    client.cache.remove_category(args.category_id)
    return structured_response("categories.delete", message=f"Category {args.category_id} deleted")
