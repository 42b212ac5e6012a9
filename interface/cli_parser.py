"""CLI parser construction for the taskdeck client."""

import argparse
from typing import Any

STATUS_CHOICES = ["pending", "in-progress", "completed"]
PRIORITY_CHOICES = ["low", "medium", "high"]
TAB_CHOICES = ["all", "in-progress", "completed", "pending"]


def build_parser(commands: Any) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskdeck",
        description="taskdeck: task manager client for the remote task API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--api-url", help="base URL of the task API (overrides config/env)")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging to stderr")

    def add_task_fields(sp, *, creating: bool):
        sp.add_argument("--description", "-d")
        sp.add_argument("--status", choices=STATUS_CHOICES, default="pending" if creating else None)
        sp.add_argument("--priority", choices=PRIORITY_CHOICES, default="medium" if creating else None)
        sp.add_argument("--category", dest="category_id", help="category id")
        sp.add_argument("--due", help="due date (ISO-8601, e.g. 2026-10-20)")
        sp.add_argument("--calendar", action="store_true", help="also add to the external calendar")
        sp.add_argument("--attach", nargs="+", default=[], metavar="FILE", help="images (jpg/png/gif) or PDF, max 10 MB")
        return sp

    sub = parser.add_subparsers(dest="command", help="Commands")

    # session
    lp = sub.add_parser("login", help="Sign in with email and password")
    lp.add_argument("--email", required=True)
    lp.add_argument("--password", required=True)
    lp.set_defaults(func=commands.cmd_login)

    rp = sub.add_parser("register", help="Create an account")
    rp.add_argument("--name", required=True)
    rp.add_argument("--email", required=True)
    rp.add_argument("--password", required=True)
    rp.set_defaults(func=commands.cmd_register)

    gp = sub.add_parser("google-login", help="Sign in with an external identity token")
    gp.add_argument("id_token")
    gp.set_defaults(func=commands.cmd_google_login)

    sub.add_parser("logout", help="Forget the stored credential").set_defaults(func=commands.cmd_logout)
    sub.add_parser("whoami", help="Show the signed-in user").set_defaults(func=commands.cmd_whoami)

    pp = sub.add_parser("profile", help="Update profile fields")
    pp.add_argument("--name")
    pp.add_argument("--email")
    pp.set_defaults(func=commands.cmd_profile)

    pwp = sub.add_parser("password", help="Change password")
    pwp.add_argument("--current", required=True)
    pwp.add_argument("--new", required=True)
    pwp.set_defaults(func=commands.cmd_password)

    # tasks
    ls = sub.add_parser("list", help="List tasks")
    ls.add_argument("--tab", choices=TAB_CHOICES, default="all")
    ls.add_argument("--status", choices=STATUS_CHOICES)
    ls.add_argument("--category", help="category id")
    ls.add_argument("--priority", choices=PRIORITY_CHOICES)
    ls.add_argument("--search", default="", help="case-insensitive text in title or description")
    ls.add_argument("--table", action="store_true", help="plain-text table instead of JSON")
    ls.add_argument("--width", type=int, default=100, help="table width")
    ls.set_defaults(func=commands.cmd_list)

    sp = sub.add_parser("show", help="Show a task (always fetched fresh)")
    sp.add_argument("task_id")
    sp.set_defaults(func=commands.cmd_show)

    cp = sub.add_parser("create", help="Create a task")
    cp.add_argument("title")
    add_task_fields(cp, creating=True)
    cp.set_defaults(func=commands.cmd_create)

    up = sub.add_parser("update", help="Update a task")
    up.add_argument("task_id")
    up.add_argument("--title")
    add_task_fields(up, creating=False)
    up.set_defaults(func=commands.cmd_update)

    dp = sub.add_parser("delete", help="Delete a task")
    dp.add_argument("task_id")
    dp.set_defaults(func=commands.cmd_delete)

    ap = sub.add_parser("detach", help="Remove an attachment from a task")
    ap.add_argument("task_id")
    ap.add_argument("attachment_id")
    ap.set_defaults(func=commands.cmd_detach)

    calp = sub.add_parser("calendar", help="Mirror a task into the external calendar")
    calp.add_argument("action", choices=["add", "remove"])
    calp.add_argument("task_id")
    calp.set_defaults(func=commands.cmd_calendar)

    # categories
    catp = sub.add_parser("categories", help="Manage categories")
    cat_sub = catp.add_subparsers(dest="category_command")
    cat_sub.add_parser("list", help="List categories").set_defaults(func=commands.cmd_category_list)
    ccp = cat_sub.add_parser("create", help="Create a category")
    ccp.add_argument("name")
    ccp.add_argument("--color", default="#3498db")
    ccp.set_defaults(func=commands.cmd_category_create)
    cup = cat_sub.add_parser("update", help="Update a category")
    cup.add_argument("category_id")
    cup.add_argument("--name")
    cup.add_argument("--color")
    cup.set_defaults(func=commands.cmd_category_update)
    cdp = cat_sub.add_parser("delete", help="Delete a category")
    cdp.add_argument("category_id")
    cdp.set_defaults(func=commands.cmd_category_delete)

    return parser
