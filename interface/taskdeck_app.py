#!/usr/bin/env python3
"""
taskdeck: command-line client for the remote task API.

Every invocation re-establishes the stored session (verifying the token),
runs one command against the cached collections and tears the client down.
"""

import logging
import sys
from typing import List, Optional

from application.client import TaskdeckClient
from core.errors import RemoteError
from interface import cli_commands
from interface.cli_io import error_response, structured_error
from interface.cli_parser import build_parser


def main(argv: Optional[List[str]] = None, client: Optional[TaskdeckClient] = None) -> int:
    parser = build_parser(cli_commands)
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    command = args.command if args.command != "categories" else f"categories.{args.category_command}"
    owned = client is None
    client = client or TaskdeckClient(args.api_url)
    try:
        client.start()
        return args.func(args, client)
    except RemoteError as exc:
        component_error = client.cache.error or client.session.error
        return error_response(command, exc, component_error)
    except OSError as exc:
        return structured_error(command, f"File error: {exc}")
    finally:
        if owned:
            client.close()


if __name__ == "__main__":
    sys.exit(main())
