"""Command line entrypoint for devman."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from typing import NoReturn

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Confirm
from rich.text import Text

from devman import deps
from devman.config import Settings
from devman.core.project_manager import CreateProjectInput
from devman.core.runtime_manager import RuntimeManager
from devman.errors import DevmanError
from devman.models.project import ProjectRecord, ProjectType

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)

HELP_COMMANDS = frozenset({"help", "--help", "-h"})
ROW_FORMAT = "{:<20} {:<10} {:<10} {:<6} {}"
PORT_LABELS = {"postgres": "PostgreSQL port"}
TYPE_LABELS = {ProjectType.FRAPPE: "Frappe", ProjectType.PYTHON: "Python"}

EPILOG = """\
Examples:
    devman create my-erp frappe
    devman create my-api python
    devman start my-erp
    devman shell my-api
    devman list
    devman stop my-erp
    devman remove my-api

Project Types:
    frappe    - Full Frappe/ERPNext setup with MariaDB, Redis
    python    - Python FastAPI setup with PostgreSQL
"""

type Handler = Callable[[argparse.Namespace, Settings], int]


class UsageError(Exception):
    """Raised by the argument parser instead of exiting."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def _info(message: str) -> None:
    console.print(Text.assemble(("[INFO]", "bold blue"), " ", message))


def _success(message: str) -> None:
    console.print(Text.assemble(("[SUCCESS]", "bold green"), " ", message))


def _warning(message: str) -> None:
    console.print(Text.assemble(("[WARNING]", "bold yellow"), " ", message))


def _error(message: str) -> None:
    err_console.print(Text.assemble(("[ERROR]", "bold red"), " ", message))


def configure_logging(level: str) -> None:
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


def _cmd_create(args: argparse.Namespace, settings: Settings) -> int:
    project_type = ProjectType.parse(args.project_type)
    label = TYPE_LABELS[project_type]
    _info(f"Creating {label} project: {args.name}")

    created = deps.get_project_manager(settings).create(
        CreateProjectInput(name=args.name, project_type=project_type)
    )
    record = created.record
    _success(f"Created {label} project {record.name} at {record.directory}")
    _info(f"Main app port: {record.port}")
    for role, port in created.extra_ports.items():
        _info(f"{PORT_LABELS.get(role, f'{role} port')}: {port}")
    _info(f"Use 'devman start {record.name}' to start development")
    return 0


def _report_access(record: ProjectRecord, runtime: RuntimeManager) -> None:
    _info(f"Access at: http://localhost:{record.port}")
    for note in runtime.driver_for(record).access_notes(record):
        _info(note)


def _cmd_start(args: argparse.Namespace, settings: Settings) -> int:
    runtime = deps.get_runtime_manager(settings)
    record = runtime.start(args.name)
    _success(f"Project {record.name} started")
    _report_access(record, runtime)
    return 0


def _cmd_stop(args: argparse.Namespace, settings: Settings) -> int:
    record = deps.get_runtime_manager(settings).stop(args.name)
    _success(f"Project {record.name} stopped")
    return 0


def _cmd_restart(args: argparse.Namespace, settings: Settings) -> int:
    runtime = deps.get_runtime_manager(settings)
    record = runtime.restart(args.name)
    _success(f"Project {record.name} restarted")
    _report_access(record, runtime)
    return 0


def _cmd_shell(args: argparse.Namespace, settings: Settings) -> int:
    _info(f"Opening shell in {args.name}")
    return deps.get_runtime_manager(settings).shell(args.name)


def _cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    del args
    records = deps.get_project_manager(settings).list()
    _info("Development Projects:")
    console.print()
    if not records:
        _warning("No projects found")
        return 0

    console.print(ROW_FORMAT.format("NAME", "TYPE", "STATUS", "PORT", "DIRECTORY"), markup=False)
    console.print(ROW_FORMAT.format("----", "----", "------", "----", "---------"), markup=False)
    for record in records:
        row = ROW_FORMAT.format(
            record.name,
            record.type.value,
            record.status.value,
            record.port,
            record.directory,
        )
        console.print(row, markup=False)
    return 0


def _confirm_removal(record: ProjectRecord) -> bool:
    try:
        return Confirm.ask(
            f"Remove project {record.name} and all its data?",
            default=False,
            console=console,
        )
    except EOFError:
        return False


def _cmd_remove(args: argparse.Namespace, settings: Settings) -> int:
    confirm = (lambda record: True) if args.yes else _confirm_removal
    removed = deps.get_runtime_manager(settings).remove(args.name, confirm)
    if not removed:
        _info("Operation cancelled")
        return 0
    _success(f"Project {args.name} removed")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="devman",
        description="Docker Container Manager for Development Projects",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every external command",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")

    create = subparsers.add_parser("create", help="Create new project (types: frappe, python)")
    create.add_argument("name", help="Project name")
    create.add_argument("project_type", metavar="type", help="Project type: frappe or python")
    create.set_defaults(handler=_cmd_create)

    simple: tuple[tuple[str, str, Handler], ...] = (
        ("start", "Start project containers", _cmd_start),
        ("stop", "Stop project containers", _cmd_stop),
        ("restart", "Restart project containers", _cmd_restart),
        ("shell", "Open shell in project container", _cmd_shell),
    )
    for command, help_text, handler in simple:
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("name", help="Project name")
        sub.set_defaults(handler=handler)

    listing = subparsers.add_parser("list", aliases=["ls"], help="List all projects")
    listing.set_defaults(handler=_cmd_list)

    remove = subparsers.add_parser("remove", aliases=["rm"], help="Remove project and all data")
    remove.add_argument("name", help="Project name")
    remove.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")
    remove.set_defaults(handler=_cmd_remove)

    subparsers.add_parser("help", help="Show this help message")
    return parser


def main(argv: list[str] | None = None) -> int:
    arguments = sys.argv[1:] if argv is None else list(argv)
    parser = _build_parser()

    if not arguments or arguments[0] in HELP_COMMANDS:
        console.print(parser.format_help(), markup=False, end="")
        return 0

    try:
        args = parser.parse_args(arguments)
    except UsageError as exc:
        _error(str(exc))
        _info("Use 'devman help' for usage information")
        return 1

    handler: Handler | None = getattr(args, "handler", None)
    if handler is None:
        console.print(parser.format_help(), markup=False, end="")
        return 0

    try:
        settings = deps.get_settings()
    except ValidationError as exc:
        _error(f"Invalid configuration: {exc}")
        return 1
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        return handler(args, settings)
    except DevmanError as exc:
        _error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
