from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from rich.console import Console
from rich.table import Table

from .clock import Clock, FixedClock, SystemClock, is_date_key
from .config import get_default_priority, get_log_level, get_storage_path, load_config, resolve_data_dir
from .constants import DEFAULT_THEME, THEME_KEY, THEMES
from .io_utils import JsonSlotFile
from .task_engine.errors import CorruptStateError, TaskValidationError
from .task_engine.model import Task, TaskPriority
from .task_engine.persistence import JsonFileGateway
from .task_engine.projection import Projection, ViewMode, ViewProjector, is_overdue
from .task_engine.store import TaskStore

PRIORITY_CHOICES = [p.value for p in TaskPriority]
PRIORITY_STYLES = {"high": "bold red", "medium": "yellow", "low": "green"}


def _configure_logging(level: str = "INFO") -> None:
    """Configure loguru logger with the specified level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan>\n"
            "{message}"
        ),
    )


@dataclass
class _Context:
    store: TaskStore
    clock: Clock
    storage_path: Path
    config: dict[str, Any]


def _ctx(args: argparse.Namespace) -> _Context:
    data_dir = resolve_data_dir(args.data_dir)
    config, err = load_config(data_dir)
    if err:
        logger.warning("Ignoring unreadable config: {}", err)
    _configure_logging(args.log_level or get_log_level(config))
    clock: Clock = FixedClock(args.today) if args.today else SystemClock()
    storage_path = get_storage_path(config, data_dir)
    store = TaskStore(JsonFileGateway(storage_path), clock)
    return _Context(store=store, clock=clock, storage_path=storage_path, config=config)


def _date_arg(value: str) -> str:
    if not is_date_key(value):
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")
    return value


def _emit_task(task: Task) -> None:
    sys.stdout.write(json.dumps({"task": task.to_dict()}, indent=2) + "\n")


def _not_found(task_id: str) -> int:
    sys.stderr.write(f"Error: task {task_id} not found\n")
    return 1


def _short_date(value: str) -> str:
    day = date.fromisoformat(value)
    return f"{day:%b} {day.day}"


# ---------------------------------------------------------------------------
# Task commands
# ---------------------------------------------------------------------------

def _task_add(args: argparse.Namespace) -> int:
    ctx = _ctx(args)
    text = args.text.strip()
    if not text:
        sys.stderr.write("Error: task text must not be empty\n")
        return 1
    # New deadlines cannot be in the past; edits may keep or set any date.
    if args.due and args.due < ctx.clock.today():
        sys.stderr.write(f"Error: due date {args.due} is before today ({ctx.clock.today()})\n")
        return 1
    priority = args.priority or get_default_priority(ctx.config)
    _emit_task(ctx.store.create(text, priority, args.due))
    return 0


def _task_edit(args: argparse.Namespace) -> int:
    ctx = _ctx(args)
    current = ctx.store.get(args.task_id)
    if current is None:
        return _not_found(args.task_id)
    text = args.text if args.text is not None else current.text
    priority = args.priority or current.priority
    if args.clear_due:
        due = None
    else:
        due = args.due if args.due is not None else current.due_date
    updated = ctx.store.edit(args.task_id, text, priority, due)
    if updated is None:
        return _not_found(args.task_id)
    _emit_task(updated)
    return 0


def _task_delete(args: argparse.Namespace) -> int:
    ctx = _ctx(args)
    if not ctx.store.delete(args.task_id):
        return _not_found(args.task_id)
    sys.stdout.write(json.dumps({"deleted": True, "id": args.task_id}) + "\n")
    return 0


def _task_toggle(args: argparse.Namespace) -> int:
    ctx = _ctx(args)
    task = ctx.store.toggle_completion(args.task_id)
    if task is None:
        return _not_found(args.task_id)
    _emit_task(task)
    return 0


def _task_move(args: argparse.Namespace) -> int:
    ctx = _ctx(args)
    if args.before is not None:
        reference, place = args.before, "before"
    else:
        reference, place = args.after, "after"
    if not ctx.store.reorder(args.task_id, reference, place):
        missing = args.task_id if ctx.store.get(args.task_id) is None else reference
        return _not_found(missing)
    sys.stdout.write(json.dumps({"moved": args.task_id, place: reference}) + "\n")
    return 0


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

def _render_projection(projection: Projection, mode: ViewMode, today: str) -> None:
    console = Console()
    archive = mode is ViewMode.ARCHIVE
    table = Table(title="Archive" if archive else "Active Missions")
    table.add_column("#", justify="right")
    table.add_column("ID", style="cyan")
    table.add_column("Mission")
    table.add_column("Priority")
    table.add_column("Completed" if archive else "Due")

    for pos, task in enumerate(projection.items, start=1):
        priority = task.priority.value
        if archive:
            when = _short_date(task.completed_date) if task.completed_date else ""
            row_style = "dim"
        else:
            when = _short_date(task.due_date) if task.due_date else "No Deadline"
            row_style = "red" if is_overdue(task, today) else None
        table.add_row(
            str(pos),
            task.id,
            task.text,
            f"[{PRIORITY_STYLES.get(priority, '')}]{priority.upper()}[/]",
            when,
            style=row_style,
        )

    if projection.items:
        console.print(table)
    else:
        console.print("[dim]No archived missions.[/dim]" if archive else "[dim]No active missions.[/dim]")
    console.print(f"{projection.completion_percentage}% Completed (Overall)")
    if not archive and projection.overdue_count:
        console.print(f"[bold red]{projection.overdue_count} overdue mission(s)[/bold red]")


def _task_list(args: argparse.Namespace) -> int:
    ctx = _ctx(args)
    mode = ViewMode(args.view)
    today = ctx.clock.today()
    projection = ViewProjector.project(ctx.store.all(), mode, today)
    if args.format == "json":
        payload = {"view": mode.value, "today": today, **projection.to_dict()}
        sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    else:
        _render_projection(projection, mode, today)
    return 0


def _theme(args: argparse.Namespace) -> int:
    data_dir = resolve_data_dir(args.data_dir)
    config, _ = load_config(data_dir)
    slot = JsonSlotFile(get_storage_path(config, data_dir))
    if args.value:
        try:
            slot.read()
        except CorruptStateError as exc:
            logger.warning("Storage unreadable ({}); kept a copy at {}", exc, slot.quarantine())
        slot.put(THEME_KEY, args.value)
        theme = args.value
    else:
        try:
            theme = slot.get(THEME_KEY, DEFAULT_THEME)
        except CorruptStateError as exc:
            logger.warning("Cannot read theme ({}); using default", exc)
            theme = DEFAULT_THEME
        if theme not in THEMES:
            theme = DEFAULT_THEME
    sys.stdout.write(json.dumps({"theme": theme}) + "\n")
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mission Board - personal task tracker")
    parser.add_argument("--data-dir", default=None, help="Board data directory (default: $MISSION_BOARD_HOME or ~/.mission_board)")
    parser.add_argument("--today", type=_date_arg, default=None, help="Treat this YYYY-MM-DD date as today")
    parser.add_argument("--log-level", default=None, help="Log level (default: from config, else INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Add a mission")
    add.add_argument("text")
    add.add_argument("--priority", choices=PRIORITY_CHOICES, default=None)
    add.add_argument("--due", type=_date_arg, default=None, help="Deadline (YYYY-MM-DD)")
    add.set_defaults(func=_task_add)

    edit = subparsers.add_parser("edit", help="Edit a mission")
    edit.add_argument("task_id")
    edit.add_argument("--text", default=None)
    edit.add_argument("--priority", choices=PRIORITY_CHOICES, default=None)
    due_group = edit.add_mutually_exclusive_group()
    due_group.add_argument("--due", type=_date_arg, default=None)
    due_group.add_argument("--clear-due", action="store_true")
    edit.set_defaults(func=_task_edit)

    delete = subparsers.add_parser("delete", help="Delete a mission permanently")
    delete.add_argument("task_id")
    delete.set_defaults(func=_task_delete)

    toggle = subparsers.add_parser("toggle", help="Mark a mission done, or reopen it")
    toggle.add_argument("task_id")
    toggle.set_defaults(func=_task_toggle)

    move = subparsers.add_parser("move", help="Reorder an active mission")
    move.add_argument("task_id")
    target = move.add_mutually_exclusive_group(required=True)
    target.add_argument("--before", default=None, metavar="REF_ID")
    target.add_argument("--after", default=None, metavar="REF_ID")
    move.set_defaults(func=_task_move)

    tlist = subparsers.add_parser("list", help="Show the active missions or the archive")
    tlist.add_argument("--view", choices=[m.value for m in ViewMode], default=ViewMode.ACTIVE.value)
    tlist.add_argument("--format", choices=["text", "json"], default="text")
    tlist.set_defaults(func=_task_list)

    theme = subparsers.add_parser("theme", help="Show or set the display theme")
    theme.add_argument("value", nargs="?", choices=list(THEMES), default=None)
    theme.set_defaults(func=_theme)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return int(handler(args) or 0)
    except TaskValidationError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
