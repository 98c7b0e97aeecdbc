# src/tasklist/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from datetime import date

from ..core.state import AppState
from ..tasks.task_api import create_task, edit_task, export_tasks_csv
from ..tasks.task_export import classify_due, format_date
from ..tasks.task_models import (
    DueBucket,
    InvalidSortError,
    STATUS_ALL,
    NothingToExportError,
    Task,
    TaskStats,
    TaskStatus,
    TaskValidationError,
)

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8
DUE_MARKERS = {
    DueBucket.NONE: "",
    DueBucket.OVERDUE: " (overdue)",
    DueBucket.TODAY: " (today)",
    DueBucket.FUTURE: "",
}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except (TaskValidationError, InvalidSortError) as e:
            return str(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----

def _split_options(args: list[str], allowed: set[str]) -> tuple[list[str], dict[str, str]]:
    """Separate key=value options from positional words."""
    words: list[str] = []
    opts: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key.lower() in allowed:
            opts[key.lower()] = value
        else:
            words.append(arg)
    return words, opts


def _resolve_task(state: AppState, ref: str) -> Task | None:
    """Exact id, or an unambiguous id prefix as shown by /list."""
    task = state.engine.get_task_by_id(ref)
    if task is not None:
        return task
    matches = [t for t in state.engine.get_all_tasks() if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def render_task_line(task: Task, today: date) -> str:
    due = ""
    if task.due:
        due = task.due.isoformat() + DUE_MARKERS[classify_due(task.due, today)]
    tags = f" [{', '.join(task.tags)}]" if task.tags else ""
    return (
        f"{task.id[:SHORT_ID_LEN]}  {task.status.value:<5}  {due:<20}  "
        f"{task.title}{tags}  (created {format_date(task.created_at)})"
    )


def render_stats(stats: TaskStats) -> str:
    return f"todo: {stats.todo} / doing: {stats.doing} / done: {stats.done}"


# ---- handlers ----

def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title...> [due=YYYY-MM-DD] [tags=a,b]
    """
    words, opts = _split_options(args, {"due", "tags"})
    task = create_task(state.engine, " ".join(words), opts.get("due"), opts.get("tags"))
    return f"Task added: {task.id[:SHORT_ID_LEN]} {task.title}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> [title=...] [due=YYYY-MM-DD|] [tags=a,b] [status=todo|doing|done]
    """
    words, opts = _split_options(args, {"title", "due", "tags", "status"})
    if len(words) != 1 or not opts:
        return "Usage: /edit <id> [title=...] [due=YYYY-MM-DD] [tags=a,b] [status=todo|doing|done]"
    task = _resolve_task(state, words[0])
    if task is None:
        return f"No task matches id {words[0]}."
    updated = edit_task(state.engine, task.id, **opts)
    return f"Task updated: {task.id[:SHORT_ID_LEN]} {updated.title if updated else task.title}"


def cmd_rm(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /rm <id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches id {args[0]}."
    state.engine.delete_task(task.id)
    return f"Task deleted: {task.title}"


def cmd_toggle(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /toggle <id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches id {args[0]}."
    toggled = state.engine.toggle_status(task.id)
    return f"{task.title}: {toggled.status.value if toggled else task.status.value}"


def cmd_show(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /show <id>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task matches id {args[0]}."
    return "\n".join(
        [
            f"id:      {task.id}",
            f"title:   {task.title}",
            f"status:  {task.status.value}",
            f"due:     {task.due.isoformat() if task.due else '-'}",
            f"tags:    {', '.join(task.tags) or '-'}",
            f"created: {format_date(task.created_at)}",
            f"updated: {format_date(task.updated_at)}",
        ]
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.engine.get_filtered_and_sorted_tasks()
    if not tasks:
        return "No tasks to show."
    today = date.today()
    f = state.engine.filter_state
    s = state.engine.sort_state
    header = (
        f"{len(tasks)} task(s); filter keyword={f.keyword!r} tag={f.tag!r} "
        f"status={f.status}; sort {s.key} {s.order}"
    )
    return "\n".join([header, *(render_task_line(t, today) for t in tasks)])


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter [keyword=...] [tag=...] [status=all|todo|doing|done]
    """
    words, opts = _split_options(args, {"keyword", "tag", "status"})
    if words or not opts:
        return "Usage: /filter [keyword=...] [tag=...] [status=all|todo|doing|done]"
    if "status" in opts:
        status = opts["status"].strip().lower() or STATUS_ALL
        if status != STATUS_ALL and status not in {s.value for s in TaskStatus}:
            return "Usage: /filter [keyword=...] [tag=...] [status=all|todo|doing|done]"
        opts["status"] = status
    state.engine.set_filter(**opts)
    return cmd_list(state, [])


def cmd_clear(state: AppState, args: list[str]) -> str:
    state.engine.clear_filter()
    return cmd_list(state, [])


def cmd_sort(state: AppState, args: list[str]) -> str:
    """
    /sort <field>_<asc|desc>   e.g. /sort due_asc
    """
    if len(args) != 1:
        return "Usage: /sort <field>_<asc|desc> (e.g. due_asc, created_at_desc)"
    state.engine.set_sort(args[0])
    return cmd_list(state, [])


def cmd_stats(state: AppState, args: list[str]) -> str:
    return render_stats(state.engine.get_stats())


def cmd_export(state: AppState, args: list[str]) -> str:
    out_dir = args[0] if args else state.settings.export_dir
    try:
        path = export_tasks_csv(state.engine, out_dir)
    except NothingToExportError as e:
        return str(e)
    except OSError:
        logger.exception("CSV export failed.")
        return "CSV export failed; see the log for details."
    return f"Exported CSV: {path}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add <title> [due=YYYY-MM-DD] [tags=a,b].")
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit a task: /edit <id> [title=...] [due=...] [tags=...] [status=...].",
)
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["delete"])
registry.register("toggle", cmd_toggle, help_text="Toggle done/not done: /toggle <id>.", aliases=["t"])
registry.register("show", cmd_show, help_text="Show one task: /show <id>.")
registry.register("list", cmd_list, help_text="List tasks with the current filter and sort.", aliases=["ls"])
registry.register(
    "filter", cmd_filter, help_text="Filter: /filter [keyword=...] [tag=...] [status=...]."
)
registry.register("clear", cmd_clear, help_text="Reset all filters.")
registry.register("sort", cmd_sort, help_text="Sort: /sort <field>_<asc|desc>.")
registry.register("stats", cmd_stats, help_text="Show task counts by status.")
registry.register("export", cmd_export, help_text="Export all tasks to CSV: /export [dir].")
