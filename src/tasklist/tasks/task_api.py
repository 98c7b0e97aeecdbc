# src/tasklist/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from .task_engine import TaskEngine
from .task_export import export_file_name, generate_csv, write_csv
from .task_models import NothingToExportError, Task, TaskStatus, TaskValidationError

logger = logging.getLogger(__name__)


def clean_title(raw: str | None) -> str:
    title = (raw or "").strip()
    if not title:
        raise TaskValidationError("Title is required.")
    return title


def parse_tags(raw: str | None) -> list[str]:
    """'home, errand,,home' -> ['home', 'errand', 'home'] (order and duplicates kept)."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_due(raw: str | None) -> date | None:
    text = (raw or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise TaskValidationError(f"Due date must be YYYY-MM-DD, got {text!r}.") from e


def create_task(
    engine: TaskEngine,
    title: str | None,
    due: str | None = None,
    tags: str | None = None,
) -> Task:
    """
    Convenience helper: validate raw form input, then add the task.
    Raises TaskValidationError before touching the engine.
    """
    return engine.add_task(clean_title(title), parse_due(due), parse_tags(tags))


def edit_task(
    engine: TaskEngine,
    task_id: str,
    *,
    title: str | None = None,
    due: str | None = None,
    tags: str | None = None,
    status: str | None = None,
) -> Task | None:
    """
    Apply only the supplied fields. An empty `due` string clears the deadline;
    None leaves it untouched.
    """
    fields: dict[str, object] = {}
    if title is not None:
        fields["title"] = clean_title(title)
    if due is not None:
        fields["due"] = parse_due(due)
    if tags is not None:
        fields["tags"] = parse_tags(tags)
    if status is not None:
        try:
            fields["status"] = TaskStatus(status.strip().lower())
        except ValueError as e:
            raise TaskValidationError(f"Status must be todo, doing or done, got {status!r}.") from e
    return engine.update_task(task_id, **fields)


def export_tasks_csv(engine: TaskEngine, out_dir: str | Path, *, today: date | None = None) -> Path:
    """
    Export the full collection (not the current view) to tasks-<date>.csv.
    Raises NothingToExportError when there is nothing to write; no file is created.
    """
    tasks = engine.get_all_tasks()
    if not tasks:
        raise NothingToExportError("There are no tasks to export.")

    path = Path(out_dir) / export_file_name(today or date.today())
    write_csv(path, generate_csv(tasks))
    logger.info("Exported %d tasks to %s", len(tasks), path)
    return path
