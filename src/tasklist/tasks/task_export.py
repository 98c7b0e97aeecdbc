# src/tasklist/tasks/task_export.py

"""
Display and CSV helpers.

CSV output follows RFC 4180 quoting: a field containing a comma, a quote or a
line break is wrapped in quotes with inner quotes doubled. Rows are joined with
CRLF and there is no trailing line break.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path
from typing import Any

from .task_models import DueBucket, Task

logger = logging.getLogger(__name__)

CSV_HEADERS: tuple[str, ...] = ("id", "title", "due", "tags", "status", "created_at", "updated_at")
CSV_MIME_TYPE = "text/csv;charset=utf-8;"
CSV_ROW_SEP = "\r\n"
TAG_SEP = ";"

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def format_date(value: str | datetime | None) -> str:
    """ISO timestamp -> 'YYYY-MM-DD HH:MM' in local wall-clock time; None -> ''."""
    if not value:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def escape_field(value: Any) -> str:
    if value is None:
        return ""
    s = str(value)
    if any(ch in s for ch in _NEEDS_QUOTING):
        return '"' + s.replace('"', '""') + '"'
    return s


def _row(task: Task) -> list[Any]:
    return [
        task.id,
        task.title,
        task.due.isoformat() if task.due else "",
        TAG_SEP.join(task.tags),
        task.status.value,
        task.created_at,
        task.updated_at,
    ]


def generate_csv(tasks: Iterable[Task]) -> str:
    lines = [",".join(CSV_HEADERS)]
    for task in tasks:
        lines.append(",".join(escape_field(v) for v in _row(task)))
    return CSV_ROW_SEP.join(lines)


def export_file_name(today: date) -> str:
    return f"tasks-{today.isoformat()}.csv"


def write_csv(path: str | Path, content: str) -> Path:
    """Write CSV text as UTF-8 bytes so CRLF row separators are kept verbatim."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content.encode("utf-8"))
    logger.info("CSV written: %s (%d bytes)", path, path.stat().st_size)
    return path


def classify_due(due: date | None, today: date) -> DueBucket:
    if due is None:
        return DueBucket.NONE
    if due < today:
        return DueBucket.OVERDUE
    if due == today:
        return DueBucket.TODAY
    return DueBucket.FUTURE
