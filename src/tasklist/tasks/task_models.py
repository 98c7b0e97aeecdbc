# src/tasklist/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from enum import StrEnum
from typing import Any


class TaskError(Exception):
    """Base class for task list errors."""


class TaskValidationError(TaskError, ValueError):
    """Caller input rejected before it reaches the engine (empty title, bad date)."""


class InvalidSortError(TaskError, ValueError):
    """Sort token is not `<field>_<asc|desc>`."""


class TaskRecordError(TaskError, ValueError):
    """A persisted record cannot be turned back into a Task."""


class NothingToExportError(TaskError):
    """Export requested while the collection is empty."""


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - toggling is binary (done <-> not done); "doing" is only reachable by editing.
    """

    TODO = "todo"
    DOING = "doing"
    DONE = "done"


class DueBucket(StrEnum):
    NONE = "none"
    OVERDUE = "overdue"
    TODAY = "today"
    FUTURE = "future"


STATUS_ALL = "all"
SORT_ORDERS = ("asc", "desc")


@dataclass(slots=True)
class Task:
    id: str
    title: str
    due: date | None
    tags: list[str]
    status: TaskStatus
    created_at: str
    updated_at: str

    def to_record(self) -> dict[str, Any]:
        """Primitive JSON-ready record (the persisted shape)."""
        return {
            "id": self.id,
            "title": self.title,
            "due": self.due.isoformat() if self.due else None,
            "tags": list(self.tags),
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_record(cls, raw: Any) -> Task:
        if not isinstance(raw, dict):
            raise TaskRecordError(f"task record must be an object, got {type(raw).__name__}")

        task_id = raw.get("id")
        title = raw.get("title")
        if not task_id or not isinstance(task_id, str):
            raise TaskRecordError("task record has no id")
        if not isinstance(title, str):
            raise TaskRecordError(f"task {task_id} has no title")

        try:
            status = TaskStatus(raw.get("status") or TaskStatus.TODO)
        except ValueError as e:
            raise TaskRecordError(f"task {task_id} has unknown status {raw.get('status')!r}") from e

        due_raw = raw.get("due")
        try:
            due = date.fromisoformat(due_raw) if due_raw else None
        except (TypeError, ValueError) as e:
            raise TaskRecordError(f"task {task_id} has invalid due date {due_raw!r}") from e

        tags_raw = raw.get("tags") or []
        if not isinstance(tags_raw, list):
            raise TaskRecordError(f"task {task_id} has non-list tags")

        created_at = _check_timestamp(task_id, "created_at", raw.get("created_at"))
        updated_at = _check_timestamp(task_id, "updated_at", raw.get("updated_at") or created_at)

        return cls(
            id=task_id,
            title=title,
            due=due,
            tags=[str(t) for t in tags_raw],
            status=status,
            created_at=created_at,
            updated_at=updated_at,
        )


def _check_timestamp(task_id: str, name: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise TaskRecordError(f"task {task_id} has no {name}")
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise TaskRecordError(f"task {task_id} has invalid {name} {value!r}") from e
    return value


TASK_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(Task))
EDITABLE_FIELDS: frozenset[str] = frozenset({"title", "due", "tags", "status"})


@dataclass(slots=True)
class FilterState:
    keyword: str = ""
    tag: str = ""
    status: str = STATUS_ALL


@dataclass(slots=True)
class SortState:
    key: str = "created_at"
    order: str = "desc"


@dataclass(slots=True)
class TaskStats:
    todo: int = 0
    doing: int = 0
    done: int = 0

    @property
    def total(self) -> int:
        return self.todo + self.doing + self.done

    def as_dict(self) -> dict[str, int]:
        return {"todo": self.todo, "doing": self.doing, "done": self.done}


__all__ = [
    "DueBucket",
    "EDITABLE_FIELDS",
    "FilterState",
    "InvalidSortError",
    "NothingToExportError",
    "SORT_ORDERS",
    "STATUS_ALL",
    "SortState",
    "TASK_FIELDS",
    "Task",
    "TaskError",
    "TaskRecordError",
    "TaskStats",
    "TaskStatus",
    "TaskValidationError",
]

