# src/tasklist/tasks/task_engine.py

"""
In-memory task engine.

Owns the authoritative task collection plus the transient filter/sort state.
The collection is hydrated once from a TaskRepo and every mutation writes the
whole collection back (no incremental saves). Filter/sort state is never
persisted and resets with each new engine.

Missing ids on update/delete/toggle are absorbed as no-ops: the console may
hold a stale id after a deletion and that must not end the session.
"""

from __future__ import annotations

import functools
import logging
import uuid
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any

from ..core.ports import Clock, TaskRepo
from .task_models import (
    EDITABLE_FIELDS,
    SORT_ORDERS,
    STATUS_ALL,
    TASK_FIELDS,
    FilterState,
    InvalidSortError,
    SortState,
    Task,
    TaskStats,
    TaskStatus,
    TaskValidationError,
)

logger = logging.getLogger(__name__)

SORT_DELIMITER = "_"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 UTC with milliseconds and a Z suffix (sorts chronologically as text)."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_sort_spec(spec: str) -> SortState:
    """
    Split "<key>_<order>" on the LAST delimiter, so field names that contain
    underscores survive ("created_at_desc" -> created_at / desc).
    """
    key, sep, order = spec.strip().rpartition(SORT_DELIMITER)
    if not sep or not key:
        raise InvalidSortError(f"sort spec must look like '<field>_<asc|desc>', got {spec!r}")
    if key not in TASK_FIELDS:
        raise InvalidSortError(f"unknown sort field {key!r}; expected one of {', '.join(TASK_FIELDS)}")
    order = order.lower()
    if order not in SORT_ORDERS:
        raise InvalidSortError(f"unknown sort order {order!r}; expected asc or desc")
    return SortState(key=key, order=order)


def coerce_due(value: Any) -> date | None:
    """None/"" -> None, date -> date, "YYYY-MM-DD" -> date; anything else is rejected."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as e:
            raise TaskValidationError(f"Due date must be YYYY-MM-DD, got {value!r}.") from e
    raise TaskValidationError(f"Due date must be a date or YYYY-MM-DD text, got {type(value).__name__}.")


def _compare(a: Task, b: Task, *, key: str, ascending: bool) -> int:
    va: Any = getattr(a, key)
    vb: Any = getattr(b, key)

    if key == "due":
        # no deadline sorts last in both directions
        if va is None and vb is None:
            return 0
        if va is None:
            return 1
        if vb is None:
            return -1

    if va < vb:
        return -1 if ascending else 1
    if va > vb:
        return 1 if ascending else -1
    return 0


class TaskEngine:
    def __init__(self, repo: TaskRepo, *, clock: Clock | None = None) -> None:
        self._repo = repo
        self._clock: Clock = clock or _utc_now
        self._tasks: list[Task] = []
        self._filter = FilterState()
        self._sort = SortState()

    # ---- lifecycle ----

    def initialize(self) -> None:
        self._tasks = list(self._repo.load_all())
        logger.info("TaskEngine initialized with %d tasks", len(self._tasks))

    def _now(self) -> str:
        return format_timestamp(self._clock())

    def _persist(self) -> None:
        self._repo.save_all(self._tasks)

    def _index_of(self, task_id: str) -> int | None:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        return None

    # ---- mutations ----

    def add_task(
        self,
        title: str,
        due: date | str | None = None,
        tags: Iterable[str] | None = None,
    ) -> Task:
        """
        Append a new task with status todo.

        The caller trims and validates `title` (see task_api.clean_title);
        titles are not unique.
        """
        due = coerce_due(due)
        now = self._now()
        task = Task(
            id=uuid.uuid4().hex,
            title=title,
            due=due,
            tags=list(tags or []),
            status=TaskStatus.TODO,
            created_at=now,
            updated_at=now,
        )
        self._tasks.append(task)
        self._persist()
        logger.debug("Task added id=%s title=%r", task.id, task.title)
        return task

    def update_task(self, task_id: str, **fields: Any) -> Task | None:
        """
        Merge `fields` (title/due/tags/status) over an existing task.

        Returns the updated task, or None if the id is unknown (nothing saved).
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"update_task() got unexpected field(s): {', '.join(sorted(unknown))}")
        if "due" in fields:
            fields["due"] = coerce_due(fields["due"])

        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("update_task: no task id=%s", task_id)
            return None

        if "status" in fields:
            fields["status"] = TaskStatus(fields["status"])
        if "tags" in fields:
            fields["tags"] = list(fields["tags"] or [])

        updated = replace(self._tasks[idx], **fields, updated_at=self._now())
        self._tasks[idx] = updated
        self._persist()
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(fields))
        return updated

    def delete_task(self, task_id: str) -> bool:
        """Remove a task; saves either way. Returns False when the id was unknown."""
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        removed = len(self._tasks) != before
        self._persist()
        if removed:
            logger.debug("Task deleted id=%s", task_id)
        else:
            logger.debug("delete_task: no task id=%s", task_id)
        return removed

    def toggle_status(self, task_id: str) -> Task | None:
        """done -> todo, anything else (todo or doing) -> done."""
        task = self.get_task_by_id(task_id)
        if task is None:
            logger.debug("toggle_status: no task id=%s", task_id)
            return None

        task.status = TaskStatus.TODO if task.status == TaskStatus.DONE else TaskStatus.DONE
        task.updated_at = self._now()
        self._persist()
        return task

    # ---- filter / sort state ----

    @property
    def filter_state(self) -> FilterState:
        return replace(self._filter)

    @property
    def sort_state(self) -> SortState:
        return replace(self._sort)

    def set_filter(self, **partial: str) -> None:
        unknown = set(partial) - {"keyword", "tag", "status"}
        if unknown:
            raise TypeError(f"set_filter() got unexpected key(s): {', '.join(sorted(unknown))}")
        for name, value in partial.items():
            if not isinstance(value, str):
                raise TypeError(f"filter {name} must be a string, got {type(value).__name__}")
        self._filter = replace(self._filter, **partial)

    def clear_filter(self) -> None:
        self._filter = FilterState()

    def set_sort(self, spec: str) -> None:
        """Accepts "<field>_<asc|desc>"; raises InvalidSortError and keeps the old state otherwise."""
        self._sort = parse_sort_spec(spec)

    # ---- queries ----

    def _matches(self, task: Task) -> bool:
        f = self._filter

        keyword = f.keyword.lower()
        if keyword:
            in_title = keyword in task.title.lower()
            in_tags = any(keyword in tag.lower() for tag in task.tags)
            if not (in_title or in_tags):
                return False

        tag = f.tag.lower()
        if tag and not any(t.lower() == tag for t in task.tags):
            return False

        return f.status == STATUS_ALL or task.status == f.status

    def get_filtered_and_sorted_tasks(self) -> list[Task]:
        view = [t for t in self._tasks if self._matches(t)]
        cmp = functools.partial(
            _compare, key=self._sort.key, ascending=self._sort.order == "asc"
        )
        view.sort(key=functools.cmp_to_key(cmp))
        return view

    def get_task_by_id(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return None if idx is None else self._tasks[idx]

    def get_stats(self) -> TaskStats:
        stats = TaskStats()
        for task in self._tasks:
            # TaskStatus is closed; from_record rejects anything else on load.
            if task.status == TaskStatus.TODO:
                stats.todo += 1
            elif task.status == TaskStatus.DOING:
                stats.doing += 1
            elif task.status == TaskStatus.DONE:
                stats.done += 1
            else:
                raise ValueError(f"task {task.id} has unexpected status {task.status!r}")
        return stats

    def get_all_tasks(self) -> list[Task]:
        """Full collection in storage order, independent of the current view."""
        return list(self._tasks)
