# tests/test_task_api.py

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from tasklist.tasks.task_api import (
    clean_title,
    create_task,
    edit_task,
    export_tasks_csv,
    parse_due,
    parse_tags,
)
from tasklist.tasks.task_engine import TaskEngine
from tasklist.tasks.task_models import NothingToExportError, TaskStatus, TaskValidationError

from .fakes import InMemoryTaskRepo


def test_parse_tags_trims_and_drops_blanks_keeping_order() -> None:
    assert parse_tags(" home, errand ,, home ,") == ["home", "errand", "home"]
    assert parse_tags("") == []
    assert parse_tags(None) == []


def test_parse_due() -> None:
    assert parse_due("2024-01-10") == date(2024, 1, 10)
    assert parse_due("  ") is None
    with pytest.raises(TaskValidationError):
        parse_due("10/01/2024")


def test_clean_title_rejects_blank() -> None:
    assert clean_title("  Buy milk ") == "Buy milk"
    with pytest.raises(TaskValidationError):
        clean_title("   ")


def test_create_task_validates_before_touching_engine(
    engine: TaskEngine, repo: InMemoryTaskRepo
) -> None:
    with pytest.raises(TaskValidationError):
        create_task(engine, "  ", "2024-01-10", "a")
    assert engine.get_all_tasks() == []
    assert repo.save_calls == 0

    task = create_task(engine, " Buy milk ", "2024-01-10", "home, errand")
    assert task.title == "Buy milk"
    assert task.due == date(2024, 1, 10)
    assert task.tags == ["home", "errand"]


def test_edit_task_only_touches_supplied_fields(engine: TaskEngine) -> None:
    task = create_task(engine, "t", "2024-01-10", "a,b")

    updated = edit_task(engine, task.id, status="Doing")
    assert updated is not None
    assert updated.status == TaskStatus.DOING
    assert updated.tags == ["a", "b"]
    assert updated.due == date(2024, 1, 10)

    cleared = edit_task(engine, task.id, due="")
    assert cleared is not None
    assert cleared.due is None


def test_edit_task_rejects_bad_input(engine: TaskEngine) -> None:
    task = create_task(engine, "t")
    with pytest.raises(TaskValidationError):
        edit_task(engine, task.id, title="")
    with pytest.raises(TaskValidationError):
        edit_task(engine, task.id, status="blocked")
    assert engine.get_task_by_id(task.id).title == "t"


def test_edit_task_unknown_id_returns_none(engine: TaskEngine) -> None:
    assert edit_task(engine, "missing", title="x") is None


def test_export_refuses_empty_collection(engine: TaskEngine, tmp_path: Path) -> None:
    with pytest.raises(NothingToExportError):
        export_tasks_csv(engine, tmp_path, today=date(2024, 1, 10))
    assert list(tmp_path.iterdir()) == []


def test_export_writes_full_collection_regardless_of_view(
    engine: TaskEngine, tmp_path: Path
) -> None:
    a = create_task(engine, "a")
    create_task(engine, "b")
    engine.toggle_status(a.id)
    engine.set_filter(status="done")

    path = export_tasks_csv(engine, tmp_path, today=date(2024, 1, 10))

    assert path == tmp_path / "tasks-2024-01-10.csv"
    rows = path.read_bytes().decode("utf-8").split("\r\n")
    assert len(rows) == 3
    assert rows[1].split(",")[1] == "a"
    assert rows[2].split(",")[1] == "b"
