# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from tasklist.config import Settings
from tasklist.core.state import AppState
from tasklist.tasks.task_engine import TaskEngine
from tasklist.tasks.task_store import TaskStore

from .fakes import FakeClock, InMemoryTaskRepo


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def repo() -> InMemoryTaskRepo:
    return InMemoryTaskRepo()


@pytest.fixture()
def engine(repo: InMemoryTaskRepo, clock: FakeClock) -> TaskEngine:
    eng = TaskEngine(repo, clock=clock)
    eng.initialize()
    return eng


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at a per-test tmp dir.

    Built directly rather than via get_settings() so a developer's .env
    never leaks into tests.
    """
    data_dir = tmp_path / "data"
    return Settings(
        app_name="tasklist-test",
        log_level="DEBUG",
        storage_key="todo_tasks_v1",
        data_dir=data_dir,
        db_path=data_dir / "tasks.sqlite3",
        export_dir=tmp_path / "exports",
        log_dir=data_dir,
    )


@pytest.fixture()
def state(settings: Settings, clock: FakeClock) -> AppState:
    """
    AppState wired with the real SQLite store.

    NOTE: the store's correctness is part of what we want to test here;
    only the clock is faked.
    """
    store = TaskStore(settings.db_path, storage_key=settings.storage_key)
    eng = TaskEngine(store, clock=clock)
    eng.initialize()
    return AppState(settings=settings, engine=eng)
