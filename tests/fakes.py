# tests/fakes.py

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from tasklist.tasks.task_models import Task


class FakeClock:
    """
    Deterministic clock for the engine.

    Every call returns the current instant and then advances by `step`,
    so consecutive mutations get strictly increasing timestamps.
    """

    def __init__(
        self,
        start: datetime = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc),
        step: timedelta = timedelta(seconds=1),
    ) -> None:
        self.now = start
        self.step = step
        self.calls = 0

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        self.calls += 1
        return current


class InMemoryTaskRepo:
    """
    In-memory TaskRepo used for engine unit tests.

    Stores primitive records (like the real slot) so tests can check exactly
    what was persisted, and counts saves.
    """

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self.records: list[dict[str, Any]] = list(records or [])
        self.save_calls = 0

    def load_all(self) -> list[Task]:
        return [Task.from_record(r) for r in self.records]

    def save_all(self, tasks: Sequence[Task]) -> None:
        self.save_calls += 1
        self.records = [t.to_record() for t in tasks]
