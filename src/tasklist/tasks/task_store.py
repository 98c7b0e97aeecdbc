# src/tasklist/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from collections.abc import Sequence
from pathlib import Path

from .task_models import Task, TaskRecordError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "todo_tasks_v1"


class TaskStore:
    """
    SQLite key-value slot store for the task collection.

    The whole collection lives under a single named slot as a JSON array of
    records; every save replaces it.

    Failure policy:
    - load_all(): missing slot -> [], unparsable slot -> [] + logged error
    - save_all(): sqlite/encoding errors are logged, never raised

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(
        self,
        db_path: str | Path = "tasks.sqlite3",
        storage_key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self.storage_key = storage_key
        self._ensure_schema()
        logger.info("TaskStore ready db=%s key=%s", self._db_path, self.storage_key)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS slots (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read_slot(self) -> str | None:
        conn = self._get_conn()
        try:
            cur = conn.execute("SELECT value FROM slots WHERE key = ?", (self.storage_key,))
            row = cur.fetchone()
            return None if row is None else str(row["value"])
        finally:
            conn.close()

    def _write_slot(self, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO slots(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (self.storage_key, value, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def load_all(self) -> list[Task]:
        try:
            raw = self._read_slot()
        except sqlite3.Error:
            logger.exception("Failed to read tasks slot key=%s", self.storage_key)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("Failed to parse tasks from slot key=%s", self.storage_key)
            return []

        if not isinstance(data, list):
            logger.error(
                "Tasks slot key=%s holds %s instead of a list; ignoring.",
                self.storage_key,
                type(data).__name__,
            )
            return []

        tasks: list[Task] = []
        for item in data:
            try:
                tasks.append(Task.from_record(item))
            except TaskRecordError as e:
                logger.warning("Skipping corrupt task record: %s", e)
        logger.debug("Loaded %d tasks from key=%s", len(tasks), self.storage_key)
        return tasks

    def save_all(self, tasks: Sequence[Task]) -> None:
        try:
            payload = json.dumps([t.to_record() for t in tasks], ensure_ascii=False)
        except (AttributeError, TypeError, ValueError):
            logger.exception("Failed to JSON-encode tasks; slot left unchanged.")
            return

        try:
            self._write_slot(payload)
        except sqlite3.Error:
            logger.exception("Failed to save %d tasks to key=%s", len(tasks), self.storage_key)
            return
        logger.debug("Saved %d tasks to key=%s", len(tasks), self.storage_key)

    def clear(self) -> None:
        """Drop the slot entirely (next load_all() returns [])."""
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM slots WHERE key = ?", (self.storage_key,))
            conn.commit()
        finally:
            conn.close()
