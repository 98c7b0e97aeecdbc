# src/tasklist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The engine depends on Protocols instead of concrete implementations.
This keeps the storage backend swappable and makes testing easier.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Callable, Protocol

from ..tasks.task_models import Task

Clock = Callable[[], datetime]
# Returns an aware datetime; the engine stamps created_at/updated_at from it.


class TaskRepo(Protocol):
    """
    Durable slot holding the whole task collection.

    load_all() never raises: a missing slot or corrupt content yields [].
    save_all() replaces the stored collection; failures are reported by the
    implementation and never propagate to the engine.
    """

    def load_all(self) -> list[Task]: ...
    def save_all(self, tasks: Sequence[Task]) -> None: ...
