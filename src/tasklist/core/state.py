# src/tasklist/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings
from ..tasks.task_engine import TaskEngine


@dataclass
class AppState:
    # Store Settings on the state for easy access in command handlers.
    settings: Settings
    engine: TaskEngine
