"""Provide the public `mission_board` package exports."""

from __future__ import annotations

from .task_engine.model import Task, TaskPriority
from .task_engine.projection import Projection, ViewMode, ViewProjector
from .task_engine.store import ReorderPlacement, TaskStore

__all__ = [
    "Projection",
    "ReorderPlacement",
    "Task",
    "TaskPriority",
    "TaskStore",
    "ViewMode",
    "ViewProjector",
]
