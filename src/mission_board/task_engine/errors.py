"""Error taxonomy for the task engine.

Missing task ids are not errors: store operations report them through their
return value (``None`` / ``False``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class TaskEngineError(Exception):
    """Base class for task engine errors."""

    pass


class TaskValidationError(TaskEngineError, ValueError):
    """Input the caller should have rejected before reaching the store."""

    pass


class CorruptStateError(TaskEngineError):
    """Persisted state exists but cannot be read back."""

    def __init__(self, reason: str, path: Optional[Path] = None) -> None:
        self.reason = reason
        self.path = path
        where = f"{path.name}: " if path is not None else ""
        super().__init__(f"{where}{reason}")
