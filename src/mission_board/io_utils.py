"""JSON key-value slot file.

The slot file is a small key-value store: a single JSON object whose
top-level keys (``tasks``, ``theme``) are owned by different layers. Every
write replaces the whole document atomically (write-tmp-then-rename) under an
exclusive file lock.
"""

from __future__ import annotations

import filecmp
import json
import os
import shutil
from pathlib import Path
from typing import Any

from filelock import FileLock
from loguru import logger

from .constants import CORRUPT_SUFFIX, LOCK_SUFFIX, LOCK_TIMEOUT
from .task_engine.errors import CorruptStateError


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, ensure_ascii=False)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def _load_json_object(path: Path) -> dict[str, Any]:
    """Load a JSON object from *path*; ``{}`` if the file is missing.

    Raises :class:`CorruptStateError` when the file cannot be opened or
    parsed, or is not an object, so callers can avoid overwriting it.
    """
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise CorruptStateError(f"{exc.__class__.__name__}: {exc}", path) from exc
    except json.JSONDecodeError as exc:
        raise CorruptStateError(f"JSONDecodeError: {exc}", path) from exc
    except UnicodeDecodeError as exc:
        raise CorruptStateError(f"UnicodeDecodeError: {exc}", path) from exc
    if not isinstance(data, dict):
        raise CorruptStateError(f"expected object, got {type(data).__name__}", path)
    return data


class JsonSlotFile:
    """A JSON document of independent top-level keys."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = FileLock(str(self.path) + LOCK_SUFFIX, timeout=LOCK_TIMEOUT)

    def read(self) -> dict[str, Any]:
        with self._lock:
            return _load_json_object(self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self.read().get(key, default)

    def put(self, key: str, value: Any) -> None:
        """Replace *key* and keep every other key untouched.

        An unreadable document is treated as empty here; callers that must
        not lose it call :meth:`quarantine` first.
        """
        with self._lock:
            try:
                data = _load_json_object(self.path)
            except CorruptStateError:
                data = {}
            data[key] = value
            _atomic_write_json(self.path, data)

    def _backup_path(self) -> Path:
        """First free ``<name>.corrupt[.N]``, or an existing identical copy."""
        base = self.path.with_name(self.path.name + CORRUPT_SUFFIX)
        candidate, n = base, 0
        while candidate.exists():
            if candidate.is_file() and filecmp.cmp(self.path, candidate, shallow=False):
                return candidate
            n += 1
            candidate = base.with_name(f"{base.name}.{n}")
        return candidate

    def quarantine(self) -> Path | None:
        """Copy the current file aside, never overwriting an earlier backup.

        Returns the backup path, or ``None`` when there is no regular file to
        copy or the copy itself fails.
        """
        if not self.path.is_file():
            return None
        try:
            with self._lock:
                target = self._backup_path()
                if not target.exists():
                    shutil.copy2(self.path, target)
        except OSError as exc:
            logger.warning("Could not back up {}: {}", self.path, exc)
            return None
        return target
