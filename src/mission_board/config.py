"""Load optional board configuration from ``<data dir>/config.yaml``."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from .constants import (
    CONFIG_FILE,
    DATA_DIR_ENV,
    DEFAULT_DATA_DIR_NAME,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PRIORITY,
    STORAGE_FILE,
)

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
VALID_PRIORITIES = {"high", "medium", "low"}


def resolve_data_dir(data_dir: Optional[str] = None) -> Path:
    """Pick the data directory: explicit path, then ``$MISSION_BOARD_HOME``, then home."""
    if data_dir:
        return Path(data_dir).expanduser().resolve()
    env_dir = os.getenv(DATA_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    return Path.home() / DEFAULT_DATA_DIR_NAME


def load_config(data_dir: Path) -> tuple[dict[str, Any], str | None]:
    """Load the optional config file.

    Args:
        data_dir: Board data directory.

    Returns:
        A tuple of `(config, error_message)`. If the file is missing, returns `({}, None)`.
    """
    path = data_dir / CONFIG_FILE
    if not path.exists():
        return {}, None
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        return {}, f"{path.name}: {exc.__class__.__name__}: {exc}"
    except yaml.YAMLError as exc:
        return {}, f"{path.name}: YAMLError: {exc}"
    if data is None:
        return {}, None
    if not isinstance(data, dict):
        return {}, f"{path.name}: expected mapping, got {type(data).__name__}"
    return data, None


def get_log_level(config: dict[str, Any]) -> str:
    raw = config.get("log_level")
    if isinstance(raw, str) and raw.upper() in VALID_LOG_LEVELS:
        return raw.upper()
    return DEFAULT_LOG_LEVEL


def get_storage_path(config: dict[str, Any], data_dir: Path) -> Path:
    """Resolve the slot file; relative names live inside the data directory."""
    raw = config.get("storage_file")
    name = raw if isinstance(raw, str) and raw.strip() else STORAGE_FILE
    path = Path(name).expanduser()
    return path if path.is_absolute() else data_dir / path


def get_default_priority(config: dict[str, Any]) -> str:
    raw = config.get("default_priority")
    if isinstance(raw, str) and raw.lower() in VALID_PRIORITIES:
        return raw.lower()
    return DEFAULT_PRIORITY
