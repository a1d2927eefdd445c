"""Tests for config loading (config.py)."""

from __future__ import annotations

from pathlib import Path

import pytest

from mission_board.config import (
    get_default_priority,
    get_log_level,
    get_storage_path,
    load_config,
    resolve_data_dir,
)


class TestLoadConfig:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_config(tmp_path) == ({}, None)

    def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / "config.yaml").write_text("", encoding="utf-8")
        assert load_config(tmp_path) == ({}, None)

    def test_reads_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "config.yaml").write_text(
            "log_level: debug\nstorage_file: board.json\ndefault_priority: HIGH\n",
            encoding="utf-8",
        )
        config, err = load_config(tmp_path)
        assert err is None
        assert get_log_level(config) == "DEBUG"
        assert get_storage_path(config, tmp_path) == tmp_path / "board.json"
        assert get_default_priority(config) == "high"

    def test_invalid_yaml_reports_error(self, tmp_path: Path) -> None:
        (tmp_path / "config.yaml").write_text("log_level: [unclosed\n", encoding="utf-8")
        config, err = load_config(tmp_path)
        assert config == {}
        assert err is not None and "YAMLError" in err

    def test_non_mapping_reports_error(self, tmp_path: Path) -> None:
        (tmp_path / "config.yaml").write_text("- a\n- b\n", encoding="utf-8")
        config, err = load_config(tmp_path)
        assert config == {}
        assert "expected mapping" in err


class TestGetters:
    def test_defaults(self, tmp_path: Path) -> None:
        assert get_log_level({}) == "INFO"
        assert get_storage_path({}, tmp_path) == tmp_path / "storage.json"
        assert get_default_priority({}) == "medium"

    def test_invalid_values_fall_back(self, tmp_path: Path) -> None:
        config = {"log_level": "LOUD", "storage_file": "  ", "default_priority": "urgent"}
        assert get_log_level(config) == "INFO"
        assert get_storage_path(config, tmp_path) == tmp_path / "storage.json"
        assert get_default_priority(config) == "medium"

    def test_absolute_storage_path(self, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere" / "tasks.json"
        assert get_storage_path({"storage_file": str(target)}, tmp_path / "data") == target


class TestResolveDataDir:
    def test_explicit(self, tmp_path: Path) -> None:
        assert resolve_data_dir(str(tmp_path)) == tmp_path.resolve()

    def test_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MISSION_BOARD_HOME", str(tmp_path))
        assert resolve_data_dir(None) == tmp_path.resolve()

    def test_home_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MISSION_BOARD_HOME", raising=False)
        assert resolve_data_dir(None) == Path.home() / ".mission_board"
