"""Tests for the JSON slot file (io_utils.py)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mission_board.io_utils import JsonSlotFile
from mission_board.task_engine.errors import CorruptStateError


def test_missing_file_reads_empty(tmp_path: Path) -> None:
    slot = JsonSlotFile(tmp_path / "slot.json")
    assert slot.read() == {}
    assert slot.get("theme", "dark") == "dark"


def test_put_preserves_other_keys(tmp_path: Path) -> None:
    slot = JsonSlotFile(tmp_path / "nested" / "slot.json")
    slot.put("tasks", [{"id": "t1"}])
    slot.put("theme", "light")
    assert slot.read() == {"tasks": [{"id": "t1"}], "theme": "light"}


def test_non_ascii_text_round_trips(tmp_path: Path) -> None:
    slot = JsonSlotFile(tmp_path / "slot.json")
    slot.put("tasks", [{"text": "会議準備 ✓"}])
    raw = (tmp_path / "slot.json").read_text(encoding="utf-8")
    assert "会議準備" in raw
    assert slot.get("tasks") == [{"text": "会議準備 ✓"}]


def test_unreadable_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "slot.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(CorruptStateError) as excinfo:
        JsonSlotFile(path).read()
    assert excinfo.value.path == path
    assert "slot.json" in str(excinfo.value)


def test_put_over_unreadable_file(tmp_path: Path) -> None:
    path = tmp_path / "slot.json"
    path.write_text("garbage", encoding="utf-8")
    JsonSlotFile(path).put("theme", "dark")
    assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark"}


def test_quarantine(tmp_path: Path) -> None:
    slot = JsonSlotFile(tmp_path / "slot.json")
    assert slot.quarantine() is None
    (tmp_path / "slot.json").write_text("bad", encoding="utf-8")
    backup = slot.quarantine()
    assert backup == tmp_path / "slot.json.corrupt"
    assert backup.read_text(encoding="utf-8") == "bad"


def test_directory_path_raises_corrupt_state(tmp_path: Path) -> None:
    path = tmp_path / "slot.json"
    path.mkdir()
    slot = JsonSlotFile(path)
    with pytest.raises(CorruptStateError, match="slot.json"):
        slot.read()
    assert slot.quarantine() is None


def test_quarantine_keeps_earlier_backups(tmp_path: Path) -> None:
    path = tmp_path / "slot.json"
    slot = JsonSlotFile(path)
    path.write_text("first", encoding="utf-8")
    first = slot.quarantine()
    path.write_text("second", encoding="utf-8")
    second = slot.quarantine()
    assert first == tmp_path / "slot.json.corrupt"
    assert second == tmp_path / "slot.json.corrupt.1"
    assert first.read_text(encoding="utf-8") == "first"
    assert second.read_text(encoding="utf-8") == "second"


def test_quarantine_reuses_identical_backup(tmp_path: Path) -> None:
    path = tmp_path / "slot.json"
    slot = JsonSlotFile(path)
    path.write_text("same", encoding="utf-8")
    assert slot.quarantine() == slot.quarantine() == tmp_path / "slot.json.corrupt"
    assert not (tmp_path / "slot.json.corrupt.1").exists()
