"""Tests for the filesystem state store."""

from pathlib import Path

import pytest

from macro_tracker.adapters.file_state_store import FileStateStore


def test_get_missing_key_returns_none(tmp_path: Path) -> None:
    store = FileStateStore(tmp_path / "state")

    assert store.get("macroTrackerState") is None


def test_set_overwrites_value(tmp_path: Path) -> None:
    store = FileStateStore(tmp_path / "state")

    store.set("macroTrackerState", b'{"a": 1}')
    store.set("macroTrackerState", b'{"a": 2}')

    assert store.get("macroTrackerState") == b'{"a": 2}'
    assert [p.name for p in (tmp_path / "state").iterdir()] == [
        "macroTrackerState.json"
    ]


def test_rejects_unsafe_keys(tmp_path: Path) -> None:
    store = FileStateStore(tmp_path)

    with pytest.raises(ValueError):
        store.set("../escape", b"x")
