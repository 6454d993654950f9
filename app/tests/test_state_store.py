from __future__ import annotations

import json
from pathlib import Path

from vessel.config import PLACEHOLDER_FILE_SIZE, SlotKey
from vessel.upload import UploadStateStore


def test_missing_file_loads_empty(tmp_path: Path) -> None:
    store = UploadStateStore(tmp_path / "state" / "uploaded_images.json")
    assert store.load() == {}
    assert store.path.parent.exists()


def test_save_then_load_preserves_slots(tmp_path: Path) -> None:
    store = UploadStateStore(tmp_path / "uploaded_images.json")
    store.save(
        {
            SlotKey.FIRST: {"name": "a.jpg", "size": 100},
            SlotKey.THIRD: {"name": "c.jpg", "size": 300},
        }
    )

    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw == {
        "slots": {
            "first": {"name": "a.jpg", "size": 100},
            "third": {"name": "c.jpg", "size": 300},
        }
    }
    assert not store.path.with_suffix(".json.tmp").exists()
    assert store.load() == {
        SlotKey.FIRST: {"name": "a.jpg", "size": 100},
        SlotKey.THIRD: {"name": "c.jpg", "size": 300},
    }


def test_bare_layout_and_defaults(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps({"second": {"name": "b.png"}, "bogus": {"name": "x.png"}}),
        encoding="utf-8",
    )
    loaded = UploadStateStore(path).load()
    assert loaded == {SlotKey.SECOND: {"name": "b.png", "size": PLACEHOLDER_FILE_SIZE}}


def test_invalid_entries_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps(
            {
                "slots": {
                    "first": {"name": ""},
                    "second": {"name": "ok.jpg", "size": -1},
                    "third": {"name": "good.jpg", "size": 7},
                }
            }
        ),
        encoding="utf-8",
    )
    assert UploadStateStore(path).load() == {
        SlotKey.THIRD: {"name": "good.jpg", "size": 7}
    }


def test_corrupt_json_yields_empty_import(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    assert UploadStateStore(path).load() == {}
