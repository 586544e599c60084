"""JSON store used by plugins."""

import json

import pytest

from OneBotHub.store import JsonStore


def test_missing_key_returns_default(tmp_path):
    store = JsonStore(str(tmp_path / "quotes"))
    assert store.read("missing") is None
    assert store.read("missing", default={"quotes": []}) == {"quotes": []}
    assert not store.exists("missing")


def test_write_creates_directory_and_replaces(tmp_path):
    store = JsonStore(str(tmp_path / "quotes"))
    store.write(460048859, {"quotes": ["a"]})
    store.write(460048859, {"quotes": ["a", "b"]})

    assert store.read(460048859) == {"quotes": ["a", "b"]}
    assert store.read("460048859") == {"quotes": ["a", "b"]}
    assert sorted(p.name for p in (tmp_path / "quotes").iterdir()) == ["460048859.json"]


def test_keys_cannot_escape_directory(tmp_path):
    store = JsonStore(str(tmp_path / "data"))
    path = store.path_for("../../etc/passwd")
    assert path.startswith(str(tmp_path / "data"))
    assert "/" not in path[len(str(tmp_path / "data")) + 1 :]


def test_unicode_round_trip_and_delete(tmp_path):
    store = JsonStore(str(tmp_path))
    store.write("语录", {"text": "今天也要加油"})
    raw = open(store.path_for("语录"), encoding="utf-8").read()
    assert "今天也要加油" in raw

    assert store.delete("语录")
    assert not store.delete("语录")


def test_corrupt_file_raises(tmp_path):
    store = JsonStore(str(tmp_path))
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        store.read("broken")
