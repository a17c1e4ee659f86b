import pytest

from eonengine.resources.storage import FileStorage, MemoryStorage


def test_memory_storage_roundtrip():
    storage = MemoryStorage()
    storage.set("save", "{}")

    assert storage.get("save") == "{}"
    assert list(storage.keys()) == ["save"]

    storage.remove("save")
    assert storage.get("save") is None
    storage.remove("save")


def test_file_storage_writes_json_files(tmp_path):
    storage = FileStorage(tmp_path / "saves")
    storage.set("slot_a", '{"gold": 10}')

    assert (tmp_path / "saves" / "slot_a.json").read_text(encoding="utf-8") == '{"gold": 10}'
    assert storage.get("slot_a") == '{"gold": 10}'
    assert storage.get("missing") is None


def test_file_storage_overwrite_leaves_no_temp_files(tmp_path):
    storage = FileStorage(tmp_path)
    storage.set("k", "one")
    storage.set("k", "two")

    assert storage.get("k") == "two"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]


def test_file_storage_keys_and_remove(tmp_path):
    storage = FileStorage(tmp_path)
    storage.set("b", "2")
    storage.set("a", "1")

    assert list(storage.keys()) == ["a", "b"]

    storage.remove("a")
    assert list(storage.keys()) == ["b"]


def test_file_storage_rejects_path_keys(tmp_path):
    storage = FileStorage(tmp_path)
    with pytest.raises(ValueError):
        storage.set("../escape", "x")
