import json

import pytest

from eonengine.errors import DataLoadError
from eonengine.resources.database import Database


ITEM_SCHEMA = {
    "type": "object",
    "required": ["id", "price"],
    "properties": {
        "id": {"type": "string"},
        "price": {"type": "integer"}
    }
}


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)


@pytest.fixture
def mock_db_path(tmp_path):
    base = tmp_path / "base"
    write_json(base / "schemas" / "item.schema.json", ITEM_SCHEMA)
    (base / "items").mkdir()
    return base


def test_load_all(mock_db_path):
    write_json(mock_db_path / "items" / "sword.json", [{"id": "sword", "price": 100}])

    db = Database(mock_db_path)
    db.load_all({"items": "item.schema.json"})

    assert db.get("items", "sword")["price"] == 100


def test_single_object_file(mock_db_path):
    write_json(mock_db_path / "items" / "shield.json", {"id": "shield", "price": 40})

    db = Database(mock_db_path)
    db.load_all({"items": "item.schema.json"})

    assert "shield" in db.table("items")


def test_validation_error_skips_entry(mock_db_path):
    write_json(mock_db_path / "items" / "mixed.json", [{"id": "broken"}, {"id": "ok", "price": 1}])

    db = Database(mock_db_path)
    db.load_all({"items": "item.schema.json"})

    assert "broken" not in db.table("items")
    assert "ok" in db.table("items")


def test_invalid_json_file_is_skipped(mock_db_path):
    (mock_db_path / "items" / "bad.json").write_text("{not json", encoding="utf-8")
    write_json(mock_db_path / "items" / "good.json", [{"id": "good", "price": 1}])

    db = Database(mock_db_path)
    db.load_all({"items": "item.schema.json"})

    assert list(db.table("items")) == ["good"]


def test_extra_dirs_override(mock_db_path, tmp_path):
    write_json(mock_db_path / "items" / "sword.json", [{"id": "sword", "price": 100}])
    mod = tmp_path / "mod"
    write_json(mod / "items" / "sword.json", [{"id": "sword", "price": 1}])

    db = Database(mock_db_path, extra_dirs=[mod])
    db.load_all({"items": "item.schema.json"})

    assert db.get("items", "sword")["price"] == 1


def test_missing_directory_raises(tmp_path):
    db = Database(tmp_path / "nowhere")
    with pytest.raises(DataLoadError):
        db.load_all({"items": "item.schema.json"})


def test_unknown_table_is_empty(mock_db_path):
    db = Database(mock_db_path)
    db.load_all({"items": "item.schema.json"})

    assert db.table("monsters") == {}
    assert db.get("items", "nothing") is None
