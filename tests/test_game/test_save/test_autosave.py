import json

from eonengine.resources.storage import FileStorage
from eontamers.components.state import STATE_VERSION, GameState
from eontamers.components.tamer import Tamer
from eontamers.progression.species import create_creature
from eontamers.save.autosave import DEFAULT_KEY, AutoSave, migrate


def sample_state(db):
    return GameState(tamer=Tamer(
        name="Ash",
        gold=321,
        party=[create_creature("pyrocat", 5, db)],
    ), flags={"intro_seen": True, "quest_progress_daily_win_3": 2})


def test_save_writes_envelope(autosave, storage, db):
    assert autosave.save(sample_state(db)).ok

    document = json.loads(storage.get(DEFAULT_KEY))
    assert document["version"] == STATE_VERSION
    assert "saved_at" in document
    assert document["data"]["tamer"]["gold"] == 321


def test_save_then_load(autosave, db):
    state = sample_state(db)
    autosave.save(state)

    loaded = autosave.load()

    assert loaded == state
    assert loaded is not state


def test_load_without_save(autosave):
    assert autosave.load() is None
    assert not autosave.has_save()


def test_envelope_version_mismatch(autosave, storage, db):
    data = sample_state(db).model_dump(mode="json")
    storage.set(DEFAULT_KEY, json.dumps({"version": STATE_VERSION + 1, "saved_at": "x", "data": data}))

    assert autosave.load() is None


def test_legacy_bare_state_is_migrated(autosave, storage, db):
    data = sample_state(db).model_dump(mode="json")
    data["version"] = 0
    storage.set(DEFAULT_KEY, json.dumps(data))

    loaded = autosave.load()

    assert loaded.version == STATE_VERSION
    assert loaded.tamer.gold == 321


def test_unversioned_state_is_migrated(autosave, storage, db):
    data = sample_state(db).model_dump(mode="json")
    del data["version"]
    storage.set(DEFAULT_KEY, json.dumps(data))

    loaded = autosave.load()

    assert loaded.version == STATE_VERSION
    assert loaded.tamer.name == "Ash"


def test_corrupted_documents(autosave, storage):
    for raw in ("{broken", "[1, 2]", json.dumps({"flags": {}}), json.dumps({"tamer": {"gold": -5}})):
        storage.set(DEFAULT_KEY, raw)
        assert autosave.load() is None


def test_migrate_stamps_version():
    assert migrate({"tamer": {}})["version"] == STATE_VERSION


def test_clear(autosave, db):
    autosave.save(sample_state(db))
    assert autosave.has_save()

    autosave.clear()
    assert not autosave.has_save()


def test_file_storage_roundtrip(tmp_path, db):
    autosave = AutoSave(FileStorage(tmp_path))
    autosave.save(sample_state(db))

    assert (tmp_path / f"{DEFAULT_KEY}.json").exists()
    assert AutoSave(FileStorage(tmp_path)).load().tamer.gold == 321


def test_storage_error_is_reported(db):
    class BrokenStorage:
        def get(self, key):
            raise OSError("disk gone")

        def set(self, key, value):
            raise OSError("disk full")

        def remove(self, key):
            raise OSError("disk gone")

        def keys(self):
            return iter([])

    autosave = AutoSave(BrokenStorage())
    result = autosave.save(sample_state(db))

    assert not result.ok
    assert result.reason == "storage_error"
    assert autosave.load() is None
    assert not autosave.has_save()
