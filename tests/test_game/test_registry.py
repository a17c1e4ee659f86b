import json

import pytest

from eonengine.errors import DataLoadError, UnknownSpeciesError
from eontamers.data.definitions import Element, ItemCategory, QuestCategory, Rarity
from eontamers.data.registry import BUNDLED_DATA_DIR, GameDatabase


def test_bundled_tables_load(db):
    assert db.species["pyrocat"].element == Element.FIRE
    assert db.species["droplet"].rarity == Rarity.COMMON
    assert db.items["potion"].category == ItemCategory.HEALING
    assert db.quests["story_act1_intro"].category == QuestCategory.MAIN
    assert db.gear["wooden_staff"].slot == "weapon"
    assert "cheer" in db.support_skills
    assert db.expeditions["quick_gold_rush"].duration == 3_600_000


def test_bundled_references_resolve(db):
    for species in db.species.values():
        for rule in species.evolutions:
            assert rule.target_species_id in db.species
        for entry in species.loot_table:
            assert entry.item_id in db.items
    for item in db.items.values():
        for species_id in item.hatch_pool:
            assert species_id in db.species


def test_require_species(db):
    assert db.require_species("pyrocat").name
    with pytest.raises(UnknownSpeciesError):
        db.require_species("missingno")


def test_unknown_species_error_is_key_error(db):
    with pytest.raises(KeyError):
        db.require_species("missingno")


def test_node_lookup(db):
    assert db.node("pyrocat", "p_speed_1").cost == 1
    assert db.node("pyrocat", "nope") is None
    assert db.node("missingno", "p_speed_1") is None


def test_item_or_gear(db):
    assert db.item_or_gear("potion").id == "potion"
    assert db.item_or_gear("wooden_staff").id == "wooden_staff"
    assert db.item_or_gear("nothing") is None


def test_daily_reward_cycles(db):
    assert db.daily_reward(1).gold == 100
    assert db.daily_reward(7).gold == 1000
    assert db.daily_reward(8).day == 1
    assert db.daily_reward(10).day == 3


def test_milestones_sorted(db):
    levels = [m.level for m in db.ordered_milestones()]
    assert levels == sorted(levels)


def test_missing_data_dir_raises(tmp_path):
    with pytest.raises(DataLoadError):
        GameDatabase.load(tmp_path / "missing")


def test_mod_directory_overrides_species(tmp_path):
    mod = tmp_path / "mod"
    (mod / "species").mkdir(parents=True)
    with open(BUNDLED_DATA_DIR / "species" / "core.json", encoding="utf-8") as f:
        pyrocat = next(s for s in json.load(f) if s["id"] == "pyrocat")
    pyrocat["name"] = "Blazecat"
    with open(mod / "species" / "override.json", "w", encoding="utf-8") as f:
        json.dump([pyrocat], f)

    db = GameDatabase.load(extra_dirs=[mod])

    assert db.species["pyrocat"].name == "Blazecat"
    assert "droplet" in db.species
