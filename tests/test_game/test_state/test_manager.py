from unittest.mock import patch

import pytest

from eonengine.core.events import GameEvent
from eontamers.inventory.items import add_to_inventory
from eontamers.save.autosave import AutoSave
from eontamers.state.manager import GameStateManager, enhancement_chance, required_clone_tier


def give(manager, item_id, quantity=1):
    tamer = manager.state.tamer
    tamer.inventory = add_to_inventory(tamer.inventory, item_id, quantity)


def lead(manager):
    return manager.state.tamer.party[0]


def test_new_game(manager):
    tamer = manager.state.tamer

    assert tamer.name == "Ash"
    assert tamer.character_id == "leo"
    assert tamer.gold == 150
    assert tamer.item_quantity("capture_orb") == 5
    assert tamer.item_quantity("potion") == 3
    assert tamer.unlocked_party_slots == 1
    assert tamer.unlocked_support_skills == ["cheer"]
    assert tamer.collection == ["pyrocat"]
    assert lead(manager).species_id == "pyrocat"
    assert lead(manager).level == 5
    assert lead(manager).current_hp == lead(manager).current_stats.max_hp
    assert sorted(manager.state.active_quests) == ["first_capture", "story_act1_intro"]


def test_new_game_writes_autosave(manager, autosave):
    assert autosave.load() == manager.state


def test_new_game_rejects_unknown_ids(manager):
    before = manager.state

    assert not manager.start_new_game("nobody", "pyrocat").success
    assert not manager.start_new_game("leo", "missingno").success
    assert manager.state is before


def test_each_operation_publishes_one_state_update(manager, recorder_factory):
    recorder = recorder_factory(GameEvent.STATE_UPDATED)

    manager.set_language("fr")

    assert len(recorder.events) == 1
    assert recorder.events[0]["state"] is manager.state
    assert manager.state.language == "fr"


def test_entering_region_completes_quest_with_single_update(manager, recorder_factory):
    recorder = recorder_factory(GameEvent.STATE_UPDATED, GameEvent.QUEST_COMPLETED)

    manager.enter_region("starter_meadow")

    assert len(recorder.of(GameEvent.STATE_UPDATED)) == 1
    assert [e["quest_id"] for e in recorder.of(GameEvent.QUEST_COMPLETED)] == ["story_act1_intro"]
    assert manager.state.current_region == "starter_meadow"
    assert manager.state.story_progress.current_act == 2

    result = manager.claim_quest_reward("story_act1_intro")

    assert result.success
    assert manager.state.tamer.gold == 250
    assert manager.state.tamer.exp == 100
    assert manager.state.tamer.item_quantity("capture_orb") == 8
    assert not manager.claim_quest_reward("story_act1_intro").success


def test_clock_ticks_do_not_commit(manager, recorder_factory):
    recorder = recorder_factory(GameEvent.STATE_UPDATED)

    manager.update(1.5)
    manager.update_time(1300)

    assert recorder.events == []
    assert manager.state.play_time == 1.5
    assert manager.state.game_time == 100


def test_update_reputation(manager, recorder_factory):
    recorder = recorder_factory(GameEvent.REPUTATION_CHANGED)

    assert manager.update_reputation("EMBER_CLAN", 30) == 30
    assert manager.update_reputation("EMBER_CLAN", 20) == 50
    assert recorder.events[-1].data == {"faction": "EMBER_CLAN", "value": 50}


def test_return_to_title(manager, recorder_factory):
    recorder = recorder_factory(GameEvent.RETURN_TO_TITLE)
    manager.return_to_title()
    assert len(recorder.events) == 1


# -----------------------------------------------------------------------------
# Battle
# -----------------------------------------------------------------------------

def test_battle_win_feeds_defeat_objectives(manager, recorder_factory):
    recorder = recorder_factory(GameEvent.STATE_UPDATED, GameEvent.MONSTER_DEFEATED)
    manager.accept_quest("pyro_hunter")
    recorder.clear()

    for _ in range(3):
        assert manager.handle_battle_end("PLAYER", "pyrocat", 2) is not None

    assert len(recorder.of(GameEvent.STATE_UPDATED)) == 3
    assert len(recorder.of(GameEvent.MONSTER_DEFEATED)) == 3
    assert "pyro_hunter" in manager.state.pending_rewards
    assert manager.state.tamer.achievement_progress["combat_first_victory"] == 1


def test_battle_loss(manager):
    manager.state.flags["quest_progress_win_streak_10"] = 4

    assert manager.handle_battle_end("ENEMY", "pyrocat", 2) is None
    assert manager.state.counter("quest_progress_win_streak_10") == 0


def test_grant_rewards_tamer_level_up(manager, rng, recorder_factory):
    recorder = recorder_factory(GameEvent.TAMER_LEVEL_UP)
    manager.state.tamer.exp = 490

    with patch.object(rng, "chance", return_value=False):
        result = manager.grant_rewards("pyrocat", 1)

    assert result.tamer_leveled_up
    assert manager.state.tamer.level == 2
    assert recorder.events[0]["level"] == 2
    assert manager.state.tamer.achievement_progress["economy_earn_1000"] == result.rewards.gold


def test_grant_exp(manager):
    uid = lead(manager).uid

    assert manager.grant_exp(uid, 100)
    assert lead(manager).level == 6
    assert not manager.grant_exp("nobody", 100)


def test_capture_completes_first_capture_quest(manager, rng, recorder_factory):
    recorder = recorder_factory(GameEvent.STATE_UPDATED, GameEvent.REPUTATION_CHANGED)

    with patch.object(rng, "chance", return_value=True):
        assert manager.attempt_capture("droplet", 3, 10, 100)

    tamer = manager.state.tamer
    assert tamer.item_quantity("capture_orb") == 4
    assert tamer.storage[0].species_id == "droplet"
    assert "droplet" in tamer.collection
    assert manager.state.reputation["TIDE_WATCHERS"] == 5
    assert "first_capture" in manager.state.pending_rewards
    assert len(recorder.of(GameEvent.STATE_UPDATED)) == 1
    assert len(recorder.of(GameEvent.REPUTATION_CHANGED)) == 1


def test_capture_orb_conservation(manager, rng):
    with patch.object(rng, "chance", return_value=False):
        for _ in range(5):
            assert not manager.attempt_capture("droplet", 3, 100, 100)

    assert manager.state.tamer.item_quantity("capture_orb") == 0
    assert not manager.attempt_capture("droplet", 3, 1, 100)


# -----------------------------------------------------------------------------
# Creatures
# -----------------------------------------------------------------------------

def test_unlock_skill_node(manager, recorder_factory):
    recorder = recorder_factory(GameEvent.SKILL_UNLOCKED)
    creature = lead(manager)
    manager.state.tamer.party[0] = creature.evolve(skill_points=1)

    assert manager.unlock_skill_node(creature.uid, "p_speed_1")
    assert lead(manager).current_stats.speed == creature.current_stats.speed + 5
    assert recorder.events[0].data == {"creature_uid": creature.uid, "node_id": "p_speed_1"}

    assert not manager.unlock_skill_node(creature.uid, "p_atk_1")
    assert not manager.unlock_skill_node("nobody", "p_atk_1")


def test_evolve_creature(manager, db):
    creature = lead(manager).evolve(level=10, unlocked_nodes=["p_speed_1", "p_fire_special"])
    manager.state.tamer.party[0] = creature

    result = manager.evolve_creature(creature.uid, "flarelion")
    assert result == (False, "Evolution requirements not met")

    give(manager, "sun_stone")
    result = manager.evolve_creature(creature.uid, "flarelion")

    assert result.success
    assert result.message == f"Evolved into {db.species['flarelion'].name}!"
    assert lead(manager).species_id == "flarelion"
    assert lead(manager).uid == creature.uid
    assert manager.state.tamer.item_quantity("sun_stone") == 0
    assert "flarelion" in manager.state.tamer.collection
    assert manager.state.flags["evolved_once"] is True
    assert manager.state.tamer.achievement_progress["progression_first_evolution"] == 1


def test_evolve_unknown_creature(manager):
    assert manager.evolve_creature("nobody", "flarelion") == (False, "Monster not found")


def test_clone_tiers():
    assert required_clone_tier(0) == "D"
    assert required_clone_tier(3) == "C"
    assert required_clone_tier(11) == "A"
    assert required_clone_tier(14) == "S"
    assert required_clone_tier(15) is None


def test_enhancement_chance_floor():
    assert enhancement_chance(0) == 1.0
    assert enhancement_chance(10) == pytest.approx(0.5)
    assert enhancement_chance(14) == 0.25


def test_enhance_success(manager, rng):
    uid = lead(manager).uid
    attack = lead(manager).current_stats.attack
    give(manager, "power_clone_d")

    with patch.object(rng, "chance", return_value=True):
        result = manager.enhance_creature(uid, "power_clone_d")

    assert result == (True, "Enhancement succeeded! Now +1")
    assert lead(manager).enhancement_level == 1
    assert lead(manager).current_stats.attack > attack
    assert manager.state.tamer.item_quantity("power_clone_d") == 0


def test_enhance_validation_messages(manager):
    uid = lead(manager).uid

    assert manager.enhance_creature(uid, "potion").message == "Not a Power Clone"
    assert manager.enhance_creature(uid, "backup_disk").message == "Not a Power Clone"
    assert manager.enhance_creature(uid, "power_clone_c").message == "Requires Power Clone [D]"
    assert manager.enhance_creature(uid, "power_clone_d").message == "No Power Clone [D] in inventory"

    give(manager, "power_clone_d")
    result = manager.enhance_creature(uid, "power_clone_d", use_backup=True)
    assert result.message == "No Backup Disk in inventory"
    assert manager.state.tamer.item_quantity("power_clone_d") == 1


def test_enhance_at_max(manager):
    creature = lead(manager)
    manager.state.tamer.party[0] = creature.evolve(enhancement_level=15)

    assert manager.enhance_creature(creature.uid, "power_clone_s").message == "Already at maximum enhancement"


def test_enhance_failure_with_backup(manager, rng):
    creature = lead(manager)
    manager.state.tamer.party[0] = creature.evolve(enhancement_level=2)
    give(manager, "power_clone_d")
    give(manager, "backup_disk")

    with patch.object(rng, "chance", return_value=False):
        result = manager.enhance_creature(creature.uid, "power_clone_d", use_backup=True)

    assert result == (False, "Enhancement failed. Protected by Backup Disk (+2)")
    assert lead(manager).enhancement_level == 2
    assert manager.state.tamer.item_quantity("backup_disk") == 0
    assert manager.state.tamer.item_quantity("power_clone_d") == 0


def test_enhance_failure_drops_level(manager, rng):
    creature = lead(manager)
    manager.state.tamer.party[0] = creature.evolve(enhancement_level=2)
    give(manager, "power_clone_d")

    with patch.object(rng, "chance", return_value=False):
        result = manager.enhance_creature(creature.uid, "power_clone_d")

    assert result == (False, "Enhancement failed. Dropped to +1")
    assert lead(manager).enhancement_level == 1


def test_equip_and_swap_held_items(manager):
    uid = lead(manager).uid
    attack = lead(manager).current_stats.attack
    give(manager, "attack_ring")
    give(manager, "health_necklace")

    assert manager.equip_item(uid, "attack_ring").success
    assert lead(manager).held_item_id == "attack_ring"
    assert lead(manager).current_stats.attack == attack + 10
    assert manager.state.tamer.item_quantity("attack_ring") == 0

    assert manager.equip_item(uid, "health_necklace").success
    assert manager.state.tamer.item_quantity("attack_ring") == 1
    assert lead(manager).current_stats.attack == attack
    assert lead(manager).current_hp == lead(manager).current_stats.max_hp


def test_equip_validation(manager):
    uid = lead(manager).uid

    assert manager.equip_item(uid, "potion").message == "Not an equipment"
    assert manager.equip_item(uid, "swift_feather").message == "Item not in inventory"
    assert manager.equip_item("nobody", "swift_feather").message == "Monster not found"


def test_unequip(manager):
    uid = lead(manager).uid
    give(manager, "attack_ring")
    manager.equip_item(uid, "attack_ring")

    assert manager.unequip_item(uid).success
    assert lead(manager).held_item_id is None
    assert manager.state.tamer.item_quantity("attack_ring") == 1
    assert manager.unequip_item(uid).message == "No item equipped"


def test_use_potion(manager):
    creature = lead(manager)

    assert manager.use_item("potion", creature.uid).message == "HP is already full"
    assert manager.use_item("capture_orb", creature.uid).message == "This item cannot be used here"

    manager.state.tamer.party[0] = creature.evolve(current_hp=10)
    result = manager.use_item("potion", creature.uid)

    assert result == (True, "Restored 20 HP")
    assert lead(manager).current_hp == 30
    assert manager.state.tamer.item_quantity("potion") == 2


def test_heal_party(manager):
    creature = lead(manager)
    manager.state.tamer.party[0] = creature.evolve(current_hp=1)

    manager.heal_party()

    assert lead(manager).current_hp == lead(manager).current_stats.max_hp


def test_party_and_storage_moves(manager, db):
    from eontamers.progression.species import create_creature

    tamer = manager.state.tamer
    extra = create_creature("droplet", 2, db)
    tamer.storage.append(extra)

    assert manager.move_to_storage(lead(manager).uid).message == "Party cannot be empty"
    assert manager.move_to_party(extra.uid).message == "Party is full"

    tamer.unlocked_party_slots = 2
    assert manager.move_to_party(extra.uid).success
    assert [c.species_id for c in manager.state.tamer.party] == ["pyrocat", "droplet"]

    assert manager.move_to_storage(extra.uid).success
    assert manager.state.tamer.storage[0].uid == extra.uid


# -----------------------------------------------------------------------------
# Saving
# -----------------------------------------------------------------------------

def test_manual_save_and_load(manager):
    assert manager.manual_save(0)
    manager.state.tamer.gold = 5

    assert manager.manual_load(0)
    assert manager.state.tamer.gold == 150
    assert not manager.manual_load(2)


def test_load_autosave_into_new_manager(manager, db, event_bus, rng, storage, timers):
    fresh = GameStateManager(db, event_bus, rng, AutoSave(storage), timers)

    assert fresh.load_autosave()
    assert fresh.state == manager.state
    assert not fresh.manual_save(0)


def test_load_autosave_without_save(db, event_bus, rng, autosave, timers):
    manager = GameStateManager(db, event_bus, rng, autosave, timers)
    assert not manager.load_autosave()
