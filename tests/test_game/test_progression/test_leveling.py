from eontamers.components.creature import MAX_LEVEL
from eontamers.components.state import GameState
from eontamers.components.tamer import Tamer
from eontamers.progression.leveling import add_exp_to_creature, add_exp_to_tamer, tamer_progression
from eontamers.progression.species import create_creature


def test_creature_levels_every_100_exp(db):
    creature = create_creature("pyrocat", 1, db)
    result = add_exp_to_creature(creature, 250, GameState(), db)

    assert result.leveled_up
    assert result.creature.level == 3
    assert result.creature.exp == 50
    # one point on level 2
    assert result.creature.skill_points == 1
    assert result.creature.current_hp == result.creature.current_stats.max_hp


def test_input_creature_is_not_modified(db):
    creature = create_creature("pyrocat", 1, db)
    add_exp_to_creature(creature, 500, GameState(), db)

    assert creature.level == 1
    assert creature.exp == 0


def test_exp_without_level_up_keeps_damage(db):
    creature = create_creature("pyrocat", 1, db).evolve(current_hp=10)
    result = add_exp_to_creature(creature, 40, GameState(), db)

    assert not result.leveled_up
    assert result.creature.exp == 40
    assert result.creature.current_hp == 10


def test_level_cap_resets_exp(db):
    creature = create_creature("pyrocat", MAX_LEVEL - 1, db)
    result = add_exp_to_creature(creature, 1000, GameState(), db)

    assert result.creature.level == MAX_LEVEL
    assert result.creature.exp == 0


def test_tamer_level_and_party_slots(db):
    result = add_exp_to_tamer(Tamer(character_id="leo"), 1000, db)

    assert result.leveled_up
    assert result.tamer.level == 3
    assert result.tamer.exp == 0
    assert result.tamer.unlocked_party_slots == 2
    assert result.tamer.unlocked_support_skills == ["cheer"]


def test_tamer_level_cap(db):
    result = add_exp_to_tamer(Tamer(), 500 * 100, db)

    assert result.tamer.level == 50
    assert result.tamer.exp == 0


def test_progression_union_of_skills(db):
    progression = tamer_progression(15, "leo", db)

    assert progression.party_slots == 4
    assert progression.support_skills == ["cheer", "first_aid", "rally", "war_cry"]


def test_character_skill_only_for_that_character(db):
    assert "analyze" in tamer_progression(15, "ken", db).support_skills
    assert "analyze" not in tamer_progression(15, "leo", db).support_skills
    assert tamer_progression(15, None, db).support_skills == ["cheer", "first_aid", "rally"]
