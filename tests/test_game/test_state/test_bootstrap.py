import pytest

from eonengine.config import GameConfig
from eonengine.errors import DataLoadError
from eonengine.resources.storage import FileStorage, MemoryStorage
from eontamers.bootstrap import create_game


def test_default_game_is_in_memory():
    game = create_game()

    assert isinstance(game.storage, MemoryStorage)
    assert "pyrocat" in game.db.species
    assert not game.manager.load_autosave()
    assert game.manager.start_new_game("ken", "droplet", "Misty").success


def test_game_persists_to_save_dir(tmp_path):
    game = create_game(GameConfig(save_dir=tmp_path))
    game.manager.start_new_game("leo", "pyrocat", "Ash")
    game.manager.manual_save(0)

    assert isinstance(game.storage, FileStorage)

    reopened = create_game(GameConfig(save_dir=tmp_path))

    assert reopened.manager.load_autosave()
    assert reopened.manager.state.tamer.name == "Ash"
    assert reopened.slots.get_slot_metadata(0).tamer_name == "Ash"


def test_autosave_timer_saves_last_played_slot(tmp_path):
    game = create_game(GameConfig(save_dir=tmp_path, autosave_interval=5))
    game.manager.start_new_game("leo", "pyrocat", "Ash")
    game.manager.manual_save(1)
    game.manager.state.tamer.gold = 4321

    game.manager.update(5)

    assert game.slots.get_slot_metadata(1).gold == 4321


def test_seeded_games_are_deterministic():
    a = create_game(GameConfig(rng_seed=7))
    b = create_game(GameConfig(rng_seed=7))

    assert [a.rng.next() for _ in range(5)] == [b.rng.next() for _ in range(5)]


def test_missing_data_dir(tmp_path):
    with pytest.raises(DataLoadError):
        create_game(GameConfig(data_dir=tmp_path / "nowhere"))
