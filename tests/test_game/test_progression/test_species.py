from eontamers.components.tamer import Tamer
from eontamers.progression.species import create_creature, place_creature


def test_party_fills_before_storage(db):
    tamer = Tamer(unlocked_party_slots=1)
    first = create_creature("pyrocat", 3, db)
    second = create_creature("droplet", 3, db)

    assert place_creature(tamer, first)
    assert place_creature(tamer, second)

    assert tamer.party == [first]
    assert tamer.storage == [second]
    assert tamer.collection == ["pyrocat", "droplet"]


def test_collection_has_no_duplicates(db):
    tamer = Tamer()

    place_creature(tamer, create_creature("pyrocat", 1, db))
    place_creature(tamer, create_creature("pyrocat", 2, db))

    assert tamer.collection == ["pyrocat"]


def test_full_party_and_storage(db):
    tamer = Tamer(unlocked_party_slots=1, unlocked_storage_slots=0)
    place_creature(tamer, create_creature("pyrocat", 1, db))

    assert not place_creature(tamer, create_creature("droplet", 1, db))
    assert tamer.storage == []
    assert tamer.collection == ["pyrocat"]
