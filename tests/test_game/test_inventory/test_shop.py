import pytest

from eonengine.core.rng import RNG
from eontamers.components.state import GameState
from eontamers.components.tamer import InventoryItem, Tamer
from eontamers.data.definitions import ItemCategory
from eontamers.inventory.shop import REFRESH_INTERVAL_MS, ShopService, faction_discount


@pytest.fixture
def shop(db, rng):
    return ShopService(db, rng)


@pytest.fixture
def state():
    return GameState(tamer=Tamer(gold=150))


@pytest.mark.parametrize("reputation, discount", [
    (0, 0.0),
    (99, 0.0),
    (100, 0.05),
    (250, 0.1),
    (499, 0.1),
    (500, 0.2),
])
def test_faction_discount_tiers(reputation, discount):
    assert faction_discount(reputation) == discount


def test_best_discount_applies(shop, state):
    state.reputation = {"EMBER_CLAN": 100, "TIDE_WATCHERS": 250}
    assert shop.effective_price(state, "potion") == 45


def test_price_floors(shop, state):
    state.reputation = {"EMBER_CLAN": 100}
    # 50 * 0.95 = 47.5
    assert shop.effective_price(state, "potion") == 47


def test_buy(shop, state):
    ok, _ = shop.buy(state, "potion", 2)

    assert ok
    assert state.tamer.gold == 50
    assert state.tamer.item_quantity("potion") == 2
    assert state.counter("quest_progress_daily_spend_100") == 100
    assert state.counter("quest_progress_weekly_spend_5000") == 100


def test_buy_not_enough_gold(shop, state):
    ok, message = shop.buy(state, "capture_orb", 2)

    assert not ok
    assert message == "Not enough gold"
    assert state.tamer.gold == 150
    assert state.tamer.inventory == []


def test_buy_rejects_unknown_and_bad_quantity(shop, state):
    assert not shop.buy(state, "nothing")[0]
    assert shop.buy(state, "potion", 0) == (False, "Invalid quantity")


def test_faction_lock_then_materials(shop, state):
    state.tamer.gold = 5000

    assert shop.buy(state, "ember_charm") == (False, "Requires EMBER_CLAN reputation")

    state.reputation["EMBER_CLAN"] = 100
    assert shop.buy(state, "ember_charm") == (False, "Missing material: fire_data")

    state.tamer.inventory = [InventoryItem(item_id="fire_data", quantity=3)]
    ok, _ = shop.buy(state, "ember_charm")

    assert ok
    assert state.tamer.item_quantity("fire_data") == 0
    assert state.tamer.item_quantity("ember_charm") == 1
    assert state.tamer.gold == 5000 - 1900


def test_storage_license_adds_slots(shop, state):
    state.tamer.gold = 1000
    ok, _ = shop.buy(state, "storage_license")

    assert ok
    assert state.tamer.unlocked_storage_slots == 40
    assert state.tamer.item_quantity("storage_license") == 0


def test_buy_gear(shop, state):
    ok, _ = shop.buy(state, "wooden_staff")

    assert ok
    assert state.tamer.item_quantity("wooden_staff") == 1
    assert state.tamer.gold == 50


def test_sell_half_price(shop, state):
    state.tamer.inventory = [InventoryItem(item_id="potion", quantity=3)]
    ok, _ = shop.sell(state, "potion", 2)

    assert ok
    assert state.tamer.gold == 150 + 50
    assert state.tamer.item_quantity("potion") == 1

    assert shop.sell(state, "potion", 2) == (False, "Not enough items")


def test_refresh_stock(shop, state, db):
    stock = shop.refresh_stock(state, 1000)

    assert state.shop_stock == stock
    assert state.shop_next_refresh == 1000 + REFRESH_INTERVAL_MS
    assert "storage_license" in stock
    assert any(s in db.gear for s in stock)
    assert len(set(stock)) == len(stock)
    for item_id in stock:
        item = db.items.get(item_id)
        assert item is None or item.category != ItemCategory.MATERIAL


def test_refresh_stock_is_seeded(db):
    a = ShopService(db, RNG(5)).refresh_stock(GameState(), 0)
    b = ShopService(db, RNG(5)).refresh_stock(GameState(), 0)

    assert a == b


def test_check_refresh(shop, state):
    assert shop.check_refresh(state, 0)
    assert not shop.check_refresh(state, REFRESH_INTERVAL_MS)
    assert shop.check_refresh(state, REFRESH_INTERVAL_MS + 1)
