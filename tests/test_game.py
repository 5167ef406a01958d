from __future__ import annotations

import json

import pytest

from smileycache.catalog import ItemCatalog
from smileycache.game import CACHE_KEY, INVENTORY_KEY, LOCATION_KEY, MOVEMENT_KEY, Game
from smileycache.generator import CacheGenerator
from smileycache.models import Cell, Direction, Geopoint, Item
from smileycache.storage import InMemoryKeyValueStore
from smileycache.world import World

START = Geopoint(lat=0.00052, lng=0.00052)


def _scenario_luck(key: str) -> float:
    # cell (5, 5) rolls three items A, B, C; every cell hosts a cache
    values = {"5,5,initialValue": 0.35, "5,5,0": 0.1, "5,5,1": 0.4, "5,5,2": 0.7}
    return values.get(key, 0.05)


def _game(store: InMemoryKeyValueStore | None = None) -> Game:
    generator = CacheGenerator(ItemCatalog(types=("A", "B", "C")), max_items=10, rng=_scenario_luck)
    return Game(world=World(), generator=generator, store=store or InMemoryKeyValueStore(), start=START)


def test_defaults_without_saved_state() -> None:
    game = _game()

    state = game.load()

    assert state.location == START
    assert state.movement_history == [START]
    assert state.inventory == []
    assert game.player_cell() == Cell(i=5, j=5)


def test_collect_is_lifo_and_persists() -> None:
    store = InMemoryKeyValueStore()
    game = _game(store)
    cache = game.cache_at(game.world.cell(5, 5))

    collected = game.collect(cache)

    assert collected == Item(type="C", origin=Cell(i=5, j=5), serial=2)
    assert [item.type for item in cache.inventory] == ["A", "B"]
    assert game.player_inventory == [collected]

    reloaded = game.mementos.load(Cell(i=5, j=5))
    assert reloaded.num_items == 3
    assert [item.type for item in reloaded.inventory] == ["A", "B"]
    assert json.loads(store.get(INVENTORY_KEY))[0]["serial"] == 2


def test_deposit_moves_player_item_into_cache() -> None:
    game = _game()
    home = game.cache_at(game.world.cell(5, 5))
    other = game.cache_at(game.world.cell(6, 6))
    item = game.collect(home)
    before = len(other.inventory)

    deposited = game.deposit(other)

    assert deposited is item
    assert game.player_inventory == []
    assert len(other.inventory) == before + 1
    assert other.inventory[-1] == item
    assert game.mementos.load(Cell(i=6, j=6)).inventory[-1] == item


def test_transfers_on_empty_source_do_not_save() -> None:
    store = InMemoryKeyValueStore()
    game = _game(store)
    cache = game.cache_at(game.world.cell(5, 5))
    cache.inventory.clear()

    assert game.collect(cache) is None
    assert game.deposit(cache) is None
    assert store.get(INVENTORY_KEY) is None


def test_cache_at_returns_none_for_empty_cells() -> None:
    generator = CacheGenerator(ItemCatalog(types=("A",)), rng=lambda key: 0.5)
    game = Game(world=World(), generator=generator, store=InMemoryKeyValueStore(), start=START)

    assert game.cache_at(game.world.cell(1, 1)) is None
    assert game.visible_caches(radius=2) == []


def test_visible_caches_scan_neighborhood() -> None:
    game = _game()

    caches = game.visible_caches(radius=1)

    assert [cache.location for cache in caches] == [Cell(i=4, j=4), Cell(i=4, j=5), Cell(i=5, j=4), Cell(i=5, j=5)]
    assert len(game.mementos) == 4


@pytest.mark.parametrize(
    ("direction", "expected"),
    [
        (Direction.NORTH, Cell(i=6, j=5)),
        (Direction.SOUTH, Cell(i=4, j=5)),
        (Direction.EAST, Cell(i=5, j=6)),
        (Direction.WEST, Cell(i=5, j=4)),
    ],
)
def test_move_steps_one_cell(direction: Direction, expected: Cell) -> None:
    game = _game()

    game.move(direction)

    assert game.player_cell() == expected
    assert len(game.player.movement_history) == 2


def test_state_survives_restart() -> None:
    store = InMemoryKeyValueStore()
    game = _game(store)
    cache = game.cache_at(game.world.cell(5, 5))
    game.collect(cache)
    game.move(Direction.NORTH)

    restarted = _game(store)
    restarted.load()

    assert restarted.location == game.location
    assert restarted.player.movement_history == game.player.movement_history
    assert restarted.player_inventory == game.player_inventory
    assert [item.serial for item in restarted.cache_at(restarted.world.cell(5, 5)).inventory] == [0, 1]


def test_loaded_items_are_interned() -> None:
    store = InMemoryKeyValueStore()
    game = _game(store)
    game.collect(game.cache_at(game.world.cell(5, 5)))

    restarted = _game(store)
    restarted.load()

    assert restarted.player_inventory[0].origin is restarted.world.cell(5, 5)


def test_corrupt_keys_fall_back_independently() -> None:
    store = InMemoryKeyValueStore(
        {
            LOCATION_KEY: json.dumps({"lat": 1.0, "lng": 2.0}),
            MOVEMENT_KEY: "{broken",
            INVENTORY_KEY: json.dumps([{"type": "A"}]),
            CACHE_KEY: "[]",
        }
    )
    game = _game(store)

    state = game.load()

    assert state.location == Geopoint(lat=1.0, lng=2.0)
    assert state.movement_history == [START]
    assert state.inventory == []
    assert len(game.mementos) == 0


def test_reset_clears_durable_and_memory_state() -> None:
    store = InMemoryKeyValueStore({"unrelated": "keep"})
    game = _game(store)
    game.collect(game.cache_at(game.world.cell(5, 5)))
    game.move(Direction.EAST)

    game.reset()

    for key in (LOCATION_KEY, MOVEMENT_KEY, INVENTORY_KEY, CACHE_KEY):
        assert key not in store
    assert store.get("unrelated") == "keep"
    assert game.location == START
    assert game.player_inventory == []
    assert len(game.mementos) == 0
    assert len(game.cache_at(game.world.cell(5, 5)).inventory) == 3


@pytest.mark.parametrize(
    "location",
    [
        '{"lat": 1e999, "lng": 0}',
        '{"lat": 0, "lng": -1e999}',
        '{"lat": 1' + "0" * 400 + ', "lng": 0}',
        '{"lat": ' + "9" * 5000 + ', "lng": 0}',
    ],
)
def test_non_finite_saved_location_falls_back_to_start(location: str) -> None:
    store = InMemoryKeyValueStore({LOCATION_KEY: location, MOVEMENT_KEY: "[" + location + "]"})
    game = _game(store)

    state = game.load()

    assert state.location == START
    assert state.movement_history == [START]
    assert game.player_cell() == Cell(i=5, j=5)
    assert len(game.visible_caches(radius=1)) == 4
