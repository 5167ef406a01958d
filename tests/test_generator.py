from __future__ import annotations

from smileycache.catalog import ItemCatalog, load_catalog
from smileycache.generator import CacheGenerator
from smileycache.models import Cache, Cell, Item


class ScriptedLuck:
    """Returns fixed values per key and records every key requested."""

    def __init__(self, values: dict[str, float], default: float = 0.0) -> None:
        self.values = values
        self.default = default
        self.keys: list[str] = []

    def __call__(self, key: str) -> float:
        self.keys.append(key)
        return self.values.get(key, self.default)


CATALOG = ItemCatalog(types=("A", "B", "C", "D"))


def test_scripted_cell_produces_expected_items() -> None:
    rng = ScriptedLuck({"5,5,initialValue": 0.35, "5,5,0": 0.1, "5,5,1": 0.3, "5,5,2": 0.6})
    generator = CacheGenerator(CATALOG, max_items=10, rng=rng)
    cell = Cell(i=5, j=5)

    cache = generator.new_cache(cell)

    assert cache.num_items == 3
    assert cache.inventory == [
        Item(type="A", origin=cell, serial=0),
        Item(type="B", origin=cell, serial=1),
        Item(type="C", origin=cell, serial=2),
    ]


def test_item_count_stays_below_max() -> None:
    generator = CacheGenerator(CATALOG, max_items=10, rng=lambda key: 0.9999999)

    assert generator.item_count_for(Cell(i=0, j=0)) == 9


def test_generation_is_independent_of_order() -> None:
    catalog = load_catalog()
    first = CacheGenerator(catalog)
    second = CacheGenerator(catalog)
    cells = [Cell(i=i, j=j) for i in range(-3, 3) for j in range(-3, 3)]

    forward = {cell: first.new_cache(cell) for cell in cells}
    backward = {cell: second.new_cache(cell) for cell in reversed(cells)}

    assert forward == backward


def test_serials_are_cell_local_indexes() -> None:
    generator = CacheGenerator(load_catalog(), rng=lambda key: 0.55)

    one = generator.new_cache(Cell(i=1, j=1))
    two = generator.new_cache(Cell(i=2, j=2))

    assert [item.serial for item in one.inventory] == [0, 1, 2, 3, 4]
    assert [item.serial for item in two.inventory] == [0, 1, 2, 3, 4]


def test_fill_cache_replaces_existing_inventory() -> None:
    generator = CacheGenerator(CATALOG, rng=lambda key: 0.25)
    cell = Cell(i=7, j=-7)
    cache = Cache(location=cell, num_items=1, inventory=[Item(type="Z", origin=cell, serial=99)])

    generator.fill_cache(cache)

    assert cache.num_items == 2
    assert [item.type for item in cache.inventory] == ["B", "B"]


def test_has_cache_uses_spawn_probability() -> None:
    rng = ScriptedLuck({"0,0": 0.05, "0,1": 0.5})
    generator = CacheGenerator(CATALOG, spawn_probability=0.1, rng=rng)

    assert generator.has_cache(Cell(i=0, j=0)) is True
    assert generator.has_cache(Cell(i=0, j=1)) is False
    assert rng.keys == ["0,0", "0,1"]


def test_empty_roll_gives_empty_cache() -> None:
    generator = CacheGenerator(CATALOG, rng=lambda key: 0.0)

    cache = generator.new_cache(Cell(i=3, j=3))

    assert cache.num_items == 0
    assert cache.inventory == []
