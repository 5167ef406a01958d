"""Deterministic cache contents derived from cell coordinates."""

from __future__ import annotations

import logging
import math

from .catalog import ItemCatalog
from .models import Cache, Cell, Item
from .rng import Luck, luck, luck_key

MAX_CACHE_ITEMS = 10
CACHE_SPAWN_PROBABILITY = 0.1


class CacheGenerator:
    """Rolls cache presence, item count and item types from ``(cell, local index)`` keys only.

    Nothing here depends on generation order, so exploring cells in any order
    yields the same contents.
    """

    def __init__(
        self,
        catalog: ItemCatalog,
        *,
        max_items: int = MAX_CACHE_ITEMS,
        spawn_probability: float = CACHE_SPAWN_PROBABILITY,
        rng: Luck = luck,
        logger: logging.Logger | None = None,
    ) -> None:
        self._catalog = catalog
        self._max_items = max_items
        self._spawn_probability = spawn_probability
        self._rng = rng
        self._logger = logger or logging.getLogger("smileycache.generator")

    @property
    def max_items(self) -> int:
        return self._max_items

    def has_cache(self, cell: Cell) -> bool:
        return self._rng(luck_key(cell.i, cell.j)) < self._spawn_probability

    def item_count_for(self, cell: Cell) -> int:
        return math.floor(self._rng(luck_key(cell.i, cell.j, "initialValue")) * self._max_items)

    def item_type_for(self, cell: Cell, index: int) -> str:
        roll = math.floor(self._rng(luck_key(cell.i, cell.j, index)) * len(self._catalog))
        return self._catalog[roll]

    def fill_cache(self, cache: Cache) -> Cache:
        cell = cache.location
        cache.num_items = self.item_count_for(cell)
        cache.inventory = [
            Item(type=self.item_type_for(cell, index), origin=cell, serial=index)
            for index in range(cache.num_items)
        ]
        self._logger.debug(
            "cache_generated",
            extra={"cell_i": cell.i, "cell_j": cell.j, "num_items": cache.num_items},
        )
        return cache

    def new_cache(self, cell: Cell) -> Cache:
        return self.fill_cache(Cache(location=cell))
