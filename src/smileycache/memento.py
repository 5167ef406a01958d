"""Memento codec and per-cell cache persistence.

A cache is generated once; after that its state comes from the latest saved
memento rather than from the generator.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from .generator import CacheGenerator
from .models import Cache, Cell, Item
from .world import cell_key

CellFactory = Callable[[int, int], Cell]


class CorruptMementoError(ValueError):
    """Raised when a serialized memento cannot be decoded."""


def _cell_payload(cell: Cell) -> dict[str, int]:
    return {"i": cell.i, "j": cell.j}


def to_memento(cache: Cache) -> str:
    """Serialize location, roll count and the full inventory."""
    payload = {
        "location": _cell_payload(cache.location),
        "numItems": cache.num_items,
        "inventory": [encode_item(item) for item in cache.inventory],
    }
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _decode_cell(raw: Any, make_cell: CellFactory) -> Cell:
    i, j = raw["i"], raw["j"]
    if not isinstance(i, int) or not isinstance(j, int) or isinstance(i, bool) or isinstance(j, bool):
        raise TypeError("cell coordinates must be integers")
    return make_cell(i, j)


def decode_item(raw: Any, make_cell: CellFactory = Cell) -> Item:
    item_type, serial = raw["type"], raw["serial"]
    if not isinstance(item_type, str) or not isinstance(serial, int) or isinstance(serial, bool):
        raise TypeError("item type must be a string and serial an integer")
    return Item(type=item_type, origin=_decode_cell(raw["origin"], make_cell), serial=serial)


def encode_item(item: Item) -> dict[str, Any]:
    return {"type": item.type, "origin": _cell_payload(item.origin), "serial": item.serial}


def from_memento(text: str, make_cell: CellFactory = Cell) -> Cache:
    """Rebuild a cache from ``to_memento`` output.

    ``make_cell`` lets callers route decoded cells through their interning map.
    """
    try:
        payload = json.loads(text)
        num_items = payload["numItems"]
        if not isinstance(num_items, int) or isinstance(num_items, bool):
            raise TypeError("numItems must be an integer")
        return Cache(
            location=_decode_cell(payload["location"], make_cell),
            num_items=num_items,
            inventory=[decode_item(raw, make_cell) for raw in payload["inventory"]],
        )
    except (ValueError, KeyError, TypeError, RecursionError) as exc:
        raise CorruptMementoError(f"Cannot decode cache memento: {exc}") from exc


class MementoStore:
    """Maps ``"i,j"`` cell keys to cache mementos."""

    def __init__(
        self,
        generator: CacheGenerator,
        *,
        make_cell: CellFactory = Cell,
        logger: logging.Logger | None = None,
    ) -> None:
        self._generator = generator
        self._make_cell = make_cell
        self._logger = logger or logging.getLogger("smileycache.memento")
        self._mementos: dict[str, str] = {}

    @staticmethod
    def key(cell: Cell) -> str:
        return cell_key(cell.i, cell.j)

    def save(self, cache: Cache) -> None:
        self._mementos[self.key(cache.location)] = to_memento(cache)

    def load(self, cell: Cell) -> Cache | None:
        key = self.key(cell)
        text = self._mementos.get(key)
        if text is None:
            return None

        try:
            return from_memento(text, self._make_cell)
        except CorruptMementoError:
            self._logger.warning("memento_corrupt", extra={"cell_key": key})
            del self._mementos[key]
            return None

    def get_or_create(self, cell: Cell) -> Cache:
        """Restore the saved cache, or generate and immediately save a new one."""
        cache = self.load(cell)
        if cache is not None:
            return cache

        cache = self._generator.new_cache(cell)
        self.save(cache)
        self._logger.info(
            "cache_created",
            extra={"cell_key": self.key(cell), "num_items": cache.num_items},
        )
        return cache

    def clear(self) -> None:
        self._mementos.clear()

    def dump(self) -> str:
        """Serialize the whole memento map for durable storage."""
        return json.dumps(self._mementos, ensure_ascii=False)

    def restore(self, text: str | None) -> None:
        """Replace the memento map from ``dump`` output; malformed input leaves it empty."""
        self._mementos = {}
        if text is None:
            return

        try:
            payload = json.loads(text)
        except (ValueError, RecursionError):
            self._logger.warning("cache_data_corrupt")
            return

        if not isinstance(payload, dict):
            self._logger.warning("cache_data_corrupt")
            return

        for key, value in payload.items():
            if isinstance(value, str):
                self._mementos[key] = value
            else:
                self._logger.warning("memento_corrupt", extra={"cell_key": key})

    def __contains__(self, cell: object) -> bool:
        return isinstance(cell, Cell) and self.key(cell) in self._mementos

    def __len__(self) -> int:
        return len(self._mementos)
