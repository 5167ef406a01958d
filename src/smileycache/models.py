from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True, slots=True)
class Geopoint:
    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class Geobounds:
    """Rectangular region between two corners of a cell."""

    start: Geopoint
    end: Geopoint


@dataclass(frozen=True, slots=True)
class Cell:
    """Grid cell identified by integer coordinates, not by its lat/lng."""

    i: int
    j: int


@dataclass(frozen=True, slots=True)
class Item:
    type: str
    origin: Cell
    serial: int


@dataclass(slots=True)
class Cache:
    """Mutable cache state at a cell.

    ``num_items`` is the generation roll and does not follow the live inventory.
    """

    location: Cell
    num_items: int = 0
    inventory: list[Item] = field(default_factory=list)


class Direction(str, Enum):
    """Single-cell movement steps."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def offset(self) -> tuple[int, int]:
        return _DIRECTION_OFFSETS[self]


_DIRECTION_OFFSETS = {
    Direction.NORTH: (1, 0),
    Direction.SOUTH: (-1, 0),
    Direction.EAST: (0, 1),
    Direction.WEST: (0, -1),
}


def coords(cell: Cell) -> str:
    return f"({cell.i}, {cell.j})"


def item_name(item: Item) -> str:
    """Return the ``i:j#serial`` label for an item."""
    return f"{item.origin.i}:{item.origin.j}#{item.serial}"


def describe_items(items: list[Item], *, with_names: bool = False) -> str:
    if with_names:
        return ", ".join(f"{item.type}{item_name(item)}" for item in items)
    return ", ".join(item.type for item in items)
