"""Grid model mapping geographic points to interned cells."""

from __future__ import annotations

import math

from .models import Cell, Geobounds, Geopoint

CELL_DEGREES = 1e-4
NULL_ISLAND = Geopoint(lat=0.0, lng=0.0)


def cell_key(i: int, j: int) -> str:
    return f"{i},{j}"


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class World:
    """Owns the cell interning map and the fixed cell size.

    Cells are anchored at (0, 0), so boundaries do not depend on where play began.
    """

    def __init__(self, cell_degrees: float = CELL_DEGREES) -> None:
        self.cell_degrees = cell_degrees
        self._known_cells: dict[str, Cell] = {}

    @property
    def known_cell_count(self) -> int:
        return len(self._known_cells)

    def cell(self, i: int, j: int) -> Cell:
        """Return the interned cell for ``(i, j)``, constructing it on first use."""
        key = cell_key(i, j)
        known = self._known_cells.get(key)
        if known is None:
            known = Cell(i=int(i), j=int(j))
            self._known_cells[key] = known
        return known

    def cell_for_point(self, point: Geopoint) -> Cell:
        return self.cell(
            round_half_away(point.lat / self.cell_degrees),
            round_half_away(point.lng / self.cell_degrees),
        )

    def cell_bounds(self, cell: Cell) -> Geobounds:
        size = self.cell_degrees
        return Geobounds(
            start=Geopoint(lat=NULL_ISLAND.lat + cell.i * size, lng=NULL_ISLAND.lng + cell.j * size),
            end=Geopoint(lat=NULL_ISLAND.lat + (cell.i + 1) * size, lng=NULL_ISLAND.lng + (cell.j + 1) * size),
        )

    def neighborhood(self, center: Cell, radius: int) -> list[Cell]:
        """Cells offset by ``[-radius, radius)`` on both axes, row by row."""
        return [
            self.cell(center.i + di, center.j + dj)
            for di in range(-radius, radius)
            for dj in range(-radius, radius)
        ]
