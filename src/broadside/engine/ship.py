"""Coordinates, the fleet catalog and the ship record."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

GRID_SIZE = 10


@dataclass(frozen=True)
class Coordinate:
    """Immutable board coordinate, also used as the cell key."""

    row: int
    col: int

    def in_bounds(self, size: int = GRID_SIZE) -> bool:
        return 0 <= self.row < size and 0 <= self.col < size

    def neighbours(self) -> list[Coordinate]:
        """Return the four orthogonal neighbours: up, down, left, right."""
        return [
            Coordinate(self.row - 1, self.col),
            Coordinate(self.row + 1, self.col),
            Coordinate(self.row, self.col - 1),
            Coordinate(self.row, self.col + 1),
        ]


class ShipType(Enum):
    """All supported ship classes."""

    CARRIER = "Carrier"
    BATTLESHIP = "Battleship"
    CRUISER = "Cruiser"
    SUBMARINE = "Submarine"
    DESTROYER = "Destroyer"

    @property
    def length(self) -> int:
        """Return the number of contiguous cells the ship occupies."""
        return _LENGTHS[self]


@dataclass(frozen=True)
class ShipSpec:
    """Catalog entry pairing a ship class with its length."""

    ship_type: ShipType
    size: int


# Order is placement order during manual setup and display order in fleet status.
FLEET: tuple[ShipSpec, ...] = (
    ShipSpec(ShipType.CARRIER, 5),
    ShipSpec(ShipType.BATTLESHIP, 4),
    ShipSpec(ShipType.CRUISER, 3),
    ShipSpec(ShipType.SUBMARINE, 3),
    ShipSpec(ShipType.DESTROYER, 2),
)

_LENGTHS: dict[ShipType, int] = {spec.ship_type: spec.size for spec in FLEET}


class ShipStatus(Enum):
    """Damage state reported in fleet status."""

    ALIVE = "Alive"
    DAMAGED = "Damaged"
    SUNK = "Sunk"


def build_ship_cells(start: Coordinate, size: int, horizontal: bool) -> list[Coordinate]:
    """Return ``size`` cells from ``start`` along the row or column.

    No bounds checking happens here; callers validate the result.
    """
    cells: list[Coordinate] = []
    for offset in range(size):
        if horizontal:
            cells.append(Coordinate(start.row, start.col + offset))
        else:
            cells.append(Coordinate(start.row + offset, start.col))
    return cells


@dataclass
class Ship:
    """A placed ship. Cells are fixed at creation; hits accumulate."""

    id: str
    ship_type: ShipType
    size: int
    cells: tuple[Coordinate, ...]
    hits: set[Coordinate] = field(default_factory=set)
    sunk: bool = False

    def coordinates(self) -> list[Coordinate]:
        """Return the ordered list of coordinates occupied by this ship."""
        return list(self.cells)

    def hit(self, coord: Coordinate) -> bool:
        """Record a hit and return True once the ship is sunk."""
        if coord not in self.cells:
            raise ValueError(f"{coord} is not part of ship {self.id}.")
        self.hits.add(coord)
        if len(self.hits) >= self.size:
            self.sunk = True
        return self.sunk

    def hit_count(self) -> int:
        return len(self.hits)

    def status(self) -> ShipStatus:
        hits = self.hit_count()
        if self.sunk or hits >= self.size:
            return ShipStatus.SUNK
        if hits <= 0:
            return ShipStatus.ALIVE
        return ShipStatus.DAMAGED
