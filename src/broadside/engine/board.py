"""Single-player board management for the Battleship engine."""

from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass, field
from enum import Enum

from broadside.telemetry import get_meter, get_tracer

from .ship import (
    FLEET,
    GRID_SIZE,
    Coordinate,
    Ship,
    ShipStatus,
    ShipType,
    build_ship_cells,
)

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.board")
meter = get_meter("broadside.engine.board")

MAX_PLACEMENT_ATTEMPTS = 5000

PLACEMENT_COUNTER = meter.create_counter(
    "broadside_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "broadside_engine_shots",
    unit="1",
    description="Shots received by a board",
)


class ShotOutcome(Enum):
    """Result of a single shot."""

    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"


@dataclass(frozen=True)
class ShotResult:
    outcome: ShotOutcome
    ship_id: str | None = None


@dataclass
class Cell:
    """A grid cell. ``ship_id`` is a key into ``Board.ships``; None is water."""

    ship_id: str | None = None
    shot: bool = False


@dataclass(frozen=True)
class FleetShipStatus:
    """Display row for one catalog entry."""

    ship_type: ShipType
    size: int
    status: ShipStatus
    hits_taken: int


def _empty_grid() -> list[list[Cell]]:
    return [[Cell() for _ in range(GRID_SIZE)] for _ in range(GRID_SIZE)]


@dataclass
class Board:
    """Represents a player's 10×10 grid and fleet of ships."""

    grid: list[list[Cell]] = field(default_factory=_empty_grid)
    ships: dict[str, Ship] = field(default_factory=dict)
    owner: str = "unknown"

    @property
    def size(self) -> int:
        return GRID_SIZE

    def is_valid_coordinate(self, coord: Coordinate) -> bool:
        """Check whether a coordinate lies inside the board boundaries."""
        return coord.in_bounds(self.size)

    def cell(self, coord: Coordinate) -> Cell:
        if not self.is_valid_coordinate(coord):
            raise ValueError(f"Coordinate ({coord.row}, {coord.col}) is off the board.")
        return self.grid[coord.row][coord.col]

    def has_already_shot(self, coord: Coordinate) -> bool:
        return self.cell(coord).shot

    def can_place_ship_at(self, start: Coordinate, size: int, horizontal: bool) -> bool:
        """True if every cell is on the board and unoccupied. Ships may touch."""
        for coord in build_ship_cells(start, size, horizontal):
            if not self.is_valid_coordinate(coord):
                return False
            if self.cell(coord).ship_id is not None:
                return False
        return True

    def place_ship_at(
        self, ship_type: ShipType, start: Coordinate, size: int, horizontal: bool
    ) -> str | None:
        """Place a ship and return its id, or None if the placement is invalid."""
        with tracer.start_as_current_span("board.place_ship") as span:
            span.set_attribute("ship.type", ship_type.value)
            span.set_attribute("ship.length", size)
            span.set_attribute("ship.start.row", start.row)
            span.set_attribute("ship.start.col", start.col)
            span.set_attribute("board.owner", self.owner)
            details = {
                "owner": self.owner,
                "ship_type": ship_type.value,
                "horizontal": horizontal,
                "row": start.row,
                "col": start.col,
            }
            if not self.can_place_ship_at(start, size, horizontal):
                PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
                logger.warning("ship_placement_failed", extra=details)
                return None

            ship_id = f"{ship_type.value}-{len(self.ships)}"
            ship = Ship(
                id=ship_id,
                ship_type=ship_type,
                size=size,
                cells=tuple(build_ship_cells(start, size, horizontal)),
            )
            for coord in ship.cells:
                self.cell(coord).ship_id = ship_id
            self.ships[ship_id] = ship
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info("ship_placed", extra={**details, "ship_id": ship_id})
            return ship_id

    def random_placement(self, rng: random.Random) -> None:
        """Clear the board and place one ship per catalog entry at random."""
        with tracer.start_as_current_span("board.random_placement") as span:
            span.set_attribute("board.owner", self.owner)
            self.grid = _empty_grid()
            self.ships = {}
            for spec in FLEET:
                for attempt in range(1, MAX_PLACEMENT_ATTEMPTS + 1):
                    horizontal = rng.random() < 0.5
                    start = Coordinate(
                        int(rng.random() * self.size), int(rng.random() * self.size)
                    )
                    if self.can_place_ship_at(start, spec.size, horizontal):
                        self.place_ship_at(spec.ship_type, start, spec.size, horizontal)
                        logger.debug(
                            "random_ship_placed",
                            extra={
                                "ship_type": spec.ship_type.value,
                                "attempts": attempt,
                                "owner": self.owner,
                            },
                        )
                        break
                else:
                    logger.error(
                        "random_placement_exhausted",
                        extra={
                            "ship_type": spec.ship_type.value,
                            "attempts": MAX_PLACEMENT_ATTEMPTS,
                            "owner": self.owner,
                        },
                    )
                    raise RuntimeError(f"Failed to place ship: {spec.ship_type.value}")

    def apply_shot(self, coord: Coordinate) -> ShotResult:
        """Register a shot at this board and return its outcome."""
        with tracer.start_as_current_span("board.apply_shot") as span:
            span.set_attribute("shot.row", coord.row)
            span.set_attribute("shot.col", coord.col)
            span.set_attribute("board.owner", self.owner)
            if not self.is_valid_coordinate(coord):
                logger.error(
                    "shot_out_of_bounds",
                    extra={"row": coord.row, "col": coord.col, "owner": self.owner},
                )
                raise ValueError("Shot out of bounds.")
            cell = self.cell(coord)
            if cell.shot:
                logger.error(
                    "shot_duplicate",
                    extra={"row": coord.row, "col": coord.col, "owner": self.owner},
                )
                raise ValueError("Cell has already been targeted.")

            cell.shot = True
            if cell.ship_id is None:
                result = ShotResult(ShotOutcome.MISS)
            else:
                ship = self.ships[cell.ship_id]
                sunk = ship.hit(coord)
                result = ShotResult(ShotOutcome.SUNK if sunk else ShotOutcome.HIT, ship.id)

            span.set_attribute("shot.outcome", result.outcome.value)
            SHOT_COUNTER.add(1, attributes={"outcome": result.outcome.value, "owner": self.owner})
            logger.info(
                f"shot_{result.outcome.value}",
                extra={
                    "row": coord.row,
                    "col": coord.col,
                    "ship_id": result.ship_id,
                    "owner": self.owner,
                },
            )
            return result

    def all_ships_sunk(self) -> bool:
        """Check whether the player has any surviving ships."""
        return all(ship.sunk for ship in self.ships.values())

    def get_ship_cells(self, ship_id: str) -> list[Coordinate]:
        ship = self.ships.get(ship_id)
        return ship.coordinates() if ship else []

    def is_ship_sunk(self, ship_id: str) -> bool:
        ship = self.ships.get(ship_id)
        return bool(ship and ship.sunk)

    def get_ship_type(self, ship_id: str) -> ShipType | None:
        ship = self.ships.get(ship_id)
        return ship.ship_type if ship else None

    def fleet_status(self) -> list[FleetShipStatus]:
        """Report one row per catalog entry, in catalog order.

        A ship type not yet placed reads as Alive with no hits.
        """
        by_type: dict[ShipType, Ship] = {}
        for ship in self.ships.values():
            # First placed ship of a type wins.
            by_type.setdefault(ship.ship_type, ship)
        rows: list[FleetShipStatus] = []
        for spec in FLEET:
            ship = by_type.get(spec.ship_type)
            rows.append(
                FleetShipStatus(
                    ship_type=spec.ship_type,
                    size=spec.size,
                    status=ship.status() if ship else ShipStatus.ALIVE,
                    hits_taken=ship.hit_count() if ship else 0,
                )
            )
        return rows

    def unshot_coordinates(self) -> list[Coordinate]:
        """Return every coordinate not yet targeted, row by row."""
        return [
            Coordinate(row, col)
            for row in range(self.size)
            for col in range(self.size)
            if not self.grid[row][col].shot
        ]

    def copy(self) -> Board:
        return copy.deepcopy(self)

    def reset_for_rematch(self) -> Board:
        """Return a fresh board with this layout and no shots or hits."""
        fresh = Board(owner=self.owner)
        for row in range(self.size):
            for col in range(self.size):
                fresh.grid[row][col].ship_id = self.grid[row][col].ship_id
        for ship_id, ship in self.ships.items():
            fresh.ships[ship_id] = Ship(
                id=ship.id, ship_type=ship.ship_type, size=ship.size, cells=ship.cells
            )
        return fresh


def create_empty_board(owner: str = "unknown") -> Board:
    return Board(owner=owner)


def create_random_board(rng: random.Random | None = None, owner: str = "unknown") -> Board:
    """Build a board with the full fleet placed at random."""
    board = Board(owner=owner)
    board.random_placement(rng or random.Random())
    return board
