"""Tests for coordinates, the fleet catalog and ship records."""

import pytest

from broadside.engine.ship import (
    FLEET,
    Coordinate,
    Ship,
    ShipStatus,
    ShipType,
    build_ship_cells,
)


def test_fleet_catalog_order_and_sizes() -> None:
    assert [(spec.ship_type, spec.size) for spec in FLEET] == [
        (ShipType.CARRIER, 5),
        (ShipType.BATTLESHIP, 4),
        (ShipType.CRUISER, 3),
        (ShipType.SUBMARINE, 3),
        (ShipType.DESTROYER, 2),
    ]
    assert len(ShipType) == 5
    assert ShipType.SUBMARINE.length == 3


def test_coordinate_equality_and_bounds() -> None:
    assert Coordinate(3, 4) == Coordinate(3, 4)
    assert len({Coordinate(3, 4), Coordinate(3, 4)}) == 1
    assert Coordinate(0, 9).in_bounds()
    assert not Coordinate(10, 0).in_bounds()
    assert not Coordinate(0, -1).in_bounds()


def test_neighbours_are_up_down_left_right() -> None:
    assert Coordinate(4, 4).neighbours() == [
        Coordinate(3, 4),
        Coordinate(5, 4),
        Coordinate(4, 3),
        Coordinate(4, 5),
    ]


def test_build_ship_cells_horizontal_and_vertical() -> None:
    assert build_ship_cells(Coordinate(0, 0), 2, True) == [Coordinate(0, 0), Coordinate(0, 1)]
    assert build_ship_cells(Coordinate(2, 7), 3, False) == [
        Coordinate(2, 7),
        Coordinate(3, 7),
        Coordinate(4, 7),
    ]


def test_build_ship_cells_does_not_check_bounds() -> None:
    cells = build_ship_cells(Coordinate(9, 9), 2, True)
    assert cells[-1] == Coordinate(9, 10)


def test_ship_hit_and_sink() -> None:
    cells = tuple(build_ship_cells(Coordinate(3, 3), 3, False))
    ship = Ship("Cruiser-0", ShipType.CRUISER, 3, cells)
    assert ship.status() is ShipStatus.ALIVE
    for idx, coord in enumerate(ship.coordinates(), start=1):
        assert ship.hit(coord) is (idx == 3)
        assert ship.sunk is (idx == 3)
        if idx < 3:
            assert ship.status() is ShipStatus.DAMAGED
    assert ship.status() is ShipStatus.SUNK


def test_ship_rejects_foreign_cell() -> None:
    ship = Ship("Destroyer-0", ShipType.DESTROYER, 2, (Coordinate(0, 0), Coordinate(0, 1)))
    with pytest.raises(ValueError):
        ship.hit(Coordinate(5, 5))
