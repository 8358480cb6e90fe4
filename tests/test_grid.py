import random

import pytest

from conftest import make_grid
from gridlogic.core.exceptions import UnknownDirectionError
from gridlogic.engine.grid import Grid
from gridlogic.engine.values import COLORS, NUMBERS, SHAPES


def test_random_grid_fills_every_position_once():
    random.seed(7)
    grid = Grid.random()

    assert len(grid) == 25
    assert [(cell.row, cell.col) for cell in grid] == [(row, col) for row in range(5) for col in range(5)]
    for cell in grid:
        assert cell.shape in SHAPES
        assert cell.color in COLORS
        assert cell.number in NUMBERS


def test_grid_rejects_wrong_cell_count():
    with pytest.raises(ValueError):
        Grid(make_grid().cells[:24], 5)


@pytest.mark.parametrize("direction, row, col, expected", [
    ("right", 2, 2, (2, 3)),
    ("left", 2, 2, (2, 1)),
    ("above", 2, 2, (1, 2)),
    ("below", 2, 2, (3, 2)),
    ("topLeft", 2, 2, (1, 1)),
    ("topRight", 2, 2, (1, 3)),
    ("bottomLeft", 2, 2, (3, 1)),
    ("bottomRight", 2, 2, (3, 3)),
])
def test_neighbor_offsets(direction, row, col, expected):
    grid = make_grid()
    neighbor = grid.neighbor(grid.cell_at(row, col), direction)
    assert (neighbor.row, neighbor.col) == expected


@pytest.mark.parametrize("direction, row, col", [
    ("right", 0, 4),
    ("left", 3, 0),
    ("above", 0, 2),
    ("below", 4, 2),
    ("topLeft", 0, 0),
    ("bottomRight", 4, 4),
])
def test_neighbor_outside_grid_is_none(direction, row, col):
    grid = make_grid()
    assert grid.neighbor(grid.cell_at(row, col), direction) is None


def test_unknown_neighbor_direction_raises():
    grid = make_grid()
    with pytest.raises(UnknownDirectionError):
        grid.neighbor(grid.cell_at(1, 1), "north")


def test_snapshot_carries_color_names_and_restores_grid():
    random.seed(3)
    grid = Grid.random()
    snapshot = grid.snapshot()

    assert snapshot[0].keys() == {"shape", "color", "color_name", "number", "row", "col"}
    assert {item["color_name"] for item in snapshot} <= {"Pink", "Green", "Sky Blue", "Yellow", "Purple"}

    restored = Grid.from_snapshot(list(reversed(snapshot)))
    assert restored.snapshot() == snapshot
