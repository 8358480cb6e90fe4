from typing import Iterator, List, Optional

from pydantic import BaseModel

from gridlogic.core.exceptions import UnknownDirectionError
from gridlogic.engine.values import GRID_SIZE, SHAPES, COLORS, NUMBERS, random_element, get_color_name


# row/col offsets of the neighbor in each direction
NEIGHBOR_OFFSETS = {
    "right": (0, 1),
    "left": (0, -1),
    "above": (-1, 0),
    "below": (1, 0),
    "topLeft": (-1, -1),
    "topRight": (-1, 1),
    "bottomLeft": (1, -1),
    "bottomRight": (1, 1),
}


class Position(BaseModel):
    row: int
    col: int


class Cell(BaseModel):
    """One grid cell. Mutable while the grid is being built."""
    shape: str
    color: str
    number: int
    position: Position

    @property
    def row(self) -> int:
        return self.position.row

    @property
    def col(self) -> int:
        return self.position.col


class Grid:
    """Row-major square grid of cells, one per position"""

    def __init__(self, cells: List[Cell], size: int = GRID_SIZE):
        if len(cells) != size * size:
            raise ValueError(f"A {size}x{size} grid needs {size * size} cells, got {len(cells)}")
        self.size = size
        self.cells = cells

    @classmethod
    def random(cls, size: int = GRID_SIZE) -> "Grid":
        """Grid with uniformly random shape, color and number in every cell"""
        cells = [
            Cell(
                shape=random_element(SHAPES),
                color=random_element(COLORS),
                number=random_element(NUMBERS),
                position=Position(row=index // size, col=index % size),
            )
            for index in range(size * size)
        ]
        return cls(cells, size)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def cell_at(self, row: int, col: int) -> Optional[Cell]:
        if not self.in_bounds(row, col):
            return None
        return self.cells[row * self.size + col]

    def neighbor(self, cell: Cell, direction: str) -> Optional[Cell]:
        """The adjacent cell in a direction, or None at the grid boundary"""
        if direction not in NEIGHBOR_OFFSETS:
            raise UnknownDirectionError(direction)
        row_offset, col_offset = NEIGHBOR_OFFSETS[direction]
        return self.cell_at(cell.row + row_offset, cell.col + col_offset)

    def snapshot(self) -> list[dict]:
        """Read-only copy of the cells for renderers and persistence"""
        return [
            {
                "shape": cell.shape,
                "color": cell.color,
                "color_name": get_color_name(cell.color),
                "number": cell.number,
                "row": cell.row,
                "col": cell.col,
            }
            for cell in self.cells
        ]

    @classmethod
    def from_snapshot(cls, snapshot: list[dict]) -> "Grid":
        size = int(round(len(snapshot) ** 0.5))
        cells = [
            Cell(
                shape=item["shape"],
                color=item["color"],
                number=item["number"],
                position=Position(row=item["row"], col=item["col"]),
            )
            for item in sorted(snapshot, key=lambda c: (c["row"], c["col"]))
        ]
        return cls(cells, size)
