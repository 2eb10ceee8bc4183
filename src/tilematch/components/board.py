from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tilematch.exceptions import OutOfBounds

Position = Tuple[int, int]


@dataclass(slots=True)
class Board:
    """Grid of tile entity ids, ``None`` marking an empty slot.

    Row 0 is the top row; gravity pulls tiles towards ``rows - 1``. The grid is
    sized once and never resized. Reads and writes are bounds-checked.
    """
    rows: int
    cols: int
    cells: List[List[Optional[int]]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = [[None] * self.cols for _ in range(self.rows)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get(self, row: int, col: int) -> Optional[int]:
        if not self.in_bounds(row, col):
            raise OutOfBounds(row, col, self.rows, self.cols)
        return self.cells[row][col]

    def set(self, row: int, col: int, entity: Optional[int]) -> None:
        if not self.in_bounds(row, col):
            raise OutOfBounds(row, col, self.rows, self.cols)
        self.cells[row][col] = entity

    def positions(self) -> List[Position]:
        return [(r, c) for r in range(self.rows) for c in range(self.cols)]

    def occupied_positions(self) -> List[Position]:
        """Row-major list of positions holding a tile."""
        return [(r, c) for r in range(self.rows) for c in range(self.cols) if self.cells[r][c] is not None]

    def empty_positions(self) -> List[Position]:
        return [(r, c) for r in range(self.rows) for c in range(self.cols) if self.cells[r][c] is None]
