from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np

from .pieces import Cell


Coordinate = Tuple[int, int]


def collides(cells: Iterable[Coordinate], state: np.ndarray) -> bool:
    """Return True if any (x, y) cell is illegal on ``state``.

    Cells above the board (y < 0) are only checked against the side walls so
    a pair can hang partly above the visible grid.
    """
    height, width = state.shape
    for x, y in cells:
        if x < 0 or x >= width or y >= height:
            return True
        if y >= 0 and state[y, x] != 0:
            return True
    return False


def validate(state: np.ndarray, num_colors: int) -> None:
    if state.ndim != 2:
        raise ValueError(f"Board must be 2D, got shape {state.shape}")
    if state.size and (state.min() < 0 or state.max() > num_colors):
        raise ValueError(f"Board values must be in 0..{num_colors}")


class GameGrid:
    """Fixed-size board of cell colors.

    The grid uses 0 for empty cells and 1..num_colors for colored cells.
    Row 0 is the top of the board.
    """

    def __init__(self, width: int, height: int, num_colors: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.num_colors = int(num_colors)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> int:
        return int(self.grid[y, x])

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        return not collides(cells, self.grid)

    def with_cells(self, cells: Iterable[Cell]) -> np.ndarray:
        """Copy of the board with locked cells written in.

        Cells above the board never reach the grid. The live board is not
        touched; install the result with ``load``.
        """
        state = self.grid.copy()
        for cell in cells:
            if cell.y >= 0:
                state[cell.y, cell.x] = cell.color
        return state

    def clear_positions(self, positions: Iterable[Coordinate]) -> None:
        for x, y in positions:
            self.grid[y, x] = 0

    def load(self, state: np.ndarray) -> None:
        """Replace the whole board with ``state`` after checking it."""
        state = np.asarray(state)
        if state.shape != self.grid.shape:
            raise ValueError(f"Expected board of shape {self.grid.shape}, got {state.shape}")
        validate(state, self.num_colors)
        self.grid = state.astype(np.int8, copy=True)

    def count_filled(self) -> int:
        return int(np.count_nonzero(self.grid))

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
