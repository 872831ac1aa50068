from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Tuple


class Rotation(IntEnum):
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3


# Satellite offset (dx, dy) from the axis; y grows downward.
SATELLITE_OFFSETS: Dict[Rotation, Tuple[int, int]] = {
    Rotation.UP: (0, -1),
    Rotation.RIGHT: (1, 0),
    Rotation.DOWN: (0, 1),
    Rotation.LEFT: (-1, 0),
}


@dataclass(frozen=True)
class Cell:
    x: int
    y: int
    color: int

    def shifted(self, dx: int, dy: int) -> "Cell":
        return replace(self, x=self.x + dx, y=self.y + dy)


@dataclass(frozen=True)
class Piece:
    """A falling pair: the axis cell and the satellite orbiting it."""

    axis: Cell
    satellite: Cell
    rotation: Rotation = Rotation.DOWN

    @property
    def cells(self) -> Tuple[Cell, Cell]:
        return (self.axis, self.satellite)

    @property
    def colors(self) -> Tuple[int, int]:
        return (self.axis.color, self.satellite.color)

    def positions(self) -> List[Tuple[int, int]]:
        return [(c.x, c.y) for c in self.cells]

    def shifted(self, dx: int, dy: int) -> "Piece":
        return Piece(self.axis.shifted(dx, dy), self.satellite.shifted(dx, dy), self.rotation)

    def rotated(self, delta: int = 1) -> "Piece":
        rotation = Rotation((self.rotation + delta) % 4)
        dx, dy = SATELLITE_OFFSETS[rotation]
        satellite = Cell(self.axis.x + dx, self.axis.y + dy, self.satellite.color)
        return Piece(self.axis, satellite, rotation)

    def satellite_offset(self) -> Tuple[int, int]:
        return (self.satellite.x - self.axis.x, self.satellite.y - self.axis.y)

    def validate(self, num_colors: int) -> None:
        """Raise ValueError unless colors are in 1..num_colors and the
        satellite sits where ``rotation`` says it should."""
        for cell in self.cells:
            if not 1 <= cell.color <= num_colors:
                raise ValueError(f"Piece color {cell.color} outside 1..{num_colors}")
        if self.satellite_offset() != SATELLITE_OFFSETS[Rotation(self.rotation)]:
            raise ValueError(
                f"Satellite offset {self.satellite_offset()} does not match rotation {Rotation(self.rotation).name}"
            )
