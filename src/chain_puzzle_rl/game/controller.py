from __future__ import annotations

import random
from typing import Optional

import numpy as np

from .config import GameConfig
from .grid import collides
from .pieces import Cell, Piece, Rotation


class PieceController:
    """Spawns pairs and computes legal moves against a board snapshot.

    Every move returns the moved piece, or None when the move is illegal.
    The caller decides what a rejected move means (ignore it, or lock).
    """

    def __init__(self, config: GameConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.rng = rng or random.Random(config.random_seed)

    def random_color(self) -> int:
        return self.rng.randint(1, self.config.num_colors)

    def new_pair(self) -> Piece:
        col = self.config.spawn_column
        axis = Cell(col, 0, self.random_color())
        satellite = Cell(col, 1, self.random_color())
        # Spawns hanging DOWN, so the first rotate swings the satellite to the
        # left rather than the right.
        return Piece(axis, satellite, Rotation.DOWN)

    def spawn(self, state: np.ndarray) -> Optional[Piece]:
        piece = self.new_pair()
        if collides(piece.positions(), state):
            return None
        return piece

    def move(self, piece: Piece, dx: int, dy: int, state: np.ndarray) -> Optional[Piece]:
        moved = piece.shifted(dx, dy)
        if collides(moved.positions(), state):
            return None
        return moved

    def rotate(self, piece: Piece, state: np.ndarray, delta: int = 1) -> Optional[Piece]:
        rotated = piece.rotated(delta)
        if collides(rotated.positions(), state):
            return None
        return rotated

    def drop_target(self, piece: Piece, state: np.ndarray) -> Piece:
        """Lowest position reachable by moving straight down."""
        while True:
            lower = self.move(piece, 0, 1, state)
            if lower is None:
                return piece
            piece = lower
