import numpy as np

from chain_puzzle_rl.game import Cell, GameConfig, Piece, Rotation


def board_from_rows(rows, width=6, height=12):
    """Build a board from strings, '.' for empty and digits for colors.

    Rows are bottom-aligned: the last string is the bottom row.
    """
    board = np.zeros((height, width), dtype=np.int8)
    offset = height - len(rows)
    for i, row in enumerate(rows):
        assert len(row) == width, f"Row {row!r} is not {width} wide"
        for x, ch in enumerate(row):
            if ch != '.':
                board[offset + i, x] = int(ch)
    return board


def instant_config(**overrides):
    values = dict(lock_delay_ms=0, clear_pause_ms=0, settle_pause_ms=0, random_seed=7)
    values.update(overrides)
    return GameConfig(**values)


def vertical_pair(x, axis_color, satellite_color, y=0):
    """Pair in spawn layout: satellite one row below the axis."""
    return Piece(Cell(x, y, axis_color), Cell(x, y + 1, satellite_color), Rotation.DOWN)
