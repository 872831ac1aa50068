from __future__ import annotations

import numpy as np


def apply_gravity(state: np.ndarray) -> np.ndarray:
    """Drop every occupied cell to the bottom of its column.

    Relative order inside a column is preserved and empties collect at the
    top. Returns a new array; ``state`` is left untouched.
    """
    height, width = state.shape
    settled = np.zeros_like(state)
    for x in range(width):
        column = state[:, x]
        filled = column[column != 0]
        if filled.size:
            settled[height - filled.size :, x] = filled
    return settled


def is_settled(state: np.ndarray) -> bool:
    return bool(np.array_equal(state, apply_gravity(state)))
