from __future__ import annotations

from typing import List, Set, Tuple

import numpy as np


Position = Tuple[int, int]

NEIGHBOURS = ((0, -1), (0, 1), (-1, 0), (1, 0))


def find_groups(state: np.ndarray, threshold: int = 4) -> List[List[Position]]:
    """Find connected same-color regions of at least ``threshold`` cells.

    Cells are scanned in row-major order and each unvisited colored cell
    seeds a flood fill over 4-neighbours. Each group is the list of (x, y)
    positions in visit order. Regions below the threshold are dropped.
    """
    height, width = state.shape
    visited: Set[Position] = set()
    groups: List[List[Position]] = []

    for y in range(height):
        for x in range(width):
            color = state[y, x]
            if color == 0 or (x, y) in visited:
                continue
            group: List[Position] = []
            stack = [(x, y)]
            visited.add((x, y))
            while stack:
                cx, cy = stack.pop()
                group.append((cx, cy))
                for dx, dy in NEIGHBOURS:
                    nx, ny = cx + dx, cy + dy
                    if not (0 <= nx < width and 0 <= ny < height):
                        continue
                    if (nx, ny) in visited or state[ny, nx] != color:
                        continue
                    visited.add((nx, ny))
                    stack.append((nx, ny))
            if len(group) >= threshold:
                groups.append(group)

    return groups


def removal_set(groups: List[List[Position]]) -> List[Position]:
    """Union of all group cells, in group order."""
    seen: Set[Position] = set()
    merged: List[Position] = []
    for group in groups:
        for pos in group:
            if pos not in seen:
                seen.add(pos)
                merged.append(pos)
    return merged
