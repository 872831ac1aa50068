from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class GameConfig:
    """Configuration for the chain puzzle game.

    Delays are in milliseconds and only matter to callers that drive the
    session with ``advance``; headless drivers settle chains immediately.
    """

    width: int = 6
    height: int = 12
    num_colors: int = 5
    spawn_column: int = 2
    clear_threshold: int = 4
    points_per_cell: int = 10
    lock_delay_ms: int = 200
    clear_pause_ms: int = 400
    settle_pause_ms: int = 300
    drop_interval_ms: Optional[int] = 800
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 2:
            raise ValueError(f"Board must be at least 1x2, got {self.width}x{self.height}")
        if not 1 <= self.num_colors <= 127:
            raise ValueError(f"num_colors must be in 1..127, got {self.num_colors}")
        if not 0 <= self.spawn_column < self.width:
            raise ValueError(f"spawn_column {self.spawn_column} outside board width {self.width}")
        if self.clear_threshold < 1:
            raise ValueError("clear_threshold must be positive")
        for name in ("lock_delay_ms", "clear_pause_ms", "settle_pause_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.drop_interval_ms is not None and self.drop_interval_ms <= 0:
            raise ValueError("drop_interval_ms must be positive or None")
