from __future__ import annotations

import logging
import random
from enum import IntEnum
from typing import List, Optional, Tuple

import numpy as np

from .chain import ChainEngine, ChainState
from .config import GameConfig
from .controller import PieceController
from .events import (
    EVENT_CHAIN_CLEAR,
    EVENT_CHAIN_COMPLETE,
    EVENT_GAME_OVER,
    EVENT_GAME_RESET,
    EVENT_PAUSE_TOGGLED,
    EVENT_PIECE_LOCKED,
    EVENT_PIECE_MOVED,
    EVENT_PIECE_SPAWNED,
    EventBus,
)
from .grid import GameGrid
from .groups import Position
from .pieces import Piece
from .rules import ScoringRules

logger = logging.getLogger(__name__)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    NONE = 5


class ChainPuzzleGame:
    """One game session: board, falling pair, score and lifecycle flags.

    Movement commands return True when they changed the game and False when
    they were ignored. They are ignored while paused, after game over and
    while a chain is resolving.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules(self.config.points_per_cell)
        self.events = events or EventBus()
        self.rng = random.Random(self.config.random_seed)
        self.grid = GameGrid(self.config.width, self.config.height, self.config.num_colors)
        self.controller = PieceController(self.config, self.rng)
        self.chain_engine = ChainEngine(self.grid, self.config, self.rules, self.events)
        self.events.subscribe(EVENT_CHAIN_CLEAR, self._on_chain_clear)
        self._clear_session()
        self.spawn_if_needed()

    def _clear_session(self) -> None:
        self._piece: Optional[Piece] = None
        self._score = 0
        self._paused = False
        self._game_over = False
        self._dropping = False
        self._cleared_count = 0
        self._fall_timer_ms = 0.0
        self.pieces_placed = 0
        self.total_cells_cleared = 0
        self.longest_chain = 0

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.chain_engine.reset()
        self.grid.reset()
        self._clear_session()
        logger.info("Game reset")
        self.events.emit(EVENT_GAME_RESET)
        self.spawn_if_needed()

    # ---------- Queries ----------
    @property
    def board(self) -> np.ndarray:
        return self.grid.clone_state()

    @property
    def current_piece(self) -> Optional[Piece]:
        return self._piece

    @property
    def score(self) -> int:
        return self._score

    @property
    def chain_count(self) -> int:
        return self.chain_engine.chain

    @property
    def clearing_positions(self) -> List[Position]:
        return list(self.chain_engine.removal)

    @property
    def cleared_count(self) -> int:
        return self._cleared_count

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def game_over(self) -> bool:
        return self._game_over

    @property
    def dropping(self) -> bool:
        return self._dropping

    @property
    def chain_state(self) -> ChainState:
        return self.chain_engine.state

    def display_board(self) -> np.ndarray:
        """Board snapshot with the falling pair drawn in its colors."""
        state = self.grid.clone_state()
        if self._piece is not None:
            for cell in self._piece.cells:
                if self.grid.is_inside(cell.x, cell.y):
                    state[cell.y, cell.x] = cell.color
        return state

    def get_state(self) -> dict:
        return {
            "board": self.grid.clone_state(),
            "piece": self._piece,
            "score": self._score,
            "chain": self.chain_count,
            "clearing": self.clearing_positions,
            "cleared_count": self._cleared_count,
            "paused": self._paused,
            "game_over": self._game_over,
            "dropping": self._dropping,
        }

    def get_game_stats(self) -> dict:
        return {
            "final_score": self._score,
            "pieces_placed": self.pieces_placed,
            "cells_cleared": self.total_cells_cleared,
            "longest_chain": self.longest_chain,
            "avg_score_per_piece": self._score / max(1, self.pieces_placed),
        }

    def valid_actions(self) -> List[Action]:
        if not self._can_act():
            return [Action.NONE]
        assert self._piece is not None
        state = self.grid.grid
        actions: List[Action] = []
        if self.controller.move(self._piece, -1, 0, state) is not None:
            actions.append(Action.LEFT)
        if self.controller.move(self._piece, 1, 0, state) is not None:
            actions.append(Action.RIGHT)
        if self.controller.rotate(self._piece, state) is not None:
            actions.append(Action.ROTATE)
        actions.extend([Action.SOFT_DROP, Action.HARD_DROP, Action.NONE])
        return actions

    # ---------- Commands ----------
    def spawn_if_needed(self) -> bool:
        if self._piece is not None or self._game_over or self._dropping:
            return False
        piece = self.controller.spawn(self.grid.grid)
        if piece is None:
            self._game_over = True
            logger.info("Game over: spawn blocked, final score %d", self._score)
            self.events.emit(EVENT_GAME_OVER, score=self._score)
            return False
        self._piece = piece
        self._fall_timer_ms = 0.0
        self.events.emit(EVENT_PIECE_SPAWNED, piece=piece)
        return True

    def move_horizontal(self, direction: int) -> bool:
        if direction not in (-1, 1):
            raise ValueError(f"direction must be -1 or 1, got {direction!r}")
        if not self._can_act():
            return False
        moved = self.controller.move(self._piece, direction, 0, self.grid.grid)
        return self._apply_move(moved, "left" if direction < 0 else "right")

    def rotate(self) -> bool:
        if not self._can_act():
            return False
        rotated = self.controller.rotate(self._piece, self.grid.grid)
        return self._apply_move(rotated, "rotate")

    def move_down(self) -> bool:
        """Drop one row, or lock the pair when the row below is blocked."""
        if not self._can_act():
            return False
        lower = self.controller.move(self._piece, 0, 1, self.grid.grid)
        if lower is not None:
            return self._apply_move(lower, "down")
        self._lock()
        return True

    tick = move_down

    def hard_drop(self) -> bool:
        if not self._can_act():
            return False
        self._piece = self.controller.drop_target(self._piece, self.grid.grid)
        self._lock()
        return True

    def toggle_pause(self) -> bool:
        self._paused = not self._paused
        self.events.emit(EVENT_PAUSE_TOGGLED, paused=self._paused)
        return self._paused

    def advance(self, elapsed_ms: float) -> None:
        """Drive chain animation and the automatic drop timer.

        A resolving chain always advances, even while paused. The drop timer
        only runs while a pair is falling and the game is not paused.
        """
        if self.chain_engine.active:
            self.chain_engine.advance(elapsed_ms)
            self._collect_chain()
            return
        if self._game_over or self._paused:
            return
        if self._piece is None:
            self.spawn_if_needed()
            return
        interval = self.config.drop_interval_ms
        if interval is None:
            return
        self._fall_timer_ms += elapsed_ms
        while self._fall_timer_ms >= interval and self._can_act():
            self._fall_timer_ms -= interval
            self.move_down()

    def settle(self) -> None:
        """Finish an in-flight chain immediately, skipping its pauses."""
        if self.chain_engine.active:
            self.chain_engine.run_to_completion()
            self._collect_chain()

    def load_position(self, board: np.ndarray, piece: Optional[Piece] = None) -> None:
        """Install a board and, optionally, the falling pair.

        Used to set up puzzles and training curricula. Not allowed while a
        chain is resolving.
        """
        if self._dropping:
            raise RuntimeError("Cannot load a position while a chain is resolving")
        piece = piece or self._piece
        if piece is not None:
            piece.validate(self.config.num_colors)
        previous = self.grid.clone_state()
        self.grid.load(board)
        if piece is not None and not self.grid.can_place(piece.positions()):
            self.grid.load(previous)
            raise ValueError(f"Piece {piece.positions()} collides with the loaded board")
        self._piece = piece
        self._fall_timer_ms = 0.0

    def step(self, action: Action) -> Tuple[np.ndarray, int, bool, dict]:
        if self._game_over:
            return self.display_board(), 0, True, {}

        score_before = self._score
        if action == Action.LEFT:
            self.move_horizontal(-1)
        elif action == Action.RIGHT:
            self.move_horizontal(1)
        elif action == Action.ROTATE:
            self.rotate()
        elif action == Action.SOFT_DROP:
            self.move_down()
        elif action == Action.HARD_DROP:
            self.hard_drop()
        elif action == Action.NONE:
            pass

        info = {
            "score": self._score,
            "chain": self.chain_count,
            "dropping": self._dropping,
        }
        return self.display_board(), self._score - score_before, self._game_over, info

    # ---------- Internals ----------
    def _can_act(self) -> bool:
        return (
            self._piece is not None
            and not self._game_over
            and not self._paused
            and not self._dropping
        )

    def _apply_move(self, moved: Optional[Piece], command: str) -> bool:
        if moved is None:
            return False
        self._piece = moved
        self.events.emit(EVENT_PIECE_MOVED, piece=moved, command=command)
        return True

    def _lock(self) -> None:
        piece = self._piece
        assert piece is not None
        self.chain_engine.begin(piece)
        self._piece = None
        self._dropping = True
        self.pieces_placed += 1
        self.events.emit(EVENT_PIECE_LOCKED, piece=piece)
        self.chain_engine.advance(0)
        self._collect_chain()

    def _on_chain_clear(self, sender, **kwargs) -> None:
        self._cleared_count = int(kwargs.get("count", 0))

    def _collect_chain(self) -> None:
        if not self.chain_engine.done:
            return
        result = self.chain_engine.finish()
        self._score += result.score_delta
        self.total_cells_cleared += result.cleared
        self.longest_chain = max(self.longest_chain, result.chain)
        self.events.emit(
            EVENT_CHAIN_COMPLETE,
            chain=result.chain,
            cleared=result.cleared,
            score_delta=result.score_delta,
            score=self._score,
        )
        self._dropping = False
        self.spawn_if_needed()
