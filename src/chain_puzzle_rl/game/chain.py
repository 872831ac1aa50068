from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .config import GameConfig
from .events import EVENT_CHAIN_CLEAR, EVENT_CHAIN_SETTLED, EventBus
from .gravity import apply_gravity
from .grid import GameGrid
from .groups import Position, find_groups, removal_set
from .pieces import Piece
from .rules import ScoringRules

logger = logging.getLogger(__name__)


class ChainState(Enum):
    IDLE = "idle"
    LOCKING = "locking"
    RESOLVING = "resolving"
    SETTLING_PAUSE = "settling_pause"
    DONE = "done"


@dataclass
class ChainResult:
    chain: int
    cleared: int
    score_delta: int


class ChainEngine:
    """Lock a pair, then clear and compact until no group remains.

    The engine never sleeps. ``advance`` consumes elapsed time against the
    pending delay and runs one transition each time a delay runs out, so the
    caller's animation clock decides how fast a chain plays out.
    """

    def __init__(
        self,
        grid: GameGrid,
        config: GameConfig,
        rules: Optional[ScoringRules] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        self.grid = grid
        self.config = config
        self.rules = rules or ScoringRules(config.points_per_cell)
        self.events = events
        self.reset()

    def reset(self) -> None:
        self.state = ChainState.IDLE
        self.chain = 0
        self.total_cleared = 0
        self.removal: List[Position] = []
        self.score_delta = 0
        self._wait_ms = 0

    @property
    def active(self) -> bool:
        return self.state in (ChainState.LOCKING, ChainState.RESOLVING, ChainState.SETTLING_PAUSE)

    @property
    def done(self) -> bool:
        return self.state is ChainState.DONE

    def begin(self, piece: Piece) -> None:
        if self.state is not ChainState.IDLE:
            raise RuntimeError(f"Cannot lock a piece while chain is {self.state.value}")
        # load() validates before replacing, so a bad pair leaves the board untouched
        self.grid.load(apply_gravity(self.grid.with_cells(piece.cells)))
        self.state = ChainState.LOCKING
        self.chain = 0
        self.total_cleared = 0
        self.removal = []
        self.score_delta = 0
        self.state = ChainState.RESOLVING
        self._wait_ms = self.config.lock_delay_ms
        logger.debug("Locked pair %s, resolving in %d ms", piece.positions(), self._wait_ms)

    def advance(self, elapsed_ms: float) -> None:
        if not self.active:
            return
        self._wait_ms -= elapsed_ms
        while self.active and self._wait_ms <= 0:
            self._wait_ms += self._step()

    def run_to_completion(self) -> None:
        while self.active:
            self._step()
        self._wait_ms = 0

    def finish(self) -> ChainResult:
        if self.state is not ChainState.DONE:
            raise RuntimeError(f"Chain not finished (state {self.state.value})")
        result = ChainResult(self.chain, self.total_cleared, self.score_delta)
        self.state = ChainState.IDLE
        return result

    def _step(self) -> int:
        """Run one transition and return the delay before the next one."""
        if self.state is ChainState.RESOLVING:
            return self._resolve()
        if self.state is ChainState.SETTLING_PAUSE:
            return self._settle()
        return 0

    def _resolve(self) -> int:
        groups = find_groups(self.grid.grid, self.config.clear_threshold)
        if not groups:
            self.score_delta = self.rules.score_for_chain(self.total_cleared, self.chain)
            self.state = ChainState.DONE
            logger.debug(
                "Chain ended: chain=%d cleared=%d delta=%d",
                self.chain, self.total_cleared, self.score_delta,
            )
            return 0

        self.chain += 1
        self.removal = removal_set(groups)
        self.total_cleared += len(self.removal)
        logger.debug("Chain %d clears %d cells in %d groups", self.chain, len(self.removal), len(groups))
        if self.events is not None:
            self.events.emit(
                EVENT_CHAIN_CLEAR,
                positions=list(self.removal),
                count=len(self.removal),
                chain=self.chain,
            )
        self.state = ChainState.SETTLING_PAUSE
        return self.config.clear_pause_ms

    def _settle(self) -> int:
        self.grid.clear_positions(self.removal)
        self.grid.load(apply_gravity(self.grid.grid))
        self.removal = []
        if self.events is not None:
            self.events.emit(EVENT_CHAIN_SETTLED, chain=self.chain)
        self.state = ChainState.RESOLVING
        return self.config.settle_pause_ms
