"""Game module for Chain Puzzle RL.

Exports the core game engine and supporting classes:
- GameGrid: Board model and collision checks
- Piece, Cell, Rotation: The falling pair and its orientation table
- find_groups / apply_gravity: Group detection and column compaction
- PieceController: Spawning and legal moves for the falling pair
- ScoringRules: Chain bonus and points per cleared cell
- ChainEngine: State machine that resolves chains after a lock
- ChainPuzzleGame: Game session and command API
"""

from .config import GameConfig
from .grid import GameGrid, collides
from .pieces import Cell, Piece, Rotation, SATELLITE_OFFSETS
from .groups import find_groups, removal_set
from .gravity import apply_gravity
from .controller import PieceController
from .rules import ScoringRules
from .events import EventBus
from .chain import ChainEngine, ChainResult, ChainState
from .core import ChainPuzzleGame, Action

__all__ = [
    "GameConfig",
    "GameGrid",
    "collides",
    "Cell",
    "Piece",
    "Rotation",
    "SATELLITE_OFFSETS",
    "find_groups",
    "removal_set",
    "apply_gravity",
    "PieceController",
    "ScoringRules",
    "EventBus",
    "ChainEngine",
    "ChainResult",
    "ChainState",
    "ChainPuzzleGame",
    "Action",
]
