from typing import Dict

from blinker import Signal


class EventBus:
    """Named blinker signals for the presentation layer to subscribe to."""

    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong references so lambdas and throwaway listeners stay connected.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# PIECE LIFECYCLE
# ============================================================================
EVENT_PIECE_SPAWNED = "piece_spawned"      # payload: piece=Piece
EVENT_PIECE_MOVED = "piece_moved"          # payload: piece=Piece, command=str
EVENT_PIECE_LOCKED = "piece_locked"        # payload: piece=Piece


# ============================================================================
# CHAIN RESOLUTION
# ============================================================================
EVENT_CHAIN_CLEAR = "chain_clear"          # payload: positions=[(x,y),...], count=int, chain=int
EVENT_CHAIN_SETTLED = "chain_settled"      # payload: chain=int
EVENT_CHAIN_COMPLETE = "chain_complete"    # payload: chain=int, cleared=int, score_delta=int, score=int


# ============================================================================
# SESSION
# ============================================================================
EVENT_GAME_OVER = "game_over"              # payload: score=int
EVENT_PAUSE_TOGGLED = "pause_toggled"      # payload: paused=bool
EVENT_GAME_RESET = "game_reset"            # payload: none
