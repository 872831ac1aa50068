import numpy as np
import pytest

from chain_puzzle_rl.game import Action, Cell, ChainPuzzleGame, ChainState, GameConfig, Piece, Rotation
from chain_puzzle_rl.game.events import (
    EVENT_CHAIN_CLEAR,
    EVENT_CHAIN_COMPLETE,
    EVENT_GAME_OVER,
    EVENT_PIECE_SPAWNED,
)
from tests.helpers import board_from_rows, instant_config, vertical_pair

EMPTY = ["......"]

# One group of exactly four once the pair of 1s lands in column 2.
SINGLE_CLEAR_BOARD = ["11...."]

TWO_STEP_BOARD = [
    ".2....",
    ".2....",
    ".2....",
    "21....",
    "21....",
]

# Column 2 stacked to row 2 with no group anywhere.
TALL_COLUMN_BOARD = ["..3...", "..4..."] * 5


def _game(rows=EMPTY, piece=None, **cfg):
    game = ChainPuzzleGame(instant_config(**cfg))
    game.load_position(board_from_rows(rows), piece)
    return game


def test_new_session_spawns_a_piece():
    game = ChainPuzzleGame(GameConfig(random_seed=3))
    assert game.current_piece is not None
    assert game.current_piece.positions() == [(2, 0), (2, 1)]
    assert game.score == 0 and game.chain_count == 0
    assert not (game.paused or game.game_over or game.dropping)


def test_lock_without_group_keeps_score_and_spawns():
    game = _game(piece=vertical_pair(2, 1, 2))
    spawned = []
    game.events.subscribe(EVENT_PIECE_SPAWNED, lambda s, **k: spawned.append(k["piece"]))
    assert game.hard_drop()
    assert game.score == 0
    assert game.chain_count == 0
    assert not game.dropping
    assert game.current_piece is not None and spawned == [game.current_piece]
    board = game.board
    assert board[10, 2] == 1 and board[11, 2] == 2
    assert game.chain_state is ChainState.IDLE


def test_single_group_scores_forty():
    game = _game(SINGLE_CLEAR_BOARD, vertical_pair(2, 1, 1))
    game.hard_drop()
    assert game.score == 40
    assert game.chain_count == 1
    assert game.cleared_count == 4
    assert not np.any(game.board)


def test_two_step_chain_scores_one_eighty():
    game = _game(TWO_STEP_BOARD, vertical_pair(2, 1, 1))
    clears = []
    completes = []
    game.events.subscribe(EVENT_CHAIN_CLEAR, lambda s, **k: clears.append((k["count"], k["chain"])))
    game.events.subscribe(EVENT_CHAIN_COMPLETE, lambda s, **k: completes.append(k))
    game.hard_drop()
    assert clears == [(4, 1), (5, 2)]
    assert game.score == 180
    assert game.chain_count == 2
    assert completes[0]["score_delta"] == 180 and completes[0]["cleared"] == 9
    assert game.longest_chain == 2


def test_blocked_spawn_ends_the_game():
    game = _game(TALL_COLUMN_BOARD, vertical_pair(2, 1, 2))
    overs = []
    game.events.subscribe(EVENT_GAME_OVER, lambda s, **k: overs.append(k["score"]))
    game.hard_drop()
    assert game.game_over
    assert game.current_piece is None
    assert overs == [0]
    assert not game.spawn_if_needed()
    assert not game.move_down()
    assert not game.rotate()
    assert not game.hard_drop()
    assert game.step(Action.LEFT)[2] is True


def test_cells_above_board_are_dropped_on_lock():
    full_below = board_from_rows(["..3...", "..4..."] * 5 + ["..5..."])
    piece = Piece(Cell(2, 0, 1), Cell(2, -1, 2), Rotation.UP)
    game = ChainPuzzleGame(instant_config())
    game.load_position(full_below, piece)
    game.move_down()
    board = game.board
    assert board[0, 2] == 1
    assert int(np.count_nonzero(board)) == 12
    assert game.game_over


def test_move_left_at_wall_is_rejected():
    piece = vertical_pair(0, 1, 2)
    game = _game(piece=piece)
    before = game.board
    assert not game.move_horizontal(-1)
    assert game.current_piece == piece
    assert np.array_equal(game.board, before)


def test_invalid_direction_raises():
    game = _game()
    with pytest.raises(ValueError):
        game.move_horizontal(2)


def test_rotate_four_times_restores_orientation():
    piece = vertical_pair(2, 1, 2, y=4)
    game = _game(piece=piece)
    for _ in range(4):
        assert game.rotate()
    assert game.current_piece == piece


def test_rejected_rotation_keeps_orientation():
    piece = vertical_pair(0, 1, 2, y=4)
    game = _game(piece=piece)
    assert not game.rotate()
    assert game.current_piece == piece


def test_pause_blocks_commands_and_ticks():
    game = _game(piece=vertical_pair(2, 1, 2), drop_interval_ms=100)
    assert game.toggle_pause()
    assert not game.move_horizontal(1)
    assert not game.move_down()
    game.advance(1000)
    assert game.current_piece == vertical_pair(2, 1, 2)
    assert not game.toggle_pause()
    assert game.move_horizontal(1)


def test_auto_drop_timer_moves_piece():
    game = _game(piece=vertical_pair(2, 1, 2), drop_interval_ms=800)
    game.advance(799)
    assert game.current_piece.axis.y == 0
    game.advance(1)
    assert game.current_piece.axis.y == 1
    game.advance(1600)
    assert game.current_piece.axis.y == 3


def test_timed_chain_blocks_commands_until_done():
    game = ChainPuzzleGame(GameConfig(random_seed=5, drop_interval_ms=None))
    game.load_position(board_from_rows(SINGLE_CLEAR_BOARD), vertical_pair(2, 1, 1))
    game.hard_drop()
    assert game.dropping
    assert game.current_piece is None
    assert not game.move_horizontal(1)
    assert not game.hard_drop()

    game.advance(200)
    assert game.chain_state is ChainState.SETTLING_PAUSE
    assert game.chain_count == 1
    assert len(game.clearing_positions) == 4
    assert game.score == 0

    # Pausing does not interrupt an in-flight chain.
    game.toggle_pause()
    game.advance(400)
    assert game.clearing_positions == []
    assert not np.any(game.board)
    game.advance(300)
    assert not game.dropping
    assert game.score == 40
    assert game.current_piece is not None


def test_settle_finishes_timed_chain():
    game = ChainPuzzleGame(GameConfig(random_seed=5))
    game.load_position(board_from_rows(TWO_STEP_BOARD), vertical_pair(2, 1, 1))
    game.hard_drop()
    assert game.dropping
    game.settle()
    assert not game.dropping
    assert game.score == 180


def test_display_board_overlays_piece():
    game = _game(piece=vertical_pair(3, 4, 5))
    shown = game.display_board()
    assert shown[0, 3] == 4 and shown[1, 3] == 5
    assert not np.any(game.board)


def test_reset_discards_state():
    game = _game(SINGLE_CLEAR_BOARD, vertical_pair(2, 1, 1))
    game.hard_drop()
    game.toggle_pause()
    game.reset(seed=1)
    assert game.score == 0 and game.chain_count == 0 and game.cleared_count == 0
    assert not (game.paused or game.game_over or game.dropping)
    assert not np.any(game.board)
    assert game.current_piece is not None
    assert game.get_game_stats()["pieces_placed"] == 0


def test_load_position_rejects_colliding_piece():
    game = _game()
    with pytest.raises(ValueError):
        game.load_position(board_from_rows(["..1..."] * 12), vertical_pair(2, 1, 1))
    assert not np.any(game.board)


def test_load_position_rejects_out_of_range_colors():
    game = _game()
    before = game.current_piece
    with pytest.raises(ValueError):
        game.load_position(board_from_rows(["1....."]), vertical_pair(2, 9, 9))
    assert not np.any(game.board)
    assert game.current_piece == before
    assert not game.dropping
    assert game.hard_drop()
    assert game.chain_state is ChainState.IDLE
    assert game.current_piece is not None


def test_load_position_rejects_rotation_that_disagrees_with_layout():
    game = _game()
    # Satellite hangs below the axis but the pair claims to point up.
    piece = Piece(Cell(2, 0, 1), Cell(2, 1, 2), Rotation.UP)
    with pytest.raises(ValueError):
        game.load_position(board_from_rows(EMPTY), piece)
    assert game.current_piece != piece
    assert not game.dropping


def test_advance_after_game_over_changes_nothing():
    game = _game(TALL_COLUMN_BOARD, vertical_pair(2, 1, 2), drop_interval_ms=100)
    game.hard_drop()
    assert game.game_over
    spawned = []
    game.events.subscribe(EVENT_PIECE_SPAWNED, lambda s, **k: spawned.append(k["piece"]))
    before = game.board
    game.advance(10_000)
    assert game.game_over
    assert game.current_piece is None
    assert spawned == []
    assert np.array_equal(game.board, before)
    assert game.score == 0
    assert game.get_game_stats()["pieces_placed"] == 1


def test_reset_during_timed_chain_returns_to_idle():
    game = ChainPuzzleGame(GameConfig(random_seed=5, drop_interval_ms=None))
    game.load_position(board_from_rows(SINGLE_CLEAR_BOARD), vertical_pair(2, 1, 1))
    game.hard_drop()
    game.advance(200)
    assert game.chain_state is ChainState.SETTLING_PAUSE

    game.reset()
    assert game.chain_state is ChainState.IDLE
    assert not game.dropping
    assert game.clearing_positions == []
    assert game.chain_count == 0
    assert not np.any(game.board)
    assert game.current_piece is not None
    game.advance(1000)
    assert game.score == 0
    assert game.chain_state is ChainState.IDLE


def test_get_state_snapshot():
    piece = vertical_pair(3, 4, 5)
    game = _game(SINGLE_CLEAR_BOARD, piece)
    state = game.get_state()
    assert set(state) == {
        "board", "piece", "score", "chain", "clearing",
        "cleared_count", "paused", "game_over", "dropping",
    }
    assert state["piece"] == piece
    assert state["score"] == 0 and state["chain"] == 0
    assert state["clearing"] == [] and state["cleared_count"] == 0
    assert not (state["paused"] or state["game_over"] or state["dropping"])
    assert np.array_equal(state["board"], board_from_rows(SINGLE_CLEAR_BOARD))
    state["board"][0, 0] = 3
    assert game.board[0, 0] == 0


def test_tick_drops_one_row_then_locks():
    game = _game(piece=vertical_pair(2, 1, 2, y=9))
    assert game.tick()
    assert game.current_piece.positions() == [(2, 10), (2, 11)]
    assert game.tick()
    assert game.board[10, 2] == 1 and game.board[11, 2] == 2
    assert game.get_game_stats()["pieces_placed"] == 1
    assert game.current_piece is not None and game.current_piece.axis.y == 0


def test_step_dispatches_actions():
    game = _game(piece=vertical_pair(2, 1, 2))
    game.step(Action.RIGHT)
    assert game.current_piece.axis.x == 3
    game.step(Action.SOFT_DROP)
    assert game.current_piece.axis.y == 1
    _, reward, done, info = game.step(Action.HARD_DROP)
    assert reward == 0 and not done
    assert info["score"] == 0
    assert game.board[11, 3] == 2


def test_valid_actions_reflect_walls():
    game = _game(piece=vertical_pair(0, 1, 2))
    actions = game.valid_actions()
    assert Action.LEFT not in actions
    assert Action.ROTATE not in actions
    assert Action.RIGHT in actions and Action.HARD_DROP in actions
