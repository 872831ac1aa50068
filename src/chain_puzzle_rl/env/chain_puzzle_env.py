from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from chain_puzzle_rl.game import Action, ChainPuzzleGame, GameConfig


def _compute_action_mask(game: ChainPuzzleGame) -> np.ndarray:
    mask = np.zeros((len(Action),), dtype=np.bool_)
    for action in game.valid_actions():
        mask[int(action)] = True
    return mask


class ChainPuzzleEnv(gym.Env):
    """Gymnasium environment over a chain puzzle game session.

    One environment step applies one ``Action``. When the action locks the
    pair, the resulting chain is resolved inside the same step, so the agent
    always observes a settled board with a falling pair (or game over).
    """

    metadata = {"render_modes": []}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        step_penalty: float = 0.0,
        terminal_penalty: float = 0.0,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        self.game = ChainPuzzleGame(config)
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)

        cfg = self.game.config
        k = cfg.num_colors

        # Observation: board with falling pair overlaid, pair colors, rotation
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=0, high=k, shape=(cfg.height, cfg.width), dtype=np.int8),
                "piece": spaces.Box(low=0, high=k, shape=(2,), dtype=np.int8),
                "rotation": spaces.Discrete(4),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        piece = self.game.current_piece
        colors = np.zeros((2,), dtype=np.int8)
        rotation = 0
        if piece is not None:
            colors[:] = piece.colors
            rotation = int(piece.rotation)
        return {
            "board": self.game.display_board().astype(np.int8),
            "piece": colors,
            "rotation": rotation,
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.game),
            "score": self.game.score,
            "chain": self.game.chain_count,
            "cleared_count": self.game.cleared_count,
            "steps": self._steps,
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[dict] = None,
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        action = Action(int(action))
        score_before = self.game.score

        self.game.step(action)
        self.game.settle()

        self._steps += 1
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps

        reward_components: Dict[str, float] = {
            "score": float(self.game.score - score_before),
            "step": self.step_penalty,
        }
        if terminated:
            reward_components["terminal"] = self.terminal_penalty
        reward = float(sum(reward_components.values()))

        info = self._get_info()
        info["reward_components"] = reward_components
        return self._get_obs(), reward, terminated, truncated, info

    def close(self) -> None:
        pass
