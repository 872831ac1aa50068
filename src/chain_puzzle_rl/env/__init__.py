"""Gymnasium environments for Chain Puzzle RL."""

from __future__ import annotations

from gymnasium.envs.registration import register

register(
    id="ChainPuzzle-6x12-v0",
    entry_point="chain_puzzle_rl.env.chain_puzzle_env:ChainPuzzleEnv",
)

__all__ = ["ChainPuzzle-6x12-v0"]
