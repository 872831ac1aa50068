from __future__ import annotations

import argparse
import random
from typing import Optional

import gymnasium as gym

import chain_puzzle_rl.env  # noqa: F401
from chain_puzzle_rl.env.wrappers import ResampleInvalidActionWrapper


def run_random(steps: int = 200, seed: Optional[int] = None) -> dict:
    env = ResampleInvalidActionWrapper(gym.make("ChainPuzzle-6x12-v0"), seed=seed)
    rng = random.Random(seed)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 0
    best_chain = 0
    for _ in range(steps):
        action = rng.randrange(int(env.action_space.n))
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        best_chain = max(best_chain, int(info.get("chain", 0)))
        if terminated or truncated:
            episodes += 1
            obs, info = env.reset()
    env.close()
    return {"total_reward": total_reward, "episodes": episodes, "best_chain": best_chain}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    return p


def main() -> None:
    args = build_parser().parse_args()
    stats = run_random(args.steps, args.seed)
    print(
        f"Random agent total reward: {stats['total_reward']:.2f} "
        f"over {stats['episodes']} finished episodes, best chain {stats['best_chain']}"
    )


if __name__ == "__main__":  # pragma: no cover
    main()
