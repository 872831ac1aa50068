from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    points_per_cell: int = 10

    @staticmethod
    def chain_bonus(chain: int) -> int:
        if chain <= 1:
            return 1
        return 2 ** (chain - 1)

    def score_for_chain(self, total_cleared: int, chain: int) -> int:
        if total_cleared <= 0 or chain <= 0:
            return 0
        return total_cleared * self.points_per_cell * self.chain_bonus(chain)
