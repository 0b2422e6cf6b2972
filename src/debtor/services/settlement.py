from __future__ import annotations

import math
from typing import Optional, Sequence

from debtor.models import Balance, Transfer


class SettlementError(Exception):
    pass


class ConflictingModeError(SettlementError):
    pass


class CapacityExceededError(SettlementError):
    pass


class FlowCapacityError(SettlementError):
    pass


class SettlementInvariantError(AssertionError):
    pass


class ExactTransactionPlanner:
    """Branch-and-bound search for the fewest transfers that settle a zero-sum block.

    Each step settles the smallest remaining balance against one partner of the
    opposite sign. Every partner is tried, and a branch is cut once it can no longer
    beat the best plan found so far. One transfer zeroes at most two balances, which
    gives the bound used for cutting.

    ``lower_bound`` stops the search as soon as a plan of that size is found. A block
    taken from a maximal zero-sum partition has no zero-sum proper subset, so every
    complete plan for it has exactly ``len(block) - 1`` transfers.
    """

    def __init__(self, block: Sequence[Balance], lower_bound: Optional[int] = None) -> None:
        self.block = [balance for balance in block if balance.amount != 0]
        total = sum(balance.amount for balance in self.block)
        if total != 0:
            raise SettlementInvariantError(f"block does not sum to zero (sum={total})")
        if lower_bound is None:
            lower_bound = math.ceil(len(self.block) / 2)
        self.lower_bound = lower_bound
        self.best_size = math.inf
        self.best_plan: list[Transfer] = []
        self._plan: list[Transfer] = []

    def plan(self) -> list[Transfer]:
        self.best_size = math.inf
        self.best_plan = []
        self._plan = []
        self._search(list(self.block))
        return [transfer.normalized() for transfer in self.best_plan]

    def _done(self) -> bool:
        return self.best_size <= self.lower_bound

    def _search(self, remaining: list[Balance]) -> None:
        if not remaining:
            if len(self._plan) < self.best_size:
                self.best_size = len(self._plan)
                self.best_plan = list(self._plan)
            return

        if len(self._plan) + math.ceil(len(remaining) / 2) >= self.best_size:
            return

        remaining = sorted(remaining, key=lambda balance: abs(balance.amount))
        head, others = remaining[0], remaining[1:]

        explored = False
        for pos, partner in enumerate(others):
            if (partner.amount > 0) == (head.amount > 0):
                continue
            explored = True

            settled = partner.amount + head.amount
            rest = others[:pos] + others[pos + 1:]
            if settled != 0:
                rest.insert(pos, Balance(partner.participant, settled))

            self._plan.append(Transfer(head.participant, partner.participant, head.amount))
            self._search(rest)
            self._plan.pop()

            if self._done():
                return

        if not explored:
            raise SettlementInvariantError(
                f"no opposite-sign partner for {head.participant!r} among {len(others)} balances"
            )


def plan_block(block: Sequence[Balance], lower_bound: Optional[int] = None) -> list[Transfer]:
    return ExactTransactionPlanner(block, lower_bound=lower_bound).plan()
