from __future__ import annotations

from typing import Optional, Sequence

from debtor.config import Settings, get_settings
from debtor.logging import get_logger
from debtor.models import Balance, Transfer
from debtor.services.flow import plan_approximate
from debtor.services.partition import PartitionIterator
from debtor.services.settlement import (
    CapacityExceededError,
    ConflictingModeError,
    SettlementError,
    plan_block,
)


def compute_repayments_exact(balances: Sequence[Balance]) -> list[Transfer]:
    log = get_logger(__name__)
    partitions = PartitionIterator.compute([balance.amount for balance in balances])
    log.info("plan.partitioned", partitions=len(partitions))

    transfers: list[Transfer] = []
    for block in partitions:
        members = [balances[idx] for idx in block]
        transfers.extend(plan_block(members, lower_bound=len(members) - 1))
    return transfers


def compute_repayments_approx(balances: Sequence[Balance], settings: Optional[Settings] = None) -> list[Transfer]:
    settings = settings or get_settings()
    return plan_approximate(balances, edge_capacity=settings.flow_edge_capacity)


def settle_balances(
    balances: Sequence[Balance],
    *,
    exact: bool = False,
    approx: bool = False,
    settings: Optional[Settings] = None,
) -> list[Transfer]:
    if exact and approx:
        raise ConflictingModeError("exact mode and approximate mode cannot both be requested")

    settings = settings or get_settings()
    log = get_logger(__name__)
    balances = [balance for balance in balances if balance.amount != 0]
    total = sum(balance.amount for balance in balances)
    if total != 0:
        raise SettlementError(f"balances must sum to zero, got {total}")

    if exact:
        if len(balances) > settings.exact_max_balances:
            raise CapacityExceededError(
                f"exact mode supports at most {settings.exact_max_balances} unsettled balances, "
                f"got {len(balances)}; use approximate mode instead"
            )
        return compute_repayments_exact(balances)

    if approx:
        return compute_repayments_approx(balances, settings)

    if len(balances) <= settings.exact_auto_threshold:
        return compute_repayments_exact(balances)

    log.warning("plan.approximate", balances=len(balances), hint="use --exact to force exact mode")
    return compute_repayments_approx(balances, settings)
