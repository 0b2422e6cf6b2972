from __future__ import annotations

from typing import Iterable, Sequence

from debtor.models import Balance, Transfer
from debtor.services.settlement import SettlementInvariantError


def apply_transfers(balances: Iterable[Balance], transfers: Iterable[Transfer]) -> dict[str, int]:
    residual: dict[str, int] = {}
    for balance in balances:
        residual[balance.participant] = residual.get(balance.participant, 0) + balance.amount
    for transfer in transfers:
        residual[transfer.from_user] = residual.get(transfer.from_user, 0) - transfer.amount
        residual[transfer.to_user] = residual.get(transfer.to_user, 0) + transfer.amount
    return residual


def assert_settled(balances: Sequence[Balance], transfers: Sequence[Transfer]) -> None:
    for transfer in transfers:
        if transfer.amount <= 0:
            raise SettlementInvariantError(f"non-positive transfer {transfer}")
        if transfer.from_user == transfer.to_user:
            raise SettlementInvariantError(f"self transfer {transfer}")

    unsettled = {name: amount for name, amount in apply_transfers(balances, transfers).items() if amount != 0}
    if unsettled:
        raise SettlementInvariantError(f"plan leaves {len(unsettled)} balances unsettled: {unsettled}")
