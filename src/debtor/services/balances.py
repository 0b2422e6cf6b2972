from __future__ import annotations

from typing import Iterable, Sequence

from debtor.models import Balance
from debtor.utils.parse import LedgerRecord


def merge_payments(records: Iterable[LedgerRecord]) -> dict[str, int]:
    result: dict[str, int] = {}
    for record in records:
        result[record.from_user] = result.get(record.from_user, 0) - record.amount
        result[record.to_user] = result.get(record.to_user, 0) + record.amount
    return result


def calculate_balances(records: Iterable[LedgerRecord]) -> list[Balance]:
    """Net balance per participant, ordered by participant, with settled ones dropped."""
    totals = merge_payments(records)
    return [Balance(participant, amount) for participant, amount in sorted(totals.items()) if amount != 0]


def total_outstanding(balances: Sequence[Balance]) -> int:
    return sum(balance.amount for balance in balances if balance.amount > 0)
