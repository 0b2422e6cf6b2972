from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Balance:
    participant: str
    amount: int


@dataclass(frozen=True, slots=True)
class Transfer:
    from_user: str
    to_user: str
    amount: int

    def normalized(self) -> Transfer:
        if self.amount < 0:
            return Transfer(from_user=self.to_user, to_user=self.from_user, amount=-self.amount)
        return self
