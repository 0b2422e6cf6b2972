from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from debtor.models import Transfer


class LedgerFormatError(ValueError):
    def __init__(self, line_no: int, reason: str) -> None:
        super().__init__(f"line {line_no}: {reason}")
        self.line_no = line_no
        self.reason = reason


class LedgerRecord(BaseModel):
    """One payment, ``{"from": ..., "to": ..., "amt": ...}``.

    The same shape is used for the transfers written back out.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    from_user: StrictStr = Field(..., alias="from", min_length=1)
    to_user: StrictStr = Field(..., alias="to", min_length=1)
    amount: StrictInt = Field(..., alias="amt", ge=0)


def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


def parse_ledger(lines: Iterable[str]) -> Iterator[LedgerRecord]:
    for line_no, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            yield LedgerRecord.model_validate_json(line)
        except ValidationError as exc:
            raise LedgerFormatError(line_no, _describe(exc)) from exc


def read_ledger(path: str | Path) -> list[LedgerRecord]:
    with open(path, encoding="utf-8") as fh:
        return list(parse_ledger(fh))


def format_transfer(transfer: Transfer) -> str:
    record = LedgerRecord(from_user=transfer.from_user, to_user=transfer.to_user, amount=transfer.amount)
    return record.model_dump_json(by_alias=True)
