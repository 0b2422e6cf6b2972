from __future__ import annotations

import argparse
import sys
import time
from typing import Optional, Sequence

from pydantic import ValidationError

from debtor.config import get_settings
from debtor.logging import configure_logging, get_logger, verbosity_to_level
from debtor.services.balances import calculate_balances, total_outstanding
from debtor.services.planner import settle_balances
from debtor.services.settlement import SettlementError
from debtor.services.verify import assert_settled
from debtor.utils.parse import LedgerFormatError, format_transfer, read_ledger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="debtor",
        description="Settle the balances in a ledger with as few repayments as possible.",
    )
    parser.add_argument("path", metavar="PATH", help="The ledger containing historical transactions")
    parser.add_argument("-a", "--approx", action="store_true", help="Guarantee a fast solution (may be suboptimal)")
    parser.add_argument("-x", "--exact", action="store_true", help="Guarantee an exact solution (may be slow)")
    parser.add_argument("-v", dest="verbosity", action="count", default=0, help="Increase the level of verbosity")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbosity_to_level(args.verbosity))
    log = get_logger(__name__)

    try:
        started = time.perf_counter()
        records = read_ledger(args.path)
        balances = calculate_balances(records)
        log.info("ledger.read", entries=len(records), path=args.path, seconds=round(time.perf_counter() - started, 3))
        log.info("ledger.balances", unsettled=len(balances), outstanding=total_outstanding(balances))

        started = time.perf_counter()
        plan = settle_balances(balances, exact=args.exact, approx=args.approx, settings=get_settings())
        assert_settled(balances, plan)
        log.info("plan.computed", repayments=len(plan), seconds=round(time.perf_counter() - started, 3))
    except (LedgerFormatError, SettlementError, ValidationError, OSError) as exc:
        log.error("debtor.failed", error=str(exc))
        print(f"debtor: {exc}", file=sys.stderr)
        return 1

    for transfer in plan:
        print(format_transfer(transfer))
    return 0


if __name__ == "__main__":
    sys.exit(main())
