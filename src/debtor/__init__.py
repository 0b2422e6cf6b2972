"""Settle a ledger of payments with the fewest repayments."""
