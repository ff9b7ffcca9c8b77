#!/usr/bin/env python3
"""Reconcile the cash position store with portfolio records."""

import sys

from portfolio_tracker.app_context import AppContext
from portfolio_tracker.config.logging_config import setup_logging
from portfolio_tracker.core.exceptions import AppError


def main() -> int:
    setup_logging()
    context = AppContext()
    try:
        changed = context.ledger.sync_cash_positions()
    except AppError as e:
        print(f"✗ Error: {e.message}", file=sys.stderr)
        return 1
    if changed:
        print(f"✓ Synced {len(changed)} portfolio(s):")
        for portfolio_id in changed:
            print(f"  {portfolio_id}")
    else:
        print("✓ Cash positions already in sync")
    return 0


if __name__ == "__main__":
    sys.exit(main())
