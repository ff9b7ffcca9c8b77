#!/usr/bin/env python3
"""
Seed the data directory with two demo portfolios.

Simulates a US and an Indian account trading over the last 6 months:
weekly buys, a few partial sells and a starting cash balance.
Uses PORTFOLIO_DATA_DIR like the API does.
"""

import random
import sys
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from portfolio_tracker.app_context import AppContext
from portfolio_tracker.config.logging_config import setup_logging
from portfolio_tracker.core.exceptions import AppError
from portfolio_tracker.core.timezone import EASTERN_TZ
from portfolio_tracker.domain.models import TransactionAction
from portfolio_tracker.services import TransactionCreate

# (name, country, starting cash, [(ticker, exchange, base price)])
DEMO_PORTFOLIOS = [
    (
        "US Growth",
        "USA",
        Decimal("25000"),
        [
            ("AAPL", "NASDAQ", 180.0),
            ("MSFT", "NASDAQ", 410.0),
            ("NVDA", "NASDAQ", 480.0),
            ("JPM", "NYSE", 190.0),
        ],
    ),
    (
        "India Core",
        "India",
        Decimal("500000"),
        [
            ("RELIANCE", "NSE", 2900.0),
            ("TCS", "NSE", 3950.0),
            ("INFY", "NSE", 1500.0),
        ],
    ),
]

WEEKS = 26
FEES = Decimal("1.00")


def _at(day: date, hour: int) -> datetime:
    return EASTERN_TZ.localize(datetime.combine(day, time(hour=hour)))


def seed(context: AppContext, rng: random.Random) -> None:
    ledger = context.ledger
    today = date.today()
    start = today - timedelta(weeks=WEEKS)

    for name, country, cash, stocks in DEMO_PORTFOLIOS:
        portfolio = ledger.create_portfolio(name=name, country=country, cash_position=cash)
        print(f"✓ Portfolio '{name}' created ({portfolio.currency})")

        held: dict[str, Decimal] = {}
        count = 0
        for week in range(WEEKS):
            monday = start + timedelta(weeks=week, days=-start.weekday())
            if monday > today:
                break
            ticker, exchange, base = rng.choice(stocks)
            price = Decimal(str(round(base * rng.uniform(0.92, 1.08), 2)))
            quantity = Decimal(rng.randint(1, 10))
            ledger.add_transaction(
                TransactionCreate(
                    portfolio_id=portfolio.id,
                    action=TransactionAction.BUY,
                    ticker=ticker,
                    exchange=exchange,
                    quantity=quantity,
                    trade_price=price,
                    fees=FEES,
                    date=_at(monday, 10),
                    notes="Weekly purchase",
                )
            )
            held[ticker] = held.get(ticker, Decimal("0")) + quantity
            count += 1

            # Take profit every eighth week
            if week % 8 == 7:
                sell_ticker = max(held, key=held.get)
                sell_qty = (held[sell_ticker] / 3).quantize(Decimal("1"))
                if sell_qty > 0:
                    sell_base = dict((t, p) for t, _, p in stocks)[sell_ticker]
                    ledger.add_transaction(
                        TransactionCreate(
                            portfolio_id=portfolio.id,
                            action=TransactionAction.SELL,
                            ticker=sell_ticker,
                            exchange=next(e for t, e, _ in stocks if t == sell_ticker),
                            quantity=sell_qty,
                            trade_price=Decimal(str(round(sell_base * rng.uniform(1.02, 1.15), 2))),
                            fees=FEES,
                            date=_at(monday + timedelta(days=2), 14),
                            notes="Take profit",
                        )
                    )
                    held[sell_ticker] -= sell_qty
                    count += 1

        print(f"  {count} transactions recorded")
        for ticker, quantity in sorted(held.items()):
            if quantity > 0:
                print(f"  {ticker}: {quantity} shares")


if __name__ == "__main__":
    setup_logging()
    try:
        seed(AppContext(), random.Random(42))
    except AppError as e:
        print(f"\n✗ Error: {e.message}", file=sys.stderr)
        sys.exit(1)
    print("\n✓ Demo data generation complete!")
    print("\nYou can now:")
    print("  - View the dashboard: GET /dashboard")
    print("  - View holdings: GET /holdings?portfolio_id=...")
    print("  - View performance: GET /performance?timeframe=6M")
