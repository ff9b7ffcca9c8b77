"""Portfolio and cash position domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


def _zero() -> Decimal:
    return Decimal("0")


@dataclass
class Portfolio:
    """
    Named container of transactions and cash.

    `currency` is derived from `country` at creation and never edited.
    The aggregate fields (total_invested .. xirr) are a persisted cache of
    the last holdings calculation.
    """

    id: str
    name: str
    currency: str
    country: str
    description: str = ""
    cash_position: Decimal = field(default_factory=_zero)
    target_cash_percent: Decimal = field(default_factory=_zero)
    total_invested: Decimal = field(default_factory=_zero)
    current_value: Decimal = field(default_factory=_zero)
    total_return: Decimal = field(default_factory=_zero)
    total_return_percent: Decimal = field(default_factory=_zero)
    realized_pl: Decimal = field(default_factory=_zero)
    unrealized_pl: Decimal = field(default_factory=_zero)
    daily_change: Decimal = field(default_factory=_zero)
    daily_change_percent: Decimal = field(default_factory=_zero)
    xirr: Optional[Decimal] = None
    deleted: bool = False
    created_at: Optional[datetime] = field(default=None)
    updated_at: Optional[datetime] = field(default=None)


@dataclass
class CashPosition:
    """Cash balance of one portfolio, in the portfolio's native currency."""

    portfolio_id: str
    amount: Decimal = field(default_factory=_zero)
    currency: str = "USD"
    updated_at: Optional[datetime] = field(default=None)
