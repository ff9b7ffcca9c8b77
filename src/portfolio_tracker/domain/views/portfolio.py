"""View models for holdings, quotes and dashboard outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


def _zero() -> Decimal:
    return Decimal("0")


@dataclass
class Quote:
    """
    Normalized market quote for a symbol.

    `success` is False when no price could be obtained; `is_stale` marks a
    price served from the last-known store instead of the live provider.
    """

    symbol: str
    success: bool
    price: Optional[Decimal] = None
    previous_close: Optional[Decimal] = None
    company_name: str = ""
    sector: Optional[str] = None
    currency: Optional[str] = None
    exchange: str = ""
    timestamp: Optional[datetime] = None
    is_stale: bool = False
    error: Optional[str] = None

    @classmethod
    def failure(cls, symbol: str, error: str) -> "Quote":
        return cls(symbol=symbol, success=False, company_name=symbol, error=error)


@dataclass
class Holding:
    """Current position in one security within one portfolio (never persisted)."""

    portfolio_id: str
    ticker: str
    name: str
    exchange: str
    currency: str
    country: str
    quantity: Decimal
    avg_buy_price: Decimal
    current_price: Decimal
    current_value: Decimal
    invested_value: Decimal
    unrealized_pl: Decimal
    unrealized_pl_percent: Decimal
    daily_change: Decimal = field(default_factory=_zero)
    daily_change_percent: Decimal = field(default_factory=_zero)
    allocation: Decimal = field(default_factory=_zero)
    sector: Optional[str] = None
    previous_close: Optional[Decimal] = None
    is_price_stale: bool = False


@dataclass
class AllocationItem:
    """Single bucket in an allocation breakdown."""

    name: str
    value: Decimal
    percentage: Decimal
    count: int = 0


@dataclass
class PortfolioSummary:
    """One portfolio's figures converted into the dashboard currency."""

    portfolio_id: str
    name: str
    currency: str
    cash: Decimal
    invested_value: Decimal
    current_value: Decimal
    total_value: Decimal
    unrealized_pl: Decimal
    realized_pl: Decimal
    daily_change: Decimal
    holdings_count: int
    xirr: Optional[Decimal] = None


@dataclass
class DashboardHolding:
    """A holding tagged with its portfolio and converted values."""

    portfolio_id: str
    portfolio_name: str
    ticker: str
    name: str
    sector: str
    country: str
    currency: str
    quantity: Decimal
    current_value: Decimal
    invested_value: Decimal
    unrealized_pl: Decimal
    unrealized_pl_percent: Decimal
    daily_change: Decimal


@dataclass
class DashboardData:
    """Cross-portfolio totals and breakdowns in one display currency."""

    currency: str
    total_cash: Decimal = field(default_factory=_zero)
    total_invested: Decimal = field(default_factory=_zero)
    total_current_value: Decimal = field(default_factory=_zero)
    total_value: Decimal = field(default_factory=_zero)
    unrealized_pl: Decimal = field(default_factory=_zero)
    unrealized_pl_percent: Decimal = field(default_factory=_zero)
    realized_pl: Decimal = field(default_factory=_zero)
    total_pl: Decimal = field(default_factory=_zero)
    total_pl_percent: Decimal = field(default_factory=_zero)
    daily_change: Decimal = field(default_factory=_zero)
    daily_change_percent: Decimal = field(default_factory=_zero)
    portfolios: list[PortfolioSummary] = field(default_factory=list)
    portfolio_allocation: list[AllocationItem] = field(default_factory=list)
    sector_allocation: list[AllocationItem] = field(default_factory=list)
    country_allocation: list[AllocationItem] = field(default_factory=list)
    currency_allocation: list[AllocationItem] = field(default_factory=list)
    top_holdings: list[DashboardHolding] = field(default_factory=list)
    top_gainers: list[DashboardHolding] = field(default_factory=list)
    top_losers: list[DashboardHolding] = field(default_factory=list)
    xirr: Optional[Decimal] = None
    last_updated: Optional[datetime] = None
