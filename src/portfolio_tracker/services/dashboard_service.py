"""Dashboard aggregation across portfolios in one display currency."""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from portfolio_tracker.core.currencies import normalize_currency
from portfolio_tracker.core.exceptions import NotFoundError, ValidationError
from portfolio_tracker.core.market_hours import market_aware_ttl
from portfolio_tracker.core.timezone import now_eastern
from portfolio_tracker.domain.models import Portfolio
from portfolio_tracker.domain.views import (
    AllocationItem,
    DashboardData,
    DashboardHolding,
    PortfolioSummary,
)
from portfolio_tracker.repositories.protocols import CashPositionRepository, PortfolioRepository
from portfolio_tracker.services.currency_service import CurrencyService
from portfolio_tracker.services.portfolio_engine import ZERO, PortfolioEngine, percent_of
from portfolio_tracker.services.result_cache import ResultCache

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
TOP_HOLDINGS_LIMIT = 10
TOP_MOVERS_LIMIT = 5


def build_allocation(
    buckets: dict[str, Decimal],
    counts: Optional[dict[str, int]] = None,
) -> list[AllocationItem]:
    """Allocation items sorted by value, percentages of the bucket total."""
    total = sum(buckets.values(), ZERO)
    items = [
        AllocationItem(
            name=name,
            value=value,
            percentage=percent_of(value, total),
            count=(counts or {}).get(name, 0),
        )
        for name, value in buckets.items()
    ]
    items.sort(key=lambda item: item.value, reverse=True)
    return items


def weighted_xirr(summaries: Iterable[PortfolioSummary]) -> Optional[Decimal]:
    """XIRR of each portfolio weighted by its total value; None if no portfolio has one."""
    weighted = ZERO
    weight = ZERO
    for summary in summaries:
        if summary.xirr is None or summary.total_value <= 0:
            continue
        weighted += summary.xirr * summary.total_value
        weight += summary.total_value
    if weight == 0:
        return None
    return (weighted / weight).quantize(Decimal("0.01"))


class DashboardService:
    """
    Builds the cross-portfolio dashboard.

    Holdings convert from their own currency; cash and realized P&L
    convert from the portfolio's native currency.
    """

    def __init__(
        self,
        portfolio_repo: PortfolioRepository,
        cash_repo: CashPositionRepository,
        engine: PortfolioEngine,
        currency: CurrencyService,
        cache: ResultCache,
        default_currency: str = "USD",
        now_fn: Callable[[], datetime] = now_eastern,
    ):
        self._portfolio_repo = portfolio_repo
        self._cash_repo = cash_repo
        self._engine = engine
        self._currency = currency
        self._cache = cache
        self._default_currency = default_currency
        self._now = now_fn

    @property
    def default_currency(self) -> str:
        return self._default_currency

    def get_dashboard_data(
        self,
        display_currency: Optional[str] = None,
        force_refresh: bool = False,
    ) -> DashboardData:
        target = self._validate_currency(display_currency)
        key = ResultCache.generate_key("dashboard", target)
        if not force_refresh:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        data = DashboardData(currency=target)
        holdings_rows: list[DashboardHolding] = []
        portfolio_values: dict[str, Decimal] = {}
        sectors: dict[str, Decimal] = defaultdict(lambda: ZERO)
        sector_counts: dict[str, int] = defaultdict(int)
        countries: dict[str, Decimal] = defaultdict(lambda: ZERO)
        currencies: dict[str, Decimal] = defaultdict(lambda: ZERO)

        for portfolio in self._portfolio_repo.list_all():
            summary, rows = self._summarize(portfolio, target, force_refresh)
            data.portfolios.append(summary)
            holdings_rows.extend(rows)
            portfolio_values[portfolio.name] = (
                portfolio_values.get(portfolio.name, ZERO) + summary.total_value
            )

            data.total_cash += summary.cash
            data.total_invested += summary.invested_value
            data.total_current_value += summary.current_value
            data.realized_pl += summary.realized_pl
            data.daily_change += summary.daily_change

            for row in rows:
                sectors[row.sector] += row.current_value
                sector_counts[row.sector] += 1
                currencies[row.currency] += row.current_value
                countries[row.country] += row.current_value

        data.total_value = data.total_current_value + data.total_cash
        data.unrealized_pl = data.total_current_value - data.total_invested
        data.unrealized_pl_percent = percent_of(data.unrealized_pl, data.total_invested)
        data.total_pl = data.unrealized_pl + data.realized_pl
        data.total_pl_percent = percent_of(data.total_pl, data.total_invested)
        data.daily_change_percent = percent_of(
            data.daily_change, data.total_current_value - data.daily_change
        )

        data.portfolio_allocation = build_allocation(portfolio_values)
        data.sector_allocation = build_allocation(dict(sectors), dict(sector_counts))
        data.country_allocation = build_allocation(dict(countries))
        data.currency_allocation = build_allocation(dict(currencies))

        by_value = sorted(holdings_rows, key=lambda r: r.current_value, reverse=True)
        data.top_holdings = by_value[:TOP_HOLDINGS_LIMIT]
        data.top_gainers = sorted(
            (r for r in holdings_rows if r.unrealized_pl_percent > 0),
            key=lambda r: r.unrealized_pl_percent,
            reverse=True,
        )[:TOP_MOVERS_LIMIT]
        data.top_losers = sorted(
            (r for r in holdings_rows if r.unrealized_pl_percent < 0),
            key=lambda r: r.unrealized_pl_percent,
        )[:TOP_MOVERS_LIMIT]
        data.xirr = weighted_xirr(data.portfolios)
        data.last_updated = self._now()

        self._cache.set(key, data, ttl_seconds=market_aware_ttl("dashboard", data.last_updated))
        return data

    def get_sector_allocation(
        self,
        portfolio_id: Optional[str] = None,
        display_currency: Optional[str] = None,
    ) -> list[AllocationItem]:
        """
        Sector breakdown of holdings for one portfolio or all of them.

        A single portfolio defaults to its own currency; all portfolios
        default to the configured display currency.
        """
        if portfolio_id is not None:
            portfolio = self._portfolio_repo.get_by_id(portfolio_id)
            if portfolio is None or portfolio.deleted:
                raise NotFoundError("Portfolio", portfolio_id)
            portfolios: Iterable[Portfolio] = [portfolio]
            target = self._validate_currency(display_currency or portfolio.currency)
        else:
            portfolios = self._portfolio_repo.list_all()
            target = self._validate_currency(display_currency)

        sectors: dict[str, Decimal] = defaultdict(lambda: ZERO)
        counts: dict[str, int] = defaultdict(int)
        for portfolio in portfolios:
            for holding in self._engine.get_holdings(portfolio.id):
                sector = holding.sector or UNKNOWN
                sectors[sector] += self._currency.convert_currency(
                    holding.current_value, holding.currency, target
                )
                counts[sector] += 1
        return build_allocation(dict(sectors), dict(counts))

    def _summarize(
        self,
        portfolio: Portfolio,
        target: str,
        force_refresh: bool,
    ) -> tuple[PortfolioSummary, list[DashboardHolding]]:
        convert = self._currency.convert_currency
        holdings = self._engine.get_holdings(portfolio.id, force_refresh=force_refresh)

        rows: list[DashboardHolding] = []
        invested = ZERO
        current = ZERO
        daily = ZERO
        for h in holdings:
            row = DashboardHolding(
                portfolio_id=portfolio.id,
                portfolio_name=portfolio.name,
                ticker=h.ticker,
                name=h.name,
                sector=h.sector or UNKNOWN,
                country=h.country or portfolio.country or UNKNOWN,
                currency=h.currency,
                quantity=h.quantity,
                current_value=convert(h.current_value, h.currency, target),
                invested_value=convert(h.invested_value, h.currency, target),
                unrealized_pl=convert(h.unrealized_pl, h.currency, target),
                unrealized_pl_percent=h.unrealized_pl_percent,
                daily_change=convert(h.daily_change, h.currency, target),
            )
            rows.append(row)
            invested += row.invested_value
            current += row.current_value
            daily += row.daily_change

        cash_position = self._cash_repo.get(portfolio.id)
        native_cash = cash_position.amount if cash_position else portfolio.cash_position
        cash = convert(native_cash, portfolio.currency, target)
        realized = convert(
            self._engine.calculate_realized_pl(portfolio.id), portfolio.currency, target
        )

        summary = PortfolioSummary(
            portfolio_id=portfolio.id,
            name=portfolio.name,
            currency=portfolio.currency,
            cash=cash,
            invested_value=invested,
            current_value=current,
            total_value=current + cash,
            unrealized_pl=current - invested,
            realized_pl=realized,
            daily_change=daily,
            holdings_count=len(holdings),
            xirr=self._current_xirr(portfolio),
        )
        return summary, rows

    def _current_xirr(self, portfolio: Portfolio) -> Optional[Decimal]:
        # get_holdings may have just rewritten the stored totals
        stored = self._portfolio_repo.get_by_id(portfolio.id)
        return stored.xirr if stored is not None else portfolio.xirr

    def _validate_currency(self, code: Optional[str]) -> str:
        try:
            return normalize_currency(code or self._default_currency)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
