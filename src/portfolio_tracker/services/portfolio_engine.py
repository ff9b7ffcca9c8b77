"""Holdings engine: derives positions, P&L and portfolio totals from the ledger."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from portfolio_tracker.core.exceptions import NotFoundError
from portfolio_tracker.core.locks import KeyedLocks
from portfolio_tracker.core.market_hours import market_aware_ttl
from portfolio_tracker.core.timezone import now_eastern
from portfolio_tracker.domain.models import Portfolio, Transaction, TransactionAction
from portfolio_tracker.domain.views import Holding
from portfolio_tracker.repositories.protocols import PortfolioRepository, TransactionRepository
from portfolio_tracker.services.currency_service import CurrencyService
from portfolio_tracker.services.market_data_service import MarketDataService
from portfolio_tracker.services.result_cache import ResultCache
from portfolio_tracker.services.returns import CashFlow, calculate_xirr

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole x 100, or 0 when whole is 0."""
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


@dataclass
class HoldingAccumulator:
    """
    Running average-cost state for one ticker while folding the ledger.

    BUY adds quantity and cost (fees included in cost basis).
    SELL removes quantity and cost at the current average, so the average
    price of the remaining position never changes on a sale.
    """

    ticker: str
    exchange: str = ""
    currency: str = "USD"
    country: str = ""
    quantity: Decimal = field(default_factory=lambda: ZERO)
    total_cost: Decimal = field(default_factory=lambda: ZERO)
    realized_pl: Decimal = field(default_factory=lambda: ZERO)

    @property
    def avg_buy_price(self) -> Decimal:
        if self.quantity <= 0:
            return ZERO
        return self.total_cost / self.quantity

    def apply_buy(self, txn: Transaction) -> None:
        self.quantity += txn.quantity
        self.total_cost += txn.quantity * txn.trade_price + txn.fees
        self.exchange = txn.exchange or self.exchange
        self.currency = txn.currency or self.currency
        self.country = txn.country or self.country

    def apply_sell(self, txn: Transaction) -> Decimal:
        """Reduce the position; returns the gain realized by this sale."""
        avg = self.avg_buy_price
        gain = txn.quantity * (txn.trade_price - avg) - txn.fees
        self.quantity -= txn.quantity
        self.total_cost -= txn.quantity * avg
        self.realized_pl += gain
        return gain


@dataclass
class LedgerFold:
    """Result of replaying one portfolio's transactions."""

    positions: dict[str, HoldingAccumulator]
    realized_pl: Decimal


def sort_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Ascending by date; transactions with equal dates keep insertion order."""
    return sorted(transactions, key=lambda t: t.date)


def fold_transactions(transactions: Iterable[Transaction]) -> LedgerFold:
    """
    Replay a single portfolio's transactions with the average-cost method.

    A position whose quantity reaches zero or below is closed and removed.
    Oversold remainders (legacy data predating the ingestion check) are
    discarded with a warning; the sale's realized gain still counts.
    """
    positions: dict[str, HoldingAccumulator] = {}
    realized = ZERO

    for txn in sort_transactions(transactions):
        if txn.deleted:
            continue
        acc = positions.get(txn.ticker)

        if txn.action == TransactionAction.BUY:
            if acc is None:
                acc = HoldingAccumulator(ticker=txn.ticker)
                positions[txn.ticker] = acc
            acc.apply_buy(txn)
            continue

        if acc is None:
            logger.warning(
                "SELL %s %s in portfolio %s has no open position; skipped",
                txn.quantity, txn.ticker, txn.portfolio_id,
            )
            continue

        realized += acc.apply_sell(txn)
        if acc.quantity <= 0:
            if acc.quantity < 0:
                logger.warning(
                    "Oversold %s in portfolio %s by %s; remainder discarded",
                    txn.ticker, txn.portfolio_id, -acc.quantity,
                )
            del positions[txn.ticker]

    return LedgerFold(positions=positions, realized_pl=realized)


class PortfolioEngine:
    """
    Engine for computing holdings and P&L from the ledger.

    Holdings are never persisted; they are recomputed from the full
    transaction history. The portfolio record only caches aggregate
    totals, written by `update_portfolio_totals`.
    """

    def __init__(
        self,
        portfolio_repo: PortfolioRepository,
        transaction_repo: TransactionRepository,
        market_data: MarketDataService,
        currency: CurrencyService,
        cache: ResultCache,
        locks: Optional[KeyedLocks] = None,
        now_fn: Callable[[], datetime] = now_eastern,
    ):
        self._portfolio_repo = portfolio_repo
        self._transaction_repo = transaction_repo
        self._market = market_data
        self._currency = currency
        self._cache = cache
        self._locks = locks or KeyedLocks()
        self._now = now_fn

    def calculate_holdings(
        self,
        portfolio_id: str,
        use_real_time_pricing: bool = True,
    ) -> list[Holding]:
        """
        Derive current holdings for one portfolio.

        Unknown or deleted portfolios yield an empty list. With
        use_real_time_pricing=False every holding is priced at its average
        buy price. Quote failures never abort the calculation.
        """
        portfolio = self._portfolio_repo.get_by_id(portfolio_id)
        if portfolio is None or portfolio.deleted:
            return []

        fold = fold_transactions(self._transaction_repo.list_by_portfolio(portfolio_id))
        holdings = [
            self._build_holding(portfolio, acc, use_real_time_pricing)
            for acc in fold.positions.values()
        ]

        total_value = sum((h.current_value for h in holdings), ZERO)
        for holding in holdings:
            holding.allocation = percent_of(holding.current_value, total_value)

        holdings.sort(key=lambda h: h.current_value, reverse=True)
        return holdings

    def calculate_realized_pl(self, portfolio_id: Optional[str] = None) -> Decimal:
        """
        Realized P&L of one portfolio, or summed over all live portfolios.

        The cross-portfolio sum adds native-currency amounts without FX.
        """
        if portfolio_id is not None:
            portfolio = self._portfolio_repo.get_by_id(portfolio_id)
            if portfolio is None:
                return ZERO
            return fold_transactions(
                self._transaction_repo.list_by_portfolio(portfolio_id)
            ).realized_pl

        live_ids = {p.id for p in self._portfolio_repo.list_all()}
        by_portfolio: dict[str, list[Transaction]] = defaultdict(list)
        for txn in self._transaction_repo.list_all():
            if txn.portfolio_id in live_ids:
                by_portfolio[txn.portfolio_id].append(txn)
        return sum(
            (fold_transactions(txns).realized_pl for txns in by_portfolio.values()),
            ZERO,
        )

    def get_holdings(
        self,
        portfolio_id: str,
        use_real_time_pricing: bool = True,
        force_refresh: bool = False,
    ) -> list[Holding]:
        """Cached holdings; a fresh calculation also persists portfolio totals."""
        key = ResultCache.generate_key(
            "holdings", portfolio_id, "live" if use_real_time_pricing else "book"
        )
        if not force_refresh:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        holdings = self.calculate_holdings(portfolio_id, use_real_time_pricing)
        portfolio = self._portfolio_repo.get_by_id(portfolio_id)
        if portfolio is not None and not portfolio.deleted:
            self.update_portfolio_totals(portfolio_id, holdings)
        self._cache.set(key, holdings, ttl_seconds=market_aware_ttl("holdings", self._now()))
        return holdings

    def update_portfolio_totals(
        self,
        portfolio_id: str,
        holdings: Optional[list[Holding]] = None,
    ) -> Portfolio:
        """Recompute and persist the aggregate fields cached on the portfolio record."""
        with self._locks.lock_for(portfolio_id):
            portfolio = self._portfolio_repo.get_by_id(portfolio_id)
            if portfolio is None:
                raise NotFoundError("Portfolio", portfolio_id)
            if holdings is None:
                holdings = self.calculate_holdings(portfolio_id)

            base = portfolio.currency
            invested = ZERO
            current = ZERO
            daily = ZERO
            for h in holdings:
                invested += self._currency.convert_currency(h.invested_value, h.currency, base)
                current += self._currency.convert_currency(h.current_value, h.currency, base)
                daily += self._currency.convert_currency(h.daily_change, h.currency, base)

            transactions = self._transaction_repo.list_by_portfolio(portfolio_id)
            realized = fold_transactions(transactions).realized_pl
            unrealized = current - invested

            portfolio.total_invested = invested
            portfolio.current_value = current
            portfolio.unrealized_pl = unrealized
            portfolio.realized_pl = realized
            portfolio.total_return = unrealized + realized
            portfolio.total_return_percent = percent_of(unrealized + realized, invested)
            portfolio.daily_change = daily
            portfolio.daily_change_percent = percent_of(daily, current - daily)
            portfolio.xirr = self.calculate_xirr(portfolio, transactions, current)
            portfolio.updated_at = self._now()

            logger.info(
                "Updated totals for portfolio %s: value=%s invested=%s",
                portfolio_id, current, invested,
            )
            return self._portfolio_repo.update(portfolio)

    def calculate_xirr(
        self,
        portfolio: Portfolio,
        transactions: list[Transaction],
        current_value: Decimal,
    ) -> Optional[Decimal]:
        """XIRR in percent from trade cash flows plus today's market value."""
        flows: list[CashFlow] = []
        for txn in sort_transactions(transactions):
            amount = self._currency.convert_currency(
                txn.net_cash_impact, txn.currency, portfolio.currency
            )
            flows.append(CashFlow(date=txn.date, amount=amount))
        if not flows:
            return None
        if current_value > 0:
            flows.append(CashFlow(date=self._now(), amount=current_value))

        rate = calculate_xirr(flows)
        if rate is None:
            return None
        return (rate * HUNDRED).quantize(Decimal("0.01"))

    def _build_holding(
        self,
        portfolio: Portfolio,
        acc: HoldingAccumulator,
        use_real_time_pricing: bool,
    ) -> Holding:
        avg_price = acc.avg_buy_price
        price = avg_price
        previous_close: Optional[Decimal] = None
        is_stale = False
        name = acc.ticker
        sector: Optional[str] = None

        if use_real_time_pricing:
            quote = self._market.get_quote(acc.ticker, acc.exchange)
            if quote.success and quote.price is not None:
                price = quote.price
                previous_close = quote.previous_close
                is_stale = quote.is_stale
                name = quote.company_name or name
                sector = quote.sector
            else:
                is_stale = True
        else:
            info = self._market.get_stock_info(acc.ticker)
            if info is not None:
                name = info.name or name
                sector = info.sector

        current_value = acc.quantity * price
        unrealized = current_value - acc.total_cost
        daily_change = ZERO
        daily_change_percent = ZERO
        if previous_close:
            daily_change = acc.quantity * (price - previous_close)
            daily_change_percent = percent_of(price - previous_close, previous_close)

        return Holding(
            portfolio_id=portfolio.id,
            ticker=acc.ticker,
            name=name,
            exchange=acc.exchange,
            currency=acc.currency or portfolio.currency,
            country=acc.country or portfolio.country,
            quantity=acc.quantity,
            avg_buy_price=avg_price,
            current_price=price,
            current_value=current_value,
            invested_value=acc.total_cost,
            unrealized_pl=unrealized,
            unrealized_pl_percent=percent_of(unrealized, acc.total_cost),
            daily_change=daily_change,
            daily_change_percent=daily_change_percent,
            sector=sector,
            previous_close=previous_close,
            is_price_stale=is_stale,
        )
