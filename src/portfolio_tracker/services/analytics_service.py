"""Performance analytics: value history and risk/return statistics."""

import logging
import math
import statistics
from datetime import datetime, timedelta
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

from portfolio_tracker.core.currencies import normalize_currency
from portfolio_tracker.core.exceptions import NotFoundError, ValidationError
from portfolio_tracker.core.timezone import EASTERN_TZ, month_key, now_eastern
from portfolio_tracker.domain.models import Transaction, TransactionAction
from portfolio_tracker.domain.views import PerformanceAnalytics, PeriodReturn, ValuePoint
from portfolio_tracker.repositories.protocols import PortfolioRepository, TransactionRepository
from portfolio_tracker.services.currency_service import CurrencyService
from portfolio_tracker.services.result_cache import ResultCache

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = 252
RISK_FREE_RATE = 0.045
ANALYTICS_CACHE_TTL_SECONDS = 5 * 60

TIMEFRAMES = ("1M", "3M", "6M", "1Y", "3Y", "ALL")
_TIMEFRAME_OFFSETS = {
    "1M": relativedelta(months=1),
    "3M": relativedelta(months=3),
    "6M": relativedelta(months=6),
    "1Y": relativedelta(years=1),
    "3Y": relativedelta(years=3),
}
_TIMEFRAME_YEARS = {"1M": 1 / 12, "3M": 0.25, "6M": 0.5, "1Y": 1.0, "3Y": 3.0}

ALL_TIME_START = EASTERN_TZ.localize(datetime(2020, 1, 1))

# Historical prices are not stored, so the series is the cost basis at each
# checkpoint modulated by a smooth oscillation.
POINT_INTERVAL = timedelta(days=7)
OSCILLATION_EPOCH = EASTERN_TZ.localize(datetime(2024, 1, 1))
OSCILLATION_PERIOD_DAYS = 30
OSCILLATION_AMPLITUDE = 0.05

# Annualizing a short, steep history blows up; cap the yearly log growth.
MAX_ANNUAL_LOG_GROWTH = math.log(1_000_000)

PERIOD_RETURN_WINDOWS = (("1M", 30), ("3M", 90), ("6M", 180), ("1Y", 365))


def resolve_window(timeframe: str, now: datetime) -> tuple[datetime, datetime]:
    """Map a timeframe token to a [start, end] window ending at `now`."""
    if timeframe == "ALL":
        return ALL_TIME_START, now
    offset = _TIMEFRAME_OFFSETS.get(timeframe)
    if offset is None:
        raise ValidationError(
            f"Unknown timeframe '{timeframe}'. Expected one of: {', '.join(TIMEFRAMES)}"
        )
    return now - offset, now


def build_value_history(
    cost_flows: list[tuple[datetime, float]],
    start: datetime,
    end: datetime,
) -> list[ValuePoint]:
    """
    Weekly value points from `start` to `end`.

    Each point is the cumulative BUY cost up to that date times the
    oscillation factor. Leading zero points (before the first purchase)
    are dropped so no return is measured against a zero base.
    """
    flows = sorted(cost_flows, key=lambda f: f[0])
    points: list[ValuePoint] = []
    cumulative = 0.0
    idx = 0
    checkpoint = start
    while checkpoint <= end:
        while idx < len(flows) and flows[idx][0] <= checkpoint:
            cumulative += flows[idx][1]
            idx += 1
        days = (checkpoint - OSCILLATION_EPOCH).days
        factor = 1 + math.sin(days / OSCILLATION_PERIOD_DAYS) * OSCILLATION_AMPLITUDE
        points.append(ValuePoint(date=checkpoint, value=cumulative * factor))
        checkpoint += POINT_INTERVAL

    while points and points[0].value <= 0:
        points.pop(0)
    return points


def period_returns(values: list[float]) -> list[float]:
    """Percent change between consecutive values (0 where the base is 0)."""
    returns = []
    for prev, curr in zip(values, values[1:]):
        returns.append((curr - prev) / prev * 100 if prev else 0.0)
    return returns


def annualized_return(first: float, last: float, years: float) -> float:
    """Compound annual growth in percent; 0 unless both ends and the span are positive."""
    if first <= 0 or last <= 0 or years <= 0:
        return 0.0
    log_growth = min(math.log(last / first) / years, MAX_ANNUAL_LOG_GROWTH)
    return (math.exp(log_growth) - 1) * 100


def max_drawdown(values: list[float]) -> float:
    """Largest peak-to-trough decline in percent."""
    peak = values[0] if values else 0.0
    worst = 0.0
    for value in values:
        peak = max(peak, value)
        if peak > 0:
            worst = max(worst, (peak - value) / peak * 100)
    return worst


def current_streak(returns: list[float]) -> tuple[int, str]:
    """Consecutive same-sign periods ending at the last one; (0, "none") if it is flat."""
    if not returns or returns[-1] == 0:
        return 0, "none"
    winning = returns[-1] > 0
    count = 0
    for r in reversed(returns):
        if r == 0 or (r > 0) != winning:
            break
        count += 1
    return count, "winning" if winning else "losing"


def monthly_returns(points: list[ValuePoint]) -> list[PeriodReturn]:
    """First-to-last return of each calendar month holding at least two points."""
    months: dict[str, list[float]] = {}
    for point in points:
        months.setdefault(month_key(point.date), []).append(point.value)
    result = []
    for month, values in months.items():
        if len(values) >= 2 and values[0] > 0:
            result.append(PeriodReturn(month, (values[-1] - values[0]) / values[0] * 100))
    return result


def compute_analytics(
    points: list[ValuePoint],
    timeframe: str,
    currency: str,
    portfolio_id: Optional[str] = None,
    risk_free_rate: float = RISK_FREE_RATE,
    calculated_at: Optional[datetime] = None,
) -> PerformanceAnalytics:
    """Statistics for a value history; all zeros with fewer than two points."""
    result = PerformanceAnalytics(
        timeframe=timeframe,
        currency=currency,
        portfolio_id=portfolio_id,
        value_history=[ValuePoint(p.date, round(p.value, 2)) for p in points],
        calculated_at=calculated_at,
    )
    if len(points) < 2:
        return result

    values = [p.value for p in points]
    returns = period_returns(values)
    first, last = values[0], values[-1]

    if timeframe == "ALL":
        years = (points[-1].date - points[0].date).days / 365.25 or 1.0
    else:
        years = _TIMEFRAME_YEARS.get(timeframe, 1.0)

    total_return_percent = (last - first) / first * 100 if first else 0.0
    annualized = annualized_return(first, last, years)
    volatility = statistics.pstdev(returns) * math.sqrt(TRADING_DAYS_PER_YEAR)
    sharpe = (annualized - risk_free_rate * 100) / volatility if volatility else 0.0

    labelled = [
        PeriodReturn(points[i + 1].date.strftime("%Y-%m-%d"), r)
        for i, r in enumerate(returns)
    ]
    months = monthly_returns(points)
    streak, streak_type = current_streak(returns)

    windows = {}
    for label, days in PERIOD_RETURN_WINDOWS:
        steps = math.ceil(days / 7)
        if len(values) > steps and values[-1 - steps] > 0:
            base = values[-1 - steps]
            windows[label] = round((last - base) / base * 100, 2)

    result.start_value = round(first, 2)
    result.end_value = round(last, 2)
    result.total_return = round(last - first, 2)
    result.total_return_percent = round(total_return_percent, 2)
    result.annualized_return = round(annualized, 2)
    result.volatility = round(volatility, 2)
    result.sharpe_ratio = round(sharpe, 2)
    result.max_drawdown = round(max_drawdown(values), 2)
    result.best_period = _rounded(max(labelled, key=lambda p: p.return_percent))
    result.worst_period = _rounded(min(labelled, key=lambda p: p.return_percent))
    if months:
        result.best_month = _rounded(max(months, key=lambda p: p.return_percent))
        result.worst_month = _rounded(min(months, key=lambda p: p.return_percent))
    result.current_streak = streak
    result.streak_type = streak_type
    result.period_returns = windows
    result.monthly_returns = [_rounded(m) for m in months]
    return result


def _rounded(period: PeriodReturn) -> PeriodReturn:
    return PeriodReturn(period.label, round(period.return_percent, 2))


class AnalyticsService:
    """
    Service for portfolio performance analytics.

    Results are cached per (portfolio or "all", timeframe, currency).
    """

    def __init__(
        self,
        portfolio_repo: PortfolioRepository,
        transaction_repo: TransactionRepository,
        currency: CurrencyService,
        cache: ResultCache,
        risk_free_rate: float = RISK_FREE_RATE,
        ttl_seconds: float = ANALYTICS_CACHE_TTL_SECONDS,
        now_fn: Callable[[], datetime] = now_eastern,
    ):
        self._portfolio_repo = portfolio_repo
        self._transaction_repo = transaction_repo
        self._currency = currency
        self._cache = cache
        self._risk_free_rate = risk_free_rate
        self._ttl = ttl_seconds
        self._now = now_fn

    def calculate_performance_analytics(
        self,
        portfolio_id: Optional[str] = None,
        timeframe: str = "1Y",
        currency: str = "USD",
    ) -> PerformanceAnalytics:
        """
        Analytics for one portfolio, or all live portfolios when portfolio_id is None.

        Raises:
            NotFoundError: unknown or deleted portfolio
            ValidationError: unknown timeframe or currency
        """
        timeframe = (timeframe or "").upper()
        if timeframe not in TIMEFRAMES:
            raise ValidationError(
                f"Unknown timeframe '{timeframe}'. Expected one of: {', '.join(TIMEFRAMES)}"
            )
        try:
            currency = normalize_currency(currency)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        transactions = self._select_transactions(portfolio_id)

        key = ResultCache.generate_key("analytics", portfolio_id or "all", timeframe, currency)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        now = self._now()
        start, end = resolve_window(timeframe, now)
        cost_flows = [
            (t.date, float(self._currency.convert_currency(
                t.gross_amount + t.fees, t.currency, currency
            )))
            for t in transactions
            if t.action == TransactionAction.BUY
        ]
        points = build_value_history(cost_flows, start, end)
        result = compute_analytics(
            points,
            timeframe,
            currency,
            portfolio_id=portfolio_id,
            risk_free_rate=self._risk_free_rate,
            calculated_at=now,
        )
        logger.debug(
            "Analytics for %s/%s/%s from %d points",
            portfolio_id or "all", timeframe, currency, len(points),
        )
        self._cache.set(key, result, ttl_seconds=self._ttl)
        return result

    def _select_transactions(self, portfolio_id: Optional[str]) -> list[Transaction]:
        if portfolio_id is not None:
            portfolio = self._portfolio_repo.get_by_id(portfolio_id)
            if portfolio is None or portfolio.deleted:
                raise NotFoundError("Portfolio", portfolio_id)
            return self._transaction_repo.list_by_portfolio(portfolio_id)
        live_ids = {p.id for p in self._portfolio_repo.list_all()}
        return [t for t in self._transaction_repo.list_all() if t.portfolio_id in live_ids]
