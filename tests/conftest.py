"""
Pytest configuration and fixtures for portfolio tracker tests.

This module provides:
- Temporary JSON data directory fixtures
- A controllable clock for TTL tests
- Deterministic quote and FX sources
- Service and repository fixtures wired like AppContext
- Factory helpers for portfolios and transactions
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient

from portfolio_tracker.app_context import AppContext
from portfolio_tracker.config.settings import Settings, reset_settings
from portfolio_tracker.core.exceptions import UpstreamDataError
from portfolio_tracker.core.locks import KeyedLocks
from portfolio_tracker.core.timezone import EASTERN_TZ
from portfolio_tracker.domain.models import Portfolio, Transaction, TransactionAction
from portfolio_tracker.domain.views import Quote
from portfolio_tracker.main import create_app
from portfolio_tracker.providers.stub_provider import StaticFxRateSource
from portfolio_tracker.repositories.json_store import (
    JsonCashPositionRepository,
    JsonFileStore,
    JsonPortfolioRepository,
    JsonStockInfoRepository,
    JsonTransactionRepository,
    JsonUserActionRepository,
)
from portfolio_tracker.services import (
    AnalyticsService,
    CurrencyService,
    DashboardService,
    LedgerService,
    MarketDataService,
    PortfolioEngine,
    ResultCache,
    TransactionCreate,
)


# =============================================================================
# TIME HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


class FakeClock:
    """Callable clock returning seconds; tests move it with advance()."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests (a Saturday, markets closed)."""
    return eastern_datetime(2024, 6, 15, 14, 30, 0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# MARKET DATA FIXTURES
# =============================================================================


class DeterministicQuoteProvider:
    """
    Quote provider with fixed prices and a call log.

    Set `fail = True` to make every lookup raise, as a network outage would.
    """

    FIXED_QUOTES = {
        "AAPL": (Decimal("185.50"), Decimal("184.25"), "Apple Inc.", "Technology", "USD"),
        "MSFT": (Decimal("378.25"), Decimal("376.80"), "Microsoft Corporation", "Technology", "USD"),
        "TSLA": (Decimal("248.75"), Decimal("250.10"), "Tesla, Inc.", "Consumer Cyclical", "USD"),
        "JPM": (Decimal("198.40"), Decimal("197.10"), "JPMorgan Chase & Co.", "Financial Services", "USD"),
        "RELIANCE.NS": (Decimal("2950.00"), Decimal("2932.50"), "Reliance Industries", "Energy", "INR"),
    }

    def __init__(self):
        self.calls: list[str] = []
        self.fail = False

    def get_quote(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        if self.fail:
            raise ConnectionError("Network unavailable")
        data = self.FIXED_QUOTES.get(symbol.upper())
        if data is None:
            return Quote.failure(symbol, "Unknown symbol")
        price, previous_close, name, sector, currency = data
        return Quote(
            symbol=symbol.upper(),
            success=True,
            price=price,
            previous_close=previous_close,
            company_name=name,
            sector=sector,
            currency=currency,
            timestamp=eastern_datetime(2024, 6, 14, 16, 0),
        )


# USD->INR 83 keeps conversions easy to check by hand
TEST_FX_RATES: dict[str, dict[str, Decimal]] = {
    "USD": {"USD": Decimal("1"), "INR": Decimal("83"), "EUR": Decimal("0.9"), "GBP": Decimal("0.8")},
    "INR": {"USD": Decimal("0.012"), "INR": Decimal("1"), "EUR": Decimal("0.011"), "GBP": Decimal("0.0095")},
    "EUR": {"USD": Decimal("1.1"), "INR": Decimal("91"), "EUR": Decimal("1"), "GBP": Decimal("0.85")},
    "GBP": {"USD": Decimal("1.25"), "INR": Decimal("105"), "EUR": Decimal("1.17"), "GBP": Decimal("1")},
}


class CountingFxSource(StaticFxRateSource):
    """Static FX source that records each fetch and can be switched off."""

    def __init__(self, rates: Optional[dict[str, dict[str, Decimal]]] = None):
        super().__init__(rates if rates is not None else TEST_FX_RATES)
        self.fetches: list[str] = []
        self.fail = False

    def get_rate_table(self, base_currency: str) -> dict[str, Decimal]:
        self.fetches.append(base_currency)
        if self.fail:
            raise UpstreamDataError("FX source unavailable")
        return super().get_rate_table(base_currency)


@pytest.fixture
def quote_provider() -> DeterministicQuoteProvider:
    return DeterministicQuoteProvider()


@pytest.fixture
def fx_source() -> CountingFxSource:
    return CountingFxSource()


# =============================================================================
# STORAGE FIXTURES
# =============================================================================


@pytest.fixture
def json_store(tmp_path) -> JsonFileStore:
    """JSON store rooted in a per-test temporary directory."""
    reset_settings()
    return JsonFileStore(tmp_path / "data")


@pytest.fixture
def portfolio_repo(json_store) -> JsonPortfolioRepository:
    return JsonPortfolioRepository(json_store)


@pytest.fixture
def transaction_repo(json_store) -> JsonTransactionRepository:
    return JsonTransactionRepository(json_store)


@pytest.fixture
def cash_repo(json_store) -> JsonCashPositionRepository:
    return JsonCashPositionRepository(json_store)


@pytest.fixture
def stock_repo(json_store) -> JsonStockInfoRepository:
    return JsonStockInfoRepository(json_store)


@pytest.fixture
def user_action_repo(json_store) -> JsonUserActionRepository:
    return JsonUserActionRepository(json_store)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def result_cache(clock) -> ResultCache:
    return ResultCache(clock=clock)


@pytest.fixture
def fx_cache(clock) -> ResultCache:
    return ResultCache(clock=clock)


@pytest.fixture
def locks() -> KeyedLocks:
    return KeyedLocks()


@pytest.fixture
def currency_service(fx_source, fx_cache) -> CurrencyService:
    return CurrencyService(rate_source=fx_source, cache=fx_cache)


@pytest.fixture
def market_data_service(quote_provider, stock_repo, clock) -> MarketDataService:
    return MarketDataService(
        provider=quote_provider,
        stock_repo=stock_repo,
        cache_ttl_seconds=60,
        clock=clock,
    )


@pytest.fixture
def portfolio_engine(
    portfolio_repo,
    transaction_repo,
    market_data_service,
    currency_service,
    result_cache,
    locks,
    fixed_now,
) -> PortfolioEngine:
    return PortfolioEngine(
        portfolio_repo=portfolio_repo,
        transaction_repo=transaction_repo,
        market_data=market_data_service,
        currency=currency_service,
        cache=result_cache,
        locks=locks,
        now_fn=lambda: fixed_now,
    )


@pytest.fixture
def ledger_service(
    portfolio_repo,
    transaction_repo,
    cash_repo,
    user_action_repo,
    result_cache,
    locks,
) -> LedgerService:
    return LedgerService(
        portfolio_repo=portfolio_repo,
        transaction_repo=transaction_repo,
        cash_repo=cash_repo,
        user_action_repo=user_action_repo,
        cache=result_cache,
        locks=locks,
    )


@pytest.fixture
def dashboard_service(
    portfolio_repo,
    cash_repo,
    portfolio_engine,
    currency_service,
    result_cache,
    fixed_now,
) -> DashboardService:
    return DashboardService(
        portfolio_repo=portfolio_repo,
        cash_repo=cash_repo,
        engine=portfolio_engine,
        currency=currency_service,
        cache=result_cache,
        now_fn=lambda: fixed_now,
    )


@pytest.fixture
def analytics_service(
    portfolio_repo,
    transaction_repo,
    currency_service,
    result_cache,
    fixed_now,
) -> AnalyticsService:
    return AnalyticsService(
        portfolio_repo=portfolio_repo,
        transaction_repo=transaction_repo,
        currency=currency_service,
        cache=result_cache,
        now_fn=lambda: fixed_now,
    )


# =============================================================================
# FACTORY HELPERS
# =============================================================================


def create_buy_data(
    portfolio_id: str,
    ticker: str = "AAPL",
    quantity: Decimal = Decimal("10"),
    price: Decimal = Decimal("150.00"),
    fees: Decimal = Decimal("0"),
    date: Optional[datetime] = None,
    **kwargs,
) -> TransactionCreate:
    """Create TransactionCreate for a BUY."""
    return TransactionCreate(
        portfolio_id=portfolio_id,
        action=TransactionAction.BUY,
        ticker=ticker,
        quantity=quantity,
        trade_price=price,
        fees=fees,
        date=date or eastern_datetime(2024, 1, 15),
        **kwargs,
    )


def create_sell_data(
    portfolio_id: str,
    ticker: str = "AAPL",
    quantity: Decimal = Decimal("5"),
    price: Decimal = Decimal("160.00"),
    fees: Decimal = Decimal("0"),
    date: Optional[datetime] = None,
    **kwargs,
) -> TransactionCreate:
    """Create TransactionCreate for a SELL."""
    return TransactionCreate(
        portfolio_id=portfolio_id,
        action=TransactionAction.SELL,
        ticker=ticker,
        quantity=quantity,
        trade_price=price,
        fees=fees,
        date=date or eastern_datetime(2024, 3, 15),
        **kwargs,
    )


def make_transaction(
    action: TransactionAction,
    quantity: str,
    price: str,
    date: datetime,
    ticker: str = "AAPL",
    fees: str = "0",
    txn_id: Optional[str] = None,
    deleted: bool = False,
) -> Transaction:
    """Build a Transaction directly, bypassing the ledger's checks."""
    return Transaction(
        id=txn_id or f"{action.value.lower()}-{ticker}-{date.isoformat()}",
        portfolio_id="p1",
        date=date,
        action=action,
        ticker=ticker,
        quantity=Decimal(quantity),
        trade_price=Decimal(price),
        currency="USD",
        fees=Decimal(fees),
        deleted=deleted,
    )


@pytest.fixture
def portfolio_factory(ledger_service) -> Callable[..., Portfolio]:
    """Factory for creating test portfolios."""

    def _create_portfolio(
        name: str = "Brokerage",
        country: str = "USA",
        cash_position: Decimal = Decimal("0"),
    ) -> Portfolio:
        return ledger_service.create_portfolio(
            name=name,
            country=country,
            cash_position=cash_position,
        )

    return _create_portfolio


@pytest.fixture
def sample_portfolio(portfolio_factory) -> Portfolio:
    return portfolio_factory()


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture
def api_context(tmp_path, quote_provider) -> AppContext:
    """AppContext on a temp data dir with deterministic quote and FX sources."""
    reset_settings()
    return AppContext(
        settings=Settings(data_dir=tmp_path / "api-data", quote_provider="stub"),
        quote_provider=quote_provider,
        fx_source=CountingFxSource(),
    )


@pytest.fixture
def client(api_context) -> TestClient:
    """Test client bound to an isolated AppContext."""
    with TestClient(create_app(api_context)) as test_client:
        yield test_client
    reset_settings()


# =============================================================================
# ASSERTION HELPERS
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    places: int = 2,
    msg: str = "",
) -> None:
    """Assert two Decimals are equal after rounding to `places`."""
    quantum = Decimal(10) ** -places
    actual_q = Decimal(actual).quantize(quantum)
    expected_q = Decimal(expected).quantize(quantum)
    assert actual_q == expected_q, f"{msg} Expected {expected_q}, got {actual_q}"
