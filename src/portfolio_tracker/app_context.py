"""Application context: constructs every service once and wires them together."""

from typing import Callable, Optional

from portfolio_tracker.config.settings import Settings, get_settings
from portfolio_tracker.core.locks import KeyedLocks
from portfolio_tracker.providers.market_data_provider import FxRateSource, QuoteProvider
from portfolio_tracker.providers.stub_provider import StaticFxRateSource, StubQuoteProvider
from portfolio_tracker.providers.yahoo_provider import YahooFxRateSource, YahooQuoteProvider
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
)


class AppContext:
    """
    Explicitly constructed service graph with process lifetime.

    Two result caches are kept: one for computed aggregates (cleared on
    every mutation) and one for FX rate tables (expires by TTL only).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        quote_provider: Optional[QuoteProvider] = None,
        fx_source: Optional[FxRateSource] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.settings = settings or get_settings()
        s = self.settings

        self.store = JsonFileStore(s.get_data_dir())
        self.portfolio_repo = JsonPortfolioRepository(self.store)
        self.transaction_repo = JsonTransactionRepository(self.store)
        self.cash_repo = JsonCashPositionRepository(self.store)
        self.stock_repo = JsonStockInfoRepository(self.store)
        self.user_action_repo = JsonUserActionRepository(self.store)

        cache_kwargs = {"clock": clock} if clock else {}
        self.result_cache = ResultCache(s.result_cache_ttl_seconds, **cache_kwargs)
        self.fx_cache = ResultCache(s.fx_cache_ttl_seconds, **cache_kwargs)
        self.locks = KeyedLocks()

        if quote_provider is None:
            if s.quote_provider == "stub":
                quote_provider = StubQuoteProvider()
            else:
                quote_provider = YahooQuoteProvider(timeout_seconds=s.quote_timeout_seconds)
        if fx_source is None:
            if s.quote_provider == "stub":
                fx_source = StaticFxRateSource()
            else:
                fx_source = YahooFxRateSource(timeout_seconds=s.fx_timeout_seconds)

        self.currency = CurrencyService(
            rate_source=fx_source,
            cache=self.fx_cache,
            ttl_seconds=s.fx_cache_ttl_seconds,
            failure_ttl_seconds=s.fx_failure_ttl_seconds,
        )
        self.market_data = MarketDataService(
            provider=quote_provider,
            stock_repo=self.stock_repo,
            cache_ttl_seconds=s.quote_cache_ttl_seconds,
            failure_ttl_seconds=s.quote_failure_ttl_seconds,
        )
        self.portfolio_engine = PortfolioEngine(
            portfolio_repo=self.portfolio_repo,
            transaction_repo=self.transaction_repo,
            market_data=self.market_data,
            currency=self.currency,
            cache=self.result_cache,
            locks=self.locks,
        )
        self.ledger = LedgerService(
            portfolio_repo=self.portfolio_repo,
            transaction_repo=self.transaction_repo,
            cash_repo=self.cash_repo,
            user_action_repo=self.user_action_repo,
            cache=self.result_cache,
            locks=self.locks,
            reject_oversell=s.reject_oversell,
        )
        self.dashboard = DashboardService(
            portfolio_repo=self.portfolio_repo,
            cash_repo=self.cash_repo,
            engine=self.portfolio_engine,
            currency=self.currency,
            cache=self.result_cache,
            default_currency=s.default_currency,
        )
        self.analytics = AnalyticsService(
            portfolio_repo=self.portfolio_repo,
            transaction_repo=self.transaction_repo,
            currency=self.currency,
            cache=self.result_cache,
            risk_free_rate=s.risk_free_rate,
            ttl_seconds=s.analytics_cache_ttl_seconds,
        )

    def force_refresh(self) -> None:
        """Drop every cached aggregate, quote and FX table."""
        self.result_cache.mark_global_refresh()
        self.market_data.clear_cache()
        self.currency.refresh_rates()
