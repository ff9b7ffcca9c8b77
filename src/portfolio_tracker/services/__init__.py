"""Service layer - business logic orchestration."""

from portfolio_tracker.services.result_cache import ResultCache, CacheStats
from portfolio_tracker.services.currency_service import CurrencyService
from portfolio_tracker.services.market_data_service import MarketDataService
from portfolio_tracker.services.portfolio_engine import PortfolioEngine
from portfolio_tracker.services.ledger_service import (
    LedgerService,
    TransactionCreate,
    PortfolioUpdate,
)
from portfolio_tracker.services.dashboard_service import DashboardService
from portfolio_tracker.services.analytics_service import AnalyticsService

__all__ = [
    "ResultCache",
    "CacheStats",
    "CurrencyService",
    "MarketDataService",
    "PortfolioEngine",
    "LedgerService",
    "TransactionCreate",
    "PortfolioUpdate",
    "DashboardService",
    "AnalyticsService",
]
