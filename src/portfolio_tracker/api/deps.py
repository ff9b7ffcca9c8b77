"""Dependency injection for FastAPI."""

from fastapi import Depends, Request

from portfolio_tracker.app_context import AppContext
from portfolio_tracker.services import (
    AnalyticsService,
    CurrencyService,
    DashboardService,
    LedgerService,
    MarketDataService,
    PortfolioEngine,
    ResultCache,
)


def get_context(request: Request) -> AppContext:
    """Provide the AppContext built at startup."""
    return request.app.state.context


def get_ledger_service(context: AppContext = Depends(get_context)) -> LedgerService:
    return context.ledger


def get_portfolio_engine(context: AppContext = Depends(get_context)) -> PortfolioEngine:
    return context.portfolio_engine


def get_market_data_service(context: AppContext = Depends(get_context)) -> MarketDataService:
    return context.market_data


def get_currency_service(context: AppContext = Depends(get_context)) -> CurrencyService:
    return context.currency


def get_dashboard_service(context: AppContext = Depends(get_context)) -> DashboardService:
    return context.dashboard


def get_analytics_service(context: AppContext = Depends(get_context)) -> AnalyticsService:
    return context.analytics


def get_result_cache(context: AppContext = Depends(get_context)) -> ResultCache:
    return context.result_cache
