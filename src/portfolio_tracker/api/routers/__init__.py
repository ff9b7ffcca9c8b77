"""API routers package."""

from portfolio_tracker.api.routers.portfolios import router as portfolios_router
from portfolio_tracker.api.routers.portfolios import sync_router as cash_sync_router
from portfolio_tracker.api.routers.transactions import router as transactions_router
from portfolio_tracker.api.routers.holdings import router as holdings_router
from portfolio_tracker.api.routers.dashboard import router as dashboard_router
from portfolio_tracker.api.routers.market import router as market_router

__all__ = [
    "portfolios_router",
    "cash_sync_router",
    "transactions_router",
    "holdings_router",
    "dashboard_router",
    "market_router",
]
