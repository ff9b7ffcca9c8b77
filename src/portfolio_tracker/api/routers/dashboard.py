"""Dashboard and performance analytics endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from portfolio_tracker.api.deps import get_analytics_service, get_dashboard_service
from portfolio_tracker.api.schemas import DashboardResponse, PerformanceResponse
from portfolio_tracker.services import AnalyticsService, DashboardService

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    currency: Optional[str] = Query(None, description="Display currency (USD, INR, EUR, GBP)"),
    refresh: bool = Query(False, description="Recompute instead of serving the cached dashboard"),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    """Totals and allocations across all portfolios in one currency."""
    data = dashboard.get_dashboard_data(currency, force_refresh=refresh)
    return DashboardResponse.model_validate(data)


@router.get("/performance", response_model=PerformanceResponse)
def get_performance(
    portfolio_id: Optional[str] = Query(None, description="Portfolio ID (all portfolios if empty)"),
    timeframe: str = Query("1Y", description="1M, 3M, 6M, 1Y, 3Y or ALL"),
    currency: str = Query("USD"),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> PerformanceResponse:
    result = analytics.calculate_performance_analytics(portfolio_id, timeframe, currency)
    return PerformanceResponse.model_validate(result)
