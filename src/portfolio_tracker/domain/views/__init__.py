"""View models package (read-only outputs)."""

from portfolio_tracker.domain.views.portfolio import (
    Quote,
    Holding,
    AllocationItem,
    PortfolioSummary,
    DashboardHolding,
    DashboardData,
)
from portfolio_tracker.domain.views.analytics import (
    ValuePoint,
    PeriodReturn,
    PerformanceAnalytics,
)

__all__ = [
    "Quote",
    "Holding",
    "AllocationItem",
    "PortfolioSummary",
    "DashboardHolding",
    "DashboardData",
    "ValuePoint",
    "PeriodReturn",
    "PerformanceAnalytics",
]
