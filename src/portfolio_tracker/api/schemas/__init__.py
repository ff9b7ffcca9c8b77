"""Pydantic request/response schemas."""

from portfolio_tracker.api.schemas.portfolio import (
    PortfolioCreateRequest,
    PortfolioUpdateRequest,
    CashUpdateRequest,
    PortfolioResponse,
    PortfolioDeleteResponse,
    CashPositionResponse,
    SyncCashResponse,
    UserActionResponse,
)
from portfolio_tracker.api.schemas.transaction import (
    TransactionCreateRequest,
    TransactionResponse,
    TransactionListResponse,
)
from portfolio_tracker.api.schemas.holding import (
    HoldingResponse,
    HoldingsResponse,
    RealizedPLResponse,
    AllocationItemResponse,
    SectorAllocationResponse,
)
from portfolio_tracker.api.schemas.dashboard import (
    PortfolioSummaryResponse,
    DashboardHoldingResponse,
    DashboardResponse,
)
from portfolio_tracker.api.schemas.analytics import (
    ValuePointResponse,
    PeriodReturnResponse,
    PerformanceResponse,
)
from portfolio_tracker.api.schemas.market import (
    QuoteResponse,
    CurrencyRateResponse,
    CacheStatsResponse,
    CacheActionResponse,
)

__all__ = [
    "PortfolioCreateRequest",
    "PortfolioUpdateRequest",
    "CashUpdateRequest",
    "PortfolioResponse",
    "PortfolioDeleteResponse",
    "CashPositionResponse",
    "SyncCashResponse",
    "UserActionResponse",
    "TransactionCreateRequest",
    "TransactionResponse",
    "TransactionListResponse",
    "HoldingResponse",
    "HoldingsResponse",
    "RealizedPLResponse",
    "AllocationItemResponse",
    "SectorAllocationResponse",
    "PortfolioSummaryResponse",
    "DashboardHoldingResponse",
    "DashboardResponse",
    "ValuePointResponse",
    "PeriodReturnResponse",
    "PerformanceResponse",
    "QuoteResponse",
    "CurrencyRateResponse",
    "CacheStatsResponse",
    "CacheActionResponse",
]
