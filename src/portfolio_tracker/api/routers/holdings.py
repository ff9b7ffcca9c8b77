"""Holdings, realized P&L and sector allocation endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from portfolio_tracker.api.deps import (
    get_dashboard_service,
    get_ledger_service,
    get_portfolio_engine,
)
from portfolio_tracker.api.schemas import (
    AllocationItemResponse,
    HoldingResponse,
    HoldingsResponse,
    RealizedPLResponse,
    SectorAllocationResponse,
)
from portfolio_tracker.core.exceptions import ValidationError
from portfolio_tracker.services import DashboardService, LedgerService, PortfolioEngine

router = APIRouter(tags=["holdings"])


@router.get("/holdings", response_model=HoldingsResponse)
def get_holdings(
    portfolio_id: Optional[str] = Query(None, description="Portfolio ID (required)"),
    force_refresh: bool = Query(False, description="Bypass the holdings cache"),
    real_time: bool = Query(True, description="Price with live quotes instead of average cost"),
    ledger: LedgerService = Depends(get_ledger_service),
    engine: PortfolioEngine = Depends(get_portfolio_engine),
) -> HoldingsResponse:
    """Current holdings of one portfolio, largest position first."""
    if not portfolio_id:
        raise ValidationError("portfolio_id is required")
    ledger.get_portfolio(portfolio_id)

    holdings = engine.get_holdings(
        portfolio_id,
        use_real_time_pricing=real_time,
        force_refresh=force_refresh,
    )
    portfolio = ledger.get_portfolio(portfolio_id)
    return HoldingsResponse(
        portfolio_id=portfolio_id,
        currency=portfolio.currency,
        holdings=[HoldingResponse.model_validate(h) for h in holdings],
        total_value=portfolio.current_value,
        total_invested=portfolio.total_invested,
    )


@router.get("/realized-pl", response_model=RealizedPLResponse)
def get_realized_pl(
    portfolio_id: Optional[str] = Query(None, description="Portfolio ID (all portfolios if empty)"),
    engine: PortfolioEngine = Depends(get_portfolio_engine),
) -> RealizedPLResponse:
    """Realized P&L (average-cost method) in native currency."""
    return RealizedPLResponse(
        portfolio_id=portfolio_id,
        realized_pl=engine.calculate_realized_pl(portfolio_id),
    )


@router.get("/sector-allocation", response_model=SectorAllocationResponse)
def get_sector_allocation(
    portfolio_id: Optional[str] = Query(None, description="Portfolio ID (all portfolios if empty)"),
    currency: Optional[str] = Query(None, description="Display currency"),
    ledger: LedgerService = Depends(get_ledger_service),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> SectorAllocationResponse:
    items = dashboard.get_sector_allocation(portfolio_id, currency)
    if currency:
        resolved = currency.upper()
    elif portfolio_id:
        resolved = ledger.get_portfolio(portfolio_id).currency
    else:
        resolved = dashboard.default_currency
    return SectorAllocationResponse(
        portfolio_id=portfolio_id,
        currency=resolved,
        items=[AllocationItemResponse.model_validate(i) for i in items],
    )
