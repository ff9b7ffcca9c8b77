"""Portfolio and cash position endpoints."""

from fastapi import APIRouter, Depends, Query, status

from portfolio_tracker.api.deps import get_ledger_service
from portfolio_tracker.api.schemas import (
    CashPositionResponse,
    CashUpdateRequest,
    PortfolioCreateRequest,
    PortfolioDeleteResponse,
    PortfolioResponse,
    PortfolioUpdateRequest,
    SyncCashResponse,
    UserActionResponse,
)
from portfolio_tracker.services import LedgerService, PortfolioUpdate

router = APIRouter(prefix="/portfolios", tags=["portfolios"])


@router.get("/", response_model=list[PortfolioResponse])
def list_portfolios(
    ledger: LedgerService = Depends(get_ledger_service),
) -> list[PortfolioResponse]:
    """List live portfolios."""
    return [PortfolioResponse.model_validate(p) for p in ledger.list_portfolios()]


@router.post("/", response_model=PortfolioResponse, status_code=status.HTTP_201_CREATED)
def create_portfolio(
    request: PortfolioCreateRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> PortfolioResponse:
    """Create a portfolio; currency follows the country."""
    portfolio = ledger.create_portfolio(
        name=request.name,
        country=request.country,
        description=request.description,
        cash_position=request.cash_position,
        target_cash_percent=request.target_cash_percent,
    )
    return PortfolioResponse.model_validate(portfolio)


@router.get("/{portfolio_id}", response_model=PortfolioResponse)
def get_portfolio(
    portfolio_id: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> PortfolioResponse:
    return PortfolioResponse.model_validate(ledger.get_portfolio(portfolio_id))


@router.patch("/{portfolio_id}", response_model=PortfolioResponse)
def update_portfolio(
    portfolio_id: str,
    request: PortfolioUpdateRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> PortfolioResponse:
    portfolio = ledger.update_portfolio(
        portfolio_id,
        PortfolioUpdate(
            name=request.name,
            description=request.description,
            target_cash_percent=request.target_cash_percent,
        ),
    )
    return PortfolioResponse.model_validate(portfolio)


@router.delete("/{portfolio_id}", response_model=PortfolioDeleteResponse)
def delete_portfolio(
    portfolio_id: str,
    force: bool = Query(False, description="Also soft-delete the portfolio's transactions"),
    ledger: LedgerService = Depends(get_ledger_service),
) -> PortfolioDeleteResponse:
    """Soft delete a portfolio (409 if it has transactions and force is false)."""
    cascaded = ledger.soft_delete_portfolio(portfolio_id, force=force)
    return PortfolioDeleteResponse(
        portfolio_id=portfolio_id,
        deleted=True,
        cascaded_transactions=cascaded,
    )


@router.get("/{portfolio_id}/cash", response_model=CashPositionResponse)
def get_cash_position(
    portfolio_id: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> CashPositionResponse:
    portfolio = ledger.get_portfolio(portfolio_id)
    return CashPositionResponse(
        portfolio_id=portfolio_id,
        amount=ledger.get_cash_position(portfolio_id),
        currency=portfolio.currency,
    )


@router.put("/{portfolio_id}/cash", response_model=CashPositionResponse)
def update_cash_position(
    portfolio_id: str,
    request: CashUpdateRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> CashPositionResponse:
    portfolio = ledger.update_cash_position(portfolio_id, request.amount)
    return CashPositionResponse(
        portfolio_id=portfolio_id,
        amount=portfolio.cash_position,
        currency=portfolio.currency,
    )


sync_router = APIRouter(tags=["portfolios"])


@sync_router.post("/sync-cash-positions", response_model=SyncCashResponse)
def sync_cash_positions(
    ledger: LedgerService = Depends(get_ledger_service),
) -> SyncCashResponse:
    """Reconcile the cash store with portfolio records."""
    updated = ledger.sync_cash_positions()
    return SyncCashResponse(updated_portfolios=updated, count=len(updated))


@sync_router.get("/user-actions", response_model=list[UserActionResponse])
def list_user_actions(
    limit: int = Query(50, ge=1, le=1000),
    ledger: LedgerService = Depends(get_ledger_service),
) -> list[UserActionResponse]:
    """Most recent audit log entries, newest first."""
    return [
        UserActionResponse(
            id=entry.id,
            action=entry.action.value,
            entity_id=entry.entity_id,
            portfolio_id=entry.portfolio_id,
            timestamp=entry.timestamp,
            details=entry.details,
        )
        for entry in ledger.list_user_actions(limit)
    ]
