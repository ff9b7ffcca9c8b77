"""Transaction ledger endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from portfolio_tracker.api.deps import get_ledger_service
from portfolio_tracker.api.schemas import (
    TransactionCreateRequest,
    TransactionListResponse,
    TransactionResponse,
)
from portfolio_tracker.services import LedgerService, TransactionCreate

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("/", response_model=TransactionListResponse)
def list_transactions(
    portfolio_id: Optional[str] = Query(None, description="Filter by portfolio (all if empty)"),
    include_deleted: bool = Query(False),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionListResponse:
    """List transactions, newest first."""
    transactions = ledger.list_transactions(portfolio_id, include_deleted=include_deleted)
    return TransactionListResponse(
        items=[TransactionResponse.model_validate(t) for t in transactions],
        total=len(transactions),
    )


@router.post("/", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def add_transaction(
    request: TransactionCreateRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """Record a BUY or SELL."""
    transaction = ledger.add_transaction(
        TransactionCreate(
            portfolio_id=request.portfolio_id,
            action=request.action,
            ticker=request.ticker,
            quantity=request.quantity,
            trade_price=request.trade_price,
            date=request.date,
            currency=request.currency,
            exchange=request.exchange,
            country=request.country,
            fees=request.fees,
            notes=request.notes,
            tag=request.tag,
        )
    )
    return TransactionResponse.model_validate(transaction)


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    return TransactionResponse.model_validate(ledger.get_transaction(transaction_id))


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> None:
    """Soft delete a transaction."""
    ledger.soft_delete_transaction(transaction_id)
