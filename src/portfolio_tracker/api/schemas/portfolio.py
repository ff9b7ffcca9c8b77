"""Pydantic schemas for portfolio and cash endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field


class PortfolioCreateRequest(BaseModel):
    """Request schema for creating a portfolio."""

    name: str = Field(..., min_length=1, max_length=100, description="Portfolio name")
    country: str = Field(default="USA", description="Country; determines the portfolio currency")
    description: str = Field(default="", max_length=500)
    cash_position: Decimal = Field(default=Decimal("0"), ge=0)
    target_cash_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class PortfolioUpdateRequest(BaseModel):
    """Request schema for editing a portfolio (currency is not editable)."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    target_cash_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)


class CashUpdateRequest(BaseModel):
    """Request schema for setting a portfolio's cash balance."""

    amount: Decimal = Field(..., ge=0, description="Cash in the portfolio currency")


class PortfolioResponse(BaseModel):
    """Response schema for a portfolio with its cached totals."""

    model_config = {"from_attributes": True}

    id: str
    name: str
    description: str
    currency: str
    country: str
    cash_position: Decimal
    target_cash_percent: Decimal
    total_invested: Decimal
    current_value: Decimal
    total_return: Decimal
    total_return_percent: Decimal
    realized_pl: Decimal
    unrealized_pl: Decimal
    daily_change: Decimal
    daily_change_percent: Decimal
    xirr: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PortfolioDeleteResponse(BaseModel):
    """Response schema for a portfolio soft delete."""

    portfolio_id: str
    deleted: bool
    cascaded_transactions: int


class CashPositionResponse(BaseModel):
    """Response schema for a cash balance."""

    portfolio_id: str
    amount: Decimal
    currency: str


class SyncCashResponse(BaseModel):
    """Response schema for cash reconciliation."""

    updated_portfolios: list[str]
    count: int


class UserActionResponse(BaseModel):
    """One audit log entry."""

    model_config = {"from_attributes": True}

    id: str
    action: str
    entity_id: str
    portfolio_id: Optional[str] = None
    timestamp: datetime
    details: dict[str, Any] = Field(default_factory=dict)
