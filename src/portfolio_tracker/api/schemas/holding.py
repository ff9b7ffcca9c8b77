"""Pydantic schemas for holdings, realized P&L and allocation endpoints."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class HoldingResponse(BaseModel):
    """Response schema for a single holding."""

    model_config = {"from_attributes": True}

    ticker: str
    name: str
    exchange: str
    currency: str
    country: str
    sector: Optional[str] = None
    quantity: Decimal
    avg_buy_price: Decimal
    current_price: Decimal
    previous_close: Optional[Decimal] = None
    current_value: Decimal
    invested_value: Decimal
    unrealized_pl: Decimal
    unrealized_pl_percent: Decimal
    daily_change: Decimal
    daily_change_percent: Decimal
    allocation: Decimal
    is_price_stale: bool


class HoldingsResponse(BaseModel):
    """Response schema for a portfolio's holdings."""

    portfolio_id: str
    currency: str
    holdings: list[HoldingResponse]
    total_value: Decimal
    total_invested: Decimal


class RealizedPLResponse(BaseModel):
    """Response schema for realized P&L."""

    portfolio_id: Optional[str] = None
    realized_pl: Decimal


class AllocationItemResponse(BaseModel):
    """Response schema for a single allocation bucket."""

    model_config = {"from_attributes": True}

    name: str
    value: Decimal
    percentage: Decimal
    count: int = 0


class SectorAllocationResponse(BaseModel):
    """Response schema for sector allocation."""

    portfolio_id: Optional[str] = None
    currency: str
    items: list[AllocationItemResponse]
