"""Pydantic schemas for the dashboard endpoint."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from portfolio_tracker.api.schemas.holding import AllocationItemResponse


class PortfolioSummaryResponse(BaseModel):
    """Response schema for one portfolio's converted figures."""

    model_config = {"from_attributes": True}

    portfolio_id: str
    name: str
    currency: str
    cash: Decimal
    invested_value: Decimal
    current_value: Decimal
    total_value: Decimal
    unrealized_pl: Decimal
    realized_pl: Decimal
    daily_change: Decimal
    holdings_count: int
    xirr: Optional[Decimal] = None


class DashboardHoldingResponse(BaseModel):
    """Response schema for a holding on the dashboard."""

    model_config = {"from_attributes": True}

    portfolio_id: str
    portfolio_name: str
    ticker: str
    name: str
    sector: str
    country: str
    currency: str
    quantity: Decimal
    current_value: Decimal
    invested_value: Decimal
    unrealized_pl: Decimal
    unrealized_pl_percent: Decimal
    daily_change: Decimal


class DashboardResponse(BaseModel):
    """Response schema for the dashboard."""

    model_config = {"from_attributes": True}

    currency: str
    total_cash: Decimal
    total_invested: Decimal
    total_current_value: Decimal
    total_value: Decimal
    unrealized_pl: Decimal
    unrealized_pl_percent: Decimal
    realized_pl: Decimal
    total_pl: Decimal
    total_pl_percent: Decimal
    daily_change: Decimal
    daily_change_percent: Decimal
    portfolios: list[PortfolioSummaryResponse]
    portfolio_allocation: list[AllocationItemResponse]
    sector_allocation: list[AllocationItemResponse]
    country_allocation: list[AllocationItemResponse]
    currency_allocation: list[AllocationItemResponse]
    top_holdings: list[DashboardHoldingResponse]
    top_gainers: list[DashboardHoldingResponse]
    top_losers: list[DashboardHoldingResponse]
    xirr: Optional[Decimal] = None
    last_updated: Optional[datetime] = None
