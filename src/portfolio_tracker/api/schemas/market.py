"""Pydantic schemas for market data, currency and cache endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class QuoteResponse(BaseModel):
    """Response schema for a market quote."""

    model_config = {"from_attributes": True}

    symbol: str
    price: Decimal
    previous_close: Optional[Decimal] = None
    company_name: str
    sector: Optional[str] = None
    currency: Optional[str] = None
    exchange: str = ""
    timestamp: Optional[datetime] = None
    is_stale: bool = False


class CurrencyRateResponse(BaseModel):
    """Response schema for an exchange rate lookup."""

    from_currency: str
    to_currency: str
    rate: Decimal
    amount: Optional[Decimal] = None
    converted_amount: Optional[Decimal] = None


class CacheStatsResponse(BaseModel):
    """Response schema for result cache statistics."""

    model_config = {"from_attributes": True}

    entries: int
    valid_entries: int
    expired_entries: int
    hits: int
    misses: int
    force_refresh_count: int
    last_refresh: Optional[float] = None


class CacheActionResponse(BaseModel):
    """Response schema for cache maintenance actions."""

    action: str
    removed: int = 0
