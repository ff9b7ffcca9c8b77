"""Pydantic schemas for transaction endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from portfolio_tracker.domain.models.enums import TransactionAction


class TransactionCreateRequest(BaseModel):
    """Request schema for recording a trade."""

    portfolio_id: str = Field(..., description="Portfolio ID")
    action: TransactionAction = Field(..., description="BUY or SELL")
    ticker: str = Field(..., min_length=1, max_length=20, description="Security symbol")
    quantity: Decimal = Field(..., gt=0, description="Number of shares")
    trade_price: Decimal = Field(..., gt=0, description="Price per share in transaction currency")
    date: Optional[datetime] = Field(
        default=None,
        description="Trade time; naive values are US/Eastern; defaults to now",
    )
    currency: Optional[str] = Field(default=None, description="Defaults to the portfolio currency")
    exchange: Optional[str] = Field(default=None, max_length=20)
    country: Optional[str] = Field(default=None, max_length=50)
    fees: Decimal = Field(default=Decimal("0"), ge=0, description="Transaction fees")
    notes: Optional[str] = Field(default=None, max_length=500)
    tag: Optional[str] = Field(default=None, max_length=50)

    @field_validator("ticker")
    @classmethod
    def uppercase_ticker(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("currency")
    @classmethod
    def uppercase_currency(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else None


class TransactionResponse(BaseModel):
    """Response schema for a single transaction."""

    model_config = {"from_attributes": True}

    id: str
    portfolio_id: str
    date: datetime
    action: TransactionAction
    ticker: str
    exchange: str
    country: str
    quantity: Decimal
    trade_price: Decimal
    currency: str
    fees: Decimal
    notes: Optional[str] = None
    tag: Optional[str] = None
    deleted: bool
    created_at: Optional[datetime] = None


class TransactionListResponse(BaseModel):
    """Response schema for transaction listing."""

    items: list[TransactionResponse]
    total: int
