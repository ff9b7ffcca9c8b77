"""Pydantic schemas for the performance endpoint."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ValuePointResponse(BaseModel):
    model_config = {"from_attributes": True}

    date: datetime
    value: float


class PeriodReturnResponse(BaseModel):
    model_config = {"from_attributes": True}

    label: str
    return_percent: float


class PerformanceResponse(BaseModel):
    """Response schema for performance analytics (percent fields in %)."""

    model_config = {"from_attributes": True}

    portfolio_id: Optional[str] = None
    timeframe: str
    currency: str
    start_value: float
    end_value: float
    total_return: float
    total_return_percent: float
    annualized_return: float
    volatility: float
    sharpe_ratio: float
    max_drawdown: float
    best_period: Optional[PeriodReturnResponse] = None
    worst_period: Optional[PeriodReturnResponse] = None
    best_month: Optional[PeriodReturnResponse] = None
    worst_month: Optional[PeriodReturnResponse] = None
    current_streak: int
    streak_type: str
    period_returns: dict[str, float]
    monthly_returns: list[PeriodReturnResponse]
    value_history: list[ValuePointResponse]
    calculated_at: Optional[datetime] = None
