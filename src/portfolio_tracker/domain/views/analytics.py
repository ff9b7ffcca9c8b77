"""View models for performance analytics."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class ValuePoint:
    """Portfolio value at one checkpoint of the history."""

    date: datetime
    value: float


@dataclass
class PeriodReturn:
    """Return of one period (week) or one calendar month, in percent."""

    label: str
    return_percent: float


@dataclass
class PerformanceAnalytics:
    """Risk/return statistics derived from a value history.

    Percent fields are expressed as percentages (12.5 == 12.5%).
    """

    timeframe: str
    currency: str
    portfolio_id: Optional[str] = None
    start_value: float = 0.0
    end_value: float = 0.0
    total_return: float = 0.0
    total_return_percent: float = 0.0
    annualized_return: float = 0.0
    volatility: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    best_period: Optional[PeriodReturn] = None
    worst_period: Optional[PeriodReturn] = None
    best_month: Optional[PeriodReturn] = None
    worst_month: Optional[PeriodReturn] = None
    current_streak: int = 0
    streak_type: str = "none"
    period_returns: dict[str, float] = field(default_factory=dict)
    monthly_returns: list[PeriodReturn] = field(default_factory=list)
    value_history: list[ValuePoint] = field(default_factory=list)
    calculated_at: Optional[datetime] = None
