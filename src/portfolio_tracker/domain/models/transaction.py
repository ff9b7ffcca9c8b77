"""Transaction domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from portfolio_tracker.domain.models.enums import TransactionAction


@dataclass
class Transaction:
    """
    Append-only record of one trade (source of truth).

    - quantity and trade_price are always positive
    - trade_price and fees are in `currency`
    - never physically removed; `deleted` marks a soft delete
    """

    id: str
    portfolio_id: str
    date: datetime
    action: TransactionAction
    ticker: str
    quantity: Decimal
    trade_price: Decimal
    currency: str
    exchange: str = ""
    country: str = ""
    fees: Decimal = field(default_factory=lambda: Decimal("0"))
    notes: Optional[str] = None
    tag: Optional[str] = None
    deleted: bool = False
    created_at: Optional[datetime] = field(default=None)
    updated_at: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.action, str):
            self.action = TransactionAction(self.action)

    @property
    def gross_amount(self) -> Decimal:
        """quantity x trade_price, before fees."""
        return self.quantity * self.trade_price

    @property
    def net_cash_impact(self) -> Decimal:
        """
        Cash effect of the trade in transaction currency.

        Positive = cash received (SELL), Negative = cash paid (BUY).
        """
        if self.action == TransactionAction.BUY:
            return -(self.gross_amount + self.fees)
        return self.gross_amount - self.fees
