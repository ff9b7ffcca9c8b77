"""Last-known market information per security."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class StockInfo:
    """
    Most recent successful quote for a ticker.

    Used as the fallback price source when the live provider fails.
    """

    symbol: str
    name: str = ""
    sector: Optional[str] = None
    exchange: str = ""
    currency: Optional[str] = None
    last_price: Optional[Decimal] = None
    previous_close: Optional[Decimal] = None
    last_updated: Optional[datetime] = field(default=None)
