"""Quote and FX source protocols."""

from decimal import Decimal
from typing import Protocol

from portfolio_tracker.domain.views import Quote


class QuoteProvider(Protocol):
    """
    Protocol for market quote providers.

    Implementations must not raise for unknown symbols or upstream
    failures; they return a Quote with success=False instead.
    """

    def get_quote(self, symbol: str) -> Quote:
        """Fetch price, previous close, company name and sector for one symbol."""
        ...


class FxRateSource(Protocol):
    """
    Protocol for exchange rate sources.

    Returns the full rate table for a base currency in one call; the table
    maps currency code -> units of that currency per 1 unit of base.
    Raises UpstreamDataError (or any exception) on failure.
    """

    def get_rate_table(self, base_currency: str) -> dict[str, Decimal]:
        ...
