"""Offline quote and FX sources with deterministic data."""

from decimal import Decimal
from typing import Optional

from portfolio_tracker.core.currencies import FALLBACK_RATES
from portfolio_tracker.core.exceptions import UpstreamDataError
from portfolio_tracker.core.timezone import now_eastern
from portfolio_tracker.domain.views import Quote


# symbol -> (price, previous close, name, sector, currency)
_STUB_QUOTES: dict[str, tuple[Decimal, Decimal, str, str, str]] = {
    "AAPL": (Decimal("185.50"), Decimal("184.25"), "Apple Inc.", "Technology", "USD"),
    "GOOGL": (Decimal("142.75"), Decimal("141.50"), "Alphabet Inc.", "Communication Services", "USD"),
    "MSFT": (Decimal("378.25"), Decimal("376.80"), "Microsoft Corporation", "Technology", "USD"),
    "AMZN": (Decimal("178.50"), Decimal("177.25"), "Amazon.com, Inc.", "Consumer Cyclical", "USD"),
    "TSLA": (Decimal("248.75"), Decimal("250.10"), "Tesla, Inc.", "Consumer Cyclical", "USD"),
    "NVDA": (Decimal("485.25"), Decimal("482.50"), "NVIDIA Corporation", "Technology", "USD"),
    "JPM": (Decimal("198.40"), Decimal("197.10"), "JPMorgan Chase & Co.", "Financial Services", "USD"),
    "RELIANCE.NS": (Decimal("2950.00"), Decimal("2932.50"), "Reliance Industries Limited", "Energy", "INR"),
    "TCS.NS": (Decimal("3890.00"), Decimal("3902.15"), "Tata Consultancy Services Limited", "Technology", "INR"),
    "INFY.NS": (Decimal("1525.00"), Decimal("1518.40"), "Infosys Limited", "Technology", "INR"),
    "HDFCBANK.NS": (Decimal("1620.00"), Decimal("1611.75"), "HDFC Bank Limited", "Financial Services", "INR"),
}


class StubQuoteProvider:
    """
    Quote provider with fixed prices for a small set of symbols.

    Unknown symbols return a failure Quote, like an upstream miss.
    """

    def __init__(self, quotes: Optional[dict[str, tuple[Decimal, Decimal, str, str, str]]] = None):
        self._quotes = quotes if quotes is not None else _STUB_QUOTES

    def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        data = self._quotes.get(symbol)
        if data is None:
            return Quote.failure(symbol, "Unknown symbol")
        price, previous_close, name, sector, currency = data
        return Quote(
            symbol=symbol,
            success=True,
            price=price,
            previous_close=previous_close,
            company_name=name,
            sector=sector,
            currency=currency,
            timestamp=now_eastern(),
        )


class StaticFxRateSource:
    """FX source serving a fixed rate matrix (defaults to the bundled fallback table)."""

    def __init__(self, rates: Optional[dict[str, dict[str, Decimal]]] = None):
        self._rates = rates if rates is not None else FALLBACK_RATES

    def get_rate_table(self, base_currency: str) -> dict[str, Decimal]:
        table = self._rates.get(base_currency.upper())
        if table is None:
            raise UpstreamDataError(f"No rates for {base_currency}")
        return dict(table)
