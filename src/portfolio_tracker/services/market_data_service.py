"""Market data service for quotes with last-known fallback."""

import logging
import time
from typing import Callable, Optional

from portfolio_tracker.core.timezone import now_eastern
from portfolio_tracker.domain.models import StockInfo
from portfolio_tracker.domain.views import Quote
from portfolio_tracker.providers.market_data_provider import QuoteProvider
from portfolio_tracker.repositories.protocols import StockInfoRepository

logger = logging.getLogger(__name__)

EXCHANGE_SUFFIXES = {"NSE": ".NS", "BSE": ".BO"}
QUOTE_FAILURE_TTL_SECONDS = 60


def provider_symbol(ticker: str, exchange: Optional[str] = None) -> str:
    """Symbol as the upstream provider expects it (Indian listings carry a suffix)."""
    ticker = ticker.strip().upper()
    suffix = EXCHANGE_SUFFIXES.get((exchange or "").upper())
    if suffix and "." not in ticker:
        return f"{ticker}{suffix}"
    return ticker


class MarketDataService:
    """
    Service for fetching quotes.

    Wraps the provider with a per-symbol TTL memo, records every good quote
    as the symbol's last-known info, and degrades to that info (flagged
    stale) when the provider fails. Failed lookups are memoized for a
    shorter TTL so a dead upstream is not hit once per holding.
    """

    def __init__(
        self,
        provider: QuoteProvider,
        stock_repo: StockInfoRepository,
        cache_ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
        failure_ttl_seconds: float = QUOTE_FAILURE_TTL_SECONDS,
    ):
        self._provider = provider
        self._stock_repo = stock_repo
        self._cache_ttl = cache_ttl_seconds
        self._failure_ttl = failure_ttl_seconds
        self._clock = clock
        # ticker -> (quote, expires_at)
        self._quote_cache: dict[str, tuple[Quote, float]] = {}

    def get_quote(self, ticker: str, exchange: Optional[str] = None) -> Quote:
        """
        Return a quote for `ticker`.

        Never raises: on provider failure returns the last known price
        with is_stale=True, or a Quote with success=False if none exists.
        """
        ticker = ticker.strip().upper()
        cached = self._quote_cache.get(ticker)
        if cached and self._clock() < cached[1]:
            return cached[0]

        symbol = provider_symbol(ticker, exchange)
        try:
            quote = self._provider.get_quote(symbol)
        except Exception as exc:
            logger.warning("Quote provider raised for %s: %s", symbol, exc)
            quote = Quote.failure(symbol, str(exc))

        if quote.success and quote.price is not None:
            quote.symbol = ticker
            self._quote_cache[ticker] = (quote, self._clock() + self._cache_ttl)
            self._remember(ticker, exchange, quote)
            return quote

        fallback = self._last_known_quote(ticker, quote.error)
        self._quote_cache[ticker] = (fallback, self._clock() + self._failure_ttl)
        return fallback

    def get_quotes(self, tickers: list[str]) -> dict[str, Quote]:
        """Quotes for several tickers, keyed by uppercase ticker."""
        return {t.upper(): self.get_quote(t) for t in tickers if t and t.strip()}

    def get_stock_info(self, ticker: str) -> Optional[StockInfo]:
        return self._stock_repo.get(ticker)

    def clear_cache(self) -> None:
        self._quote_cache.clear()

    def _remember(self, ticker: str, exchange: Optional[str], quote: Quote) -> None:
        existing = self._stock_repo.get(ticker)
        self._stock_repo.upsert(
            StockInfo(
                symbol=ticker,
                name=quote.company_name or (existing.name if existing else ticker),
                sector=quote.sector or (existing.sector if existing else None),
                exchange=exchange or quote.exchange or (existing.exchange if existing else ""),
                currency=quote.currency or (existing.currency if existing else None),
                last_price=quote.price,
                previous_close=quote.previous_close,
                last_updated=now_eastern(),
            )
        )

    def _last_known_quote(self, ticker: str, error: Optional[str]) -> Quote:
        info = self._stock_repo.get(ticker)
        if info is None or info.last_price is None:
            logger.info("No quote available for %s (%s)", ticker, error)
            return Quote.failure(ticker, error or "Quote unavailable")
        logger.info("Serving last known price for %s from %s", ticker, info.last_updated)
        return Quote(
            symbol=ticker,
            success=True,
            price=info.last_price,
            previous_close=info.previous_close,
            company_name=info.name or ticker,
            sector=info.sector,
            currency=info.currency,
            exchange=info.exchange,
            timestamp=info.last_updated,
            is_stale=True,
            error=error,
        )
