"""Yahoo Finance (yfinance) quote and FX sources."""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from portfolio_tracker.core.currencies import SUPPORTED_CURRENCIES
from portfolio_tracker.core.exceptions import UpstreamDataError
from portfolio_tracker.core.timezone import now_eastern
from portfolio_tracker.domain.views import Quote

logger = logging.getLogger(__name__)

DEFAULT_QUOTE_TIMEOUT_SECONDS = 10
DEFAULT_FX_TIMEOUT_SECONDS = 5


# Lazy import so tests can patch before import
def _get_yf():
    import yfinance as yf
    return yf


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite() or result <= 0:
        return None
    return result


def _fetch_info(symbol: str) -> dict[str, Any]:
    info = _get_yf().Ticker(symbol).info
    if not isinstance(info, dict):
        raise UpstreamDataError(f"Malformed quote payload for {symbol}")
    return info


def _quote_from_info(symbol: str, info: dict[str, Any]) -> Quote:
    # Price: currentPrice preferred, then regularMarketPrice
    price = _to_decimal(info.get("currentPrice"))
    if price is None:
        price = _to_decimal(info.get("regularMarketPrice"))
    if price is None:
        return Quote.failure(symbol, "No price in quote payload")

    previous_close = _to_decimal(
        info.get("previousClose") or info.get("regularMarketPreviousClose")
    )
    name = (info.get("longName") or info.get("shortName") or "").strip() or symbol
    currency = info.get("currency")
    return Quote(
        symbol=symbol,
        success=True,
        price=price,
        previous_close=previous_close,
        company_name=name,
        sector=info.get("sector") or None,
        currency=currency.upper() if isinstance(currency, str) else None,
        exchange=info.get("exchange") or "",
        timestamp=now_eastern(),
    )


class YahooQuoteProvider:
    """
    Fetches single-symbol quotes from Yahoo Finance.

    Each lookup runs in a worker thread bounded by `timeout_seconds`; a
    timeout, network error or empty payload yields a failure Quote.
    """

    def __init__(self, timeout_seconds: float = DEFAULT_QUOTE_TIMEOUT_SECONDS):
        self._timeout = timeout_seconds

    def get_quote(self, symbol: str) -> Quote:
        symbol = (symbol or "").strip().upper()
        if not symbol:
            return Quote.failure(symbol, "Empty symbol")
        # shutdown(wait=False): do not block on a hung worker
        ex = ThreadPoolExecutor(max_workers=1)
        try:
            info = ex.submit(_fetch_info, symbol).result(timeout=self._timeout)
        except FuturesTimeoutError:
            logger.warning("Quote lookup for %s timed out after %ss", symbol, self._timeout)
            return Quote.failure(symbol, "Timed out")
        except Exception as exc:
            logger.warning("Quote lookup for %s failed: %s", symbol, exc)
            return Quote.failure(symbol, str(exc))
        finally:
            ex.shutdown(wait=False)
        return _quote_from_info(symbol, info)


def _fetch_rate_table(base: str) -> dict[str, Decimal]:
    targets = [code for code in SUPPORTED_CURRENCIES if code != base]
    pairs = {f"{base}{target}=X": target for target in targets}
    tickers = _get_yf().Tickers(" ".join(pairs))
    table: dict[str, Decimal] = {base: Decimal("1")}
    for pair, target in pairs.items():
        ticker = tickers.tickers.get(pair)
        if ticker is None:
            continue
        info = ticker.info
        if not isinstance(info, dict):
            continue
        rate = _to_decimal(info.get("regularMarketPrice") or info.get("previousClose"))
        if rate is not None:
            table[target] = rate
    if len(table) == 1:
        raise UpstreamDataError(f"No FX rates returned for {base}")
    return table


class YahooFxRateSource:
    """Rate table for a base currency from Yahoo `{BASE}{TARGET}=X` pairs."""

    def __init__(self, timeout_seconds: float = DEFAULT_FX_TIMEOUT_SECONDS):
        self._timeout = timeout_seconds

    def get_rate_table(self, base_currency: str) -> dict[str, Decimal]:
        base = base_currency.upper()
        ex = ThreadPoolExecutor(max_workers=1)
        try:
            return ex.submit(_fetch_rate_table, base).result(timeout=self._timeout)
        except FuturesTimeoutError as exc:
            raise UpstreamDataError(f"FX lookup for {base} timed out") from exc
        finally:
            ex.shutdown(wait=False)
