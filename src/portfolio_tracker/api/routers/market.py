"""Market data, currency and cache maintenance endpoints."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query

from portfolio_tracker.api.deps import (
    get_context,
    get_currency_service,
    get_market_data_service,
    get_result_cache,
)
from portfolio_tracker.api.schemas import (
    CacheActionResponse,
    CacheStatsResponse,
    CurrencyRateResponse,
    QuoteResponse,
)
from portfolio_tracker.app_context import AppContext
from portfolio_tracker.core.currencies import normalize_currency
from portfolio_tracker.core.exceptions import NotFoundError, ValidationError
from portfolio_tracker.services import CurrencyService, MarketDataService, ResultCache

router = APIRouter(tags=["market"])


@router.get("/market-data/{symbol}", response_model=QuoteResponse)
def get_market_data(
    symbol: str,
    exchange: Optional[str] = Query(None, description="Exchange, e.g. NSE for Indian listings"),
    market: MarketDataService = Depends(get_market_data_service),
) -> QuoteResponse:
    """Quote for one symbol (404 when no price is available)."""
    quote = market.get_quote(symbol, exchange)
    if not quote.success:
        raise NotFoundError("Quote", symbol.upper())
    return QuoteResponse.model_validate(quote)


@router.get("/currency-rate", response_model=CurrencyRateResponse)
def get_currency_rate(
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    amount: Optional[Decimal] = Query(None),
    currency: CurrencyService = Depends(get_currency_service),
) -> CurrencyRateResponse:
    try:
        source = normalize_currency(from_currency)
        target = normalize_currency(to_currency)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    converted = None
    if amount is not None:
        converted = currency.convert_currency(amount, source, target)
    return CurrencyRateResponse(
        from_currency=source,
        to_currency=target,
        rate=currency.get_exchange_rate(source, target),
        amount=amount,
        converted_amount=converted,
    )


@router.get("/cache/stats", response_model=CacheStatsResponse)
def get_cache_stats(cache: ResultCache = Depends(get_result_cache)) -> CacheStatsResponse:
    return CacheStatsResponse.model_validate(cache.get_stats())


@router.post("/cache/refresh", response_model=CacheActionResponse)
def refresh_cache(context: AppContext = Depends(get_context)) -> CacheActionResponse:
    """Drop all cached aggregates, quotes and FX tables."""
    context.force_refresh()
    return CacheActionResponse(action="refresh")


@router.post("/cache/cleanup", response_model=CacheActionResponse)
def cleanup_cache(cache: ResultCache = Depends(get_result_cache)) -> CacheActionResponse:
    return CacheActionResponse(action="cleanup", removed=cache.cleanup())
