"""Currency conversion with live rates, caching and a static fallback table."""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from portfolio_tracker.core.currencies import (
    FALLBACK_RATES,
    get_country_currency,
)
from portfolio_tracker.providers.market_data_provider import FxRateSource
from portfolio_tracker.services.result_cache import ResultCache

logger = logging.getLogger(__name__)

FX_CACHE_TTL_SECONDS = 30 * 60
FX_FAILURE_TTL_SECONDS = 60
CENT = Decimal("0.01")
ONE = Decimal("1")


class CurrencyService:
    """
    Converts amounts between currencies.

    Lookup order for a rate table: result cache (30 min TTL), live source,
    last table fetched successfully, bundled fallback table. A degraded table
    is cached for a short failure TTL so an outage is not retried on every
    conversion. A pair missing from all of them converts at 1, with a
    warning. Conversions never raise.
    """

    def __init__(
        self,
        rate_source: FxRateSource,
        cache: ResultCache,
        ttl_seconds: float = FX_CACHE_TTL_SECONDS,
        failure_ttl_seconds: float = FX_FAILURE_TTL_SECONDS,
    ):
        self._rate_source = rate_source
        self._cache = cache
        self._ttl = ttl_seconds
        self._failure_ttl = failure_ttl_seconds
        self._last_good: dict[str, dict[str, Decimal]] = {}

    def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal:
        """Units of `to_currency` per 1 unit of `from_currency`."""
        source = (from_currency or "").upper()
        target = (to_currency or "").upper()
        if source == target:
            return ONE

        rate = self.get_rate_table(source).get(target)
        if rate is not None:
            return rate

        fallback = FALLBACK_RATES.get(source, {}).get(target)
        if fallback is not None:
            return fallback

        logger.warning(
            "No FX rate for %s->%s; converting at identity rate 1", source, target
        )
        return ONE

    def convert_currency(
        self,
        amount: Decimal,
        from_currency: str,
        to_currency: str,
    ) -> Decimal:
        """
        Convert `amount`, rounded to 2 decimals.

        Same-currency conversion returns `amount` unchanged.
        """
        if (from_currency or "").upper() == (to_currency or "").upper():
            return amount
        rate = self.get_exchange_rate(from_currency, to_currency)
        return (amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)

    def get_rate_table(self, base_currency: str) -> dict[str, Decimal]:
        base = base_currency.upper()
        key = ResultCache.generate_key("fx", base)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        table = self._fetch(base)
        if table is not None:
            self._cache.set(key, table, ttl_seconds=self._ttl)
            self._last_good[base] = table
            return table

        table = self._degraded_table(base)
        self._cache.set(key, table, ttl_seconds=self._failure_ttl)
        return table

    def refresh_rates(self, base_currency: Optional[str] = None) -> None:
        """Drop cached rate tables so the next lookup hits the live source."""
        if base_currency:
            self._cache.clear(ResultCache.generate_key("fx", base_currency.upper()))
        else:
            self._cache.clear_prefix("fx")

    @staticmethod
    def get_country_currency(country: Optional[str]) -> str:
        return get_country_currency(country)

    def _degraded_table(self, base: str) -> dict[str, Decimal]:
        stale = self._last_good.get(base)
        if stale is not None:
            logger.info("Using expired FX table for %s", base)
            return stale

        fallback = FALLBACK_RATES.get(base)
        if fallback is not None:
            logger.warning("Using bundled fallback FX table for %s", base)
            return dict(fallback)
        return {base: ONE}

    def _fetch(self, base: str) -> Optional[dict[str, Decimal]]:
        try:
            raw = self._rate_source.get_rate_table(base)
        except Exception as exc:
            logger.warning("Live FX lookup for %s failed: %s", base, exc)
            return None

        table: dict[str, Decimal] = {}
        for code, value in (raw or {}).items():
            try:
                rate = Decimal(str(value))
            except ArithmeticError:
                continue
            if rate.is_finite() and rate > 0:
                table[str(code).upper()] = rate
        if not table:
            logger.warning("Live FX source returned no usable rates for %s", base)
            return None
        table[base] = ONE
        return table
