"""Unit tests for exchange sessions and market-aware cache TTLs."""

from datetime import datetime

import pytz

from portfolio_tracker.core.market_hours import (
    DEFAULT_CACHE_TTL_SECONDS,
    any_market_open,
    is_market_open,
    market_aware_ttl,
)

from tests.conftest import eastern_datetime

KOLKATA = pytz.timezone("Asia/Kolkata")


class TestMarketSessions:
    """Tests for is_market_open / any_market_open."""

    def test_nyse_open_mid_session(self):
        # Wednesday 2024-06-12
        assert is_market_open("NYSE", eastern_datetime(2024, 6, 12, 11, 0)) is True

    def test_nyse_closed_at_close_time(self):
        assert is_market_open("nyse", eastern_datetime(2024, 6, 12, 16, 0)) is False

    def test_nyse_closed_on_weekend(self):
        assert is_market_open("NASDAQ", eastern_datetime(2024, 6, 15, 11, 0)) is False

    def test_nse_uses_india_time(self):
        """
        GIVEN 10:00 in Kolkata on a weekday (00:30 in New York)
        WHEN I check NSE and NYSE
        THEN only NSE is open
        """
        at = KOLKATA.localize(datetime(2024, 6, 12, 10, 0))

        assert is_market_open("NSE", at) is True
        assert is_market_open("NYSE", at) is False
        assert any_market_open(at) is True

    def test_unknown_exchange_is_closed(self):
        assert is_market_open("LSE", eastern_datetime(2024, 6, 12, 11, 0)) is False


class TestMarketAwareTtl:
    """Tests for TTL selection by data type."""

    def test_dashboard_ttl_shorter_while_open(self):
        assert market_aware_ttl("dashboard", eastern_datetime(2024, 6, 12, 11, 0)) == 300
        assert market_aware_ttl("dashboard", eastern_datetime(2024, 6, 15, 11, 0)) == 1800

    def test_holdings_ttl_is_constant(self):
        assert market_aware_ttl("holdings", eastern_datetime(2024, 6, 12, 11, 0)) == 1800
        assert market_aware_ttl("holdings", eastern_datetime(2024, 6, 15, 11, 0)) == 1800

    def test_unknown_type_gets_default(self):
        assert market_aware_ttl("whatever", eastern_datetime(2024, 6, 12, 11, 0)) == DEFAULT_CACHE_TTL_SECONDS
