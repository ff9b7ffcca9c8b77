"""Exchange trading sessions and market-aware cache lifetimes."""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from portfolio_tracker.core.timezone import in_zone, now_eastern


@dataclass(frozen=True)
class MarketSession:
    """Regular weekday trading session of one exchange."""

    exchange: str
    timezone: str
    open_time: time
    close_time: time

    def is_open(self, at: datetime) -> bool:
        local = in_zone(at, self.timezone)
        if local.weekday() >= 5:
            return False
        return self.open_time <= local.time() < self.close_time


MARKET_SESSIONS: dict[str, MarketSession] = {
    "NYSE": MarketSession("NYSE", "America/New_York", time(9, 30), time(16, 0)),
    "NASDAQ": MarketSession("NASDAQ", "America/New_York", time(9, 30), time(16, 0)),
    "NSE": MarketSession("NSE", "Asia/Kolkata", time(9, 15), time(15, 30)),
    "BSE": MarketSession("BSE", "Asia/Kolkata", time(9, 15), time(15, 30)),
}

# (ttl while any market is open, ttl while all are closed), seconds
CACHE_TTLS: dict[str, tuple[int, int]] = {
    "dashboard": (5 * 60, 30 * 60),
    "portfolios": (10 * 60, 60 * 60),
    "holdings": (30 * 60, 30 * 60),
    "transactions": (10 * 60, 10 * 60),
    "settings": (60 * 60, 60 * 60),
}

DEFAULT_CACHE_TTL_SECONDS = 30 * 60


def is_market_open(exchange: str, at: Optional[datetime] = None) -> bool:
    """Return True if the exchange's regular session is open at `at` (default now)."""
    session = MARKET_SESSIONS.get(exchange.upper())
    if session is None:
        return False
    return session.is_open(at or now_eastern())


def any_market_open(at: Optional[datetime] = None) -> bool:
    at = at or now_eastern()
    return any(session.is_open(at) for session in MARKET_SESSIONS.values())


def market_aware_ttl(data_type: str, at: Optional[datetime] = None) -> int:
    """
    Cache lifetime for a data type, shorter while markets are trading.

    Unknown data types get the 30 minute default.
    """
    ttls = CACHE_TTLS.get(data_type)
    if ttls is None:
        return DEFAULT_CACHE_TTL_SECONDS
    open_ttl, closed_ttl = ttls
    return open_ttl if any_market_open(at) else closed_ttl
