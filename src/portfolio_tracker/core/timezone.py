"""Timezone helpers for trade timestamps and market-local clocks."""

from datetime import date, datetime, time
from typing import Union

import pytz
from dateutil import parser as date_parser

EASTERN_TZ = pytz.timezone("US/Eastern")


def now_eastern() -> datetime:
    """Return current time in US/Eastern timezone."""
    return datetime.now(EASTERN_TZ)


def to_eastern(dt: datetime) -> datetime:
    """Convert a datetime to US/Eastern; naive values are taken as Eastern."""
    if dt.tzinfo is None:
        return EASTERN_TZ.localize(dt)
    return dt.astimezone(EASTERN_TZ)


def in_zone(dt: datetime, zone_name: str) -> datetime:
    """Express an aware datetime in the named market timezone."""
    return to_eastern(dt).astimezone(pytz.timezone(zone_name))


def parse_trade_date(value: Union[str, date, datetime]) -> datetime:
    """
    Parse a trade date into an aware US/Eastern datetime.

    Accepts ISO strings with or without offset, bare YYYY-MM-DD dates
    (taken as midnight Eastern), and date/datetime objects.
    """
    if isinstance(value, datetime):
        return to_eastern(value)
    if isinstance(value, date):
        return EASTERN_TZ.localize(datetime.combine(value, time.min))
    return to_eastern(date_parser.parse(value))


def month_key(dt: datetime) -> str:
    """Return the YYYY-MM calendar month of a timestamp."""
    return dt.strftime("%Y-%m")
