"""Conversions between domain dataclasses and JSON-safe records."""

from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from portfolio_tracker.core.timezone import parse_trade_date


def encode_value(value: Any) -> Any:
    """Recursively convert Decimal/datetime/Enum values for json.dump."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: encode_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    return value


def to_record(obj: Any) -> dict[str, Any]:
    """Serialize a dataclass instance to a JSON-safe dict."""
    return encode_value(asdict(obj))


def to_decimal(value: Any, default: str = "0") -> Decimal:
    if value is None or value == "":
        return Decimal(default)
    return Decimal(str(value))


def to_optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return Decimal(str(value))


def to_optional_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    return parse_trade_date(value)
