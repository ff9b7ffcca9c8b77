"""Supported currencies, country mapping and the bundled fallback FX table."""

from decimal import Decimal
from typing import Optional

DEFAULT_CURRENCY = "USD"

SUPPORTED_CURRENCIES: tuple[str, ...] = ("USD", "INR", "EUR", "GBP")

# Approximate rates used when the live FX source is unavailable.
# Rows are the base currency; A->B and B->A are independent quotes.
FALLBACK_RATES: dict[str, dict[str, Decimal]] = {
    "USD": {"USD": Decimal("1"), "INR": Decimal("88.23"), "EUR": Decimal("0.90"), "GBP": Decimal("0.76")},
    "INR": {"USD": Decimal("0.012"), "INR": Decimal("1"), "EUR": Decimal("0.0102"), "GBP": Decimal("0.0088")},
    "EUR": {"USD": Decimal("1.18"), "INR": Decimal("98.35"), "EUR": Decimal("1"), "GBP": Decimal("0.86")},
    "GBP": {"USD": Decimal("1.37"), "INR": Decimal("113.89"), "EUR": Decimal("1.16"), "GBP": Decimal("1")},
}

COUNTRY_CURRENCY_MAP: dict[str, str] = {
    "USA": "USD",
    "UNITED STATES": "USD",
    "US": "USD",
    "INDIA": "INR",
    "IN": "INR",
    "UNITED KINGDOM": "GBP",
    "UK": "GBP",
    "GB": "GBP",
    "GERMANY": "EUR",
    "FRANCE": "EUR",
    "SPAIN": "EUR",
    "ITALY": "EUR",
    "NETHERLANDS": "EUR",
    "EUROPE": "EUR",
    "EU": "EUR",
}


def get_country_currency(country: Optional[str]) -> str:
    """Return the native currency for a country name or code (USD if unknown)."""
    if not country:
        return DEFAULT_CURRENCY
    return COUNTRY_CURRENCY_MAP.get(country.strip().upper(), DEFAULT_CURRENCY)


def normalize_currency(code: Optional[str]) -> str:
    """Uppercase and validate an ISO code against the supported set.

    Raises:
        ValueError: if the code is not one of SUPPORTED_CURRENCIES
    """
    normalized = (code or "").strip().upper()
    if normalized not in SUPPORTED_CURRENCIES:
        raise ValueError(
            f"Unsupported currency '{code}'. Expected one of: {', '.join(SUPPORTED_CURRENCIES)}"
        )
    return normalized
