"""Money-weighted return (XIRR) solver."""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

logger = logging.getLogger(__name__)

XIRR_MAX_ITERATIONS = 100
XIRR_TOLERANCE = 1e-9  # relative to the largest flow
XIRR_INITIAL_GUESS = 0.1
XIRR_MIN_RATE = -0.99
XIRR_MAX_RATE = 10.0  # 1000%


@dataclass
class CashFlow:
    """Dated cash flow from the investor's side: negative = paid in, positive = received."""

    date: datetime
    amount: Decimal


def calculate_xirr(
    cash_flows: list[CashFlow],
    max_iterations: int = XIRR_MAX_ITERATIONS,
    tolerance: float = XIRR_TOLERANCE,
) -> Optional[Decimal]:
    """
    Solve Σ CF_i / (1 + r)^((d_i - d_0) / 365) = 0 for r by Newton-Raphson.

    Returns the annual rate as a fraction (0.15 == 15%), or None when the
    flows do not change sign or the solver does not converge. The rate is
    clamped to [-0.99, 10] between iterations.
    """
    if len(cash_flows) < 2:
        return None

    ordered = sorted(cash_flows, key=lambda cf: cf.date)
    base_date = ordered[0].date
    flows = [
        ((cf.date - base_date).total_seconds() / 86400.0, float(cf.amount))
        for cf in ordered
    ]

    if not (any(a > 0 for _, a in flows) and any(a < 0 for _, a in flows)):
        return None

    scale = max(abs(a) for _, a in flows)
    rate = XIRR_INITIAL_GUESS
    for _ in range(max_iterations):
        npv = 0.0
        derivative = 0.0
        for days, amount in flows:
            years = days / 365.0
            discount = (1 + rate) ** years
            npv += amount / discount
            if years > 0:
                derivative -= years * amount / ((1 + rate) ** (years + 1))

        if abs(npv) < tolerance * scale:
            return Decimal(str(rate)).quantize(Decimal("0.00000001"), rounding=ROUND_HALF_UP)

        if derivative == 0:
            break

        rate -= npv / derivative
        rate = min(max(rate, XIRR_MIN_RATE), XIRR_MAX_RATE)

    logger.debug("XIRR did not converge for %d cash flows", len(flows))
    return None
