"""
Pricing calculations for charging sessions.

Derives the unit price stored with each record and backs the quick
cost calculator.
"""

from decimal import Decimal, ROUND_HALF_UP


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 instead of NaN or infinity for a zero denominator."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def derive_cost_per_kwh(kwh: float, total_amount: float) -> float:
    """Derive the price paid per kWh at write time.

    Args:
        kwh: Energy delivered
        total_amount: Money paid for the session

    Returns:
        total_amount / kwh rounded to 4 decimal places, or 0.0 when
        either value is not positive
    """
    if kwh <= 0 or total_amount <= 0:
        return 0.0

    unit_price = Decimal(str(total_amount)) / Decimal(str(kwh))
    return float(unit_price.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP))


def estimate_charge_cost(kwh: float, rate: float) -> float:
    """Estimate what a session will cost at a given tariff.

    Args:
        kwh: Energy to be delivered
        rate: Price per kWh

    Returns:
        kwh * rate rounded half-up to 2 decimal places
    """
    cost = Decimal(str(kwh)) * Decimal(str(rate))
    return float(cost.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
