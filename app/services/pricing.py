"""
Quote pricing. All money is integer cents.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

_MINUTES_PER_HOUR = Decimal(60)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def calculate_cost_in_cents(hourly_rate_in_cents, duration_minutes) -> Optional[int]:
    """
    Cost of a lesson: hourly rate prorated by duration, rounded half up to the cent.

    Returns None for invalid input (non-integers, negative rate, non-positive
    duration) instead of raising.
    """
    if not _is_int(hourly_rate_in_cents) or not _is_int(duration_minutes):
        return None
    if hourly_rate_in_cents < 0 or duration_minutes <= 0:
        return None

    exact = Decimal(hourly_rate_in_cents) * Decimal(duration_minutes) / _MINUTES_PER_HOUR
    return int(exact.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_cents(cents: Optional[int]) -> str:
    """4500 -> '45.00'"""
    if cents is None:
        return ""
    sign = "-" if cents < 0 else ""
    whole, remainder = divmod(abs(cents), 100)
    return f"{sign}{whole}.{remainder:02d}"
