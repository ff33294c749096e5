"""
Compensation arithmetic.
All money is Decimal, rounded half-up to two places.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict

from .utils import to_decimal

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')


def round2(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_earnings(hourly_rate: Any, actual_hours: Any) -> Decimal:
    """
    Amount owed for approved work.

    Quality-control tasks are computed the same way; excluding them from
    payable totals is up to the caller (see is_payable).

    Raises:
        ValueError: rate or hours is missing, non-numeric or negative
    """
    rate = to_decimal(hourly_rate)
    hours = to_decimal(actual_hours)
    if rate is None or hours is None:
        raise ValueError(f"Cannot compute earnings from rate={hourly_rate!r} hours={actual_hours!r}")
    if rate < 0 or hours < 0:
        raise ValueError('Rate and hours must not be negative')
    return round2(rate * hours)


def estimated_value(task: Dict[str, Any]) -> Decimal:
    """Planned value of a task: hourlyRate x estimatedHours."""
    rate = to_decimal(task.get('hourlyRate')) or ZERO
    hours = to_decimal(task.get('estimatedHours')) or ZERO
    return round2(rate * hours)


def is_payable(task: Dict[str, Any]) -> bool:
    """Quality-control tasks calibrate workers and are never paid out."""
    return not task.get('isQualityControl', False)
