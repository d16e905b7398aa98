"""Conversion of cadence-tagged amounts to and from annual figures.

Annual figures are the common currency of the engine: every income and
expense amount is normalized to a yearly value before anything is added
up, and only restated to a shorter cadence for display. Multipliers are
exact and nothing is rounded here.
"""

from decimal import Decimal
from typing import Any, Optional, Union

from .models import (
    DEFAULT_DAYS_PER_WEEK,
    DEFAULT_HOURS_PER_DAY,
    Cadence,
    to_decimal,
)

WEEKS_PER_YEAR = Decimal("52")
BIWEEKLY_PERIODS_PER_YEAR = Decimal("26")
MONTHS_PER_YEAR = Decimal("12")
DAYS_PER_YEAR = Decimal("365")

ZERO = Decimal("0")

# Divisors used to restate an annual total at a row's own cadence. Daily
# uses calendar days and hourly a fixed 8h x 5d week, independent of the
# income schedule.
DISPLAY_DIVISORS = {
    Cadence.YEARLY: Decimal("1"),
    Cadence.MONTHLY: MONTHS_PER_YEAR,
    Cadence.BI_WEEKLY: BIWEEKLY_PERIODS_PER_YEAR,
    Cadence.WEEKLY: WEEKS_PER_YEAR,
    Cadence.DAILY: DAYS_PER_YEAR,
    Cadence.HOURLY: DEFAULT_HOURS_PER_DAY * DEFAULT_DAYS_PER_WEEK * WEEKS_PER_YEAR,
}


def parse_cadence(cadence: Union[Cadence, str, None]) -> Optional[Cadence]:
    """Return the Cadence for a value, or None if it names no known cadence."""
    if isinstance(cadence, Cadence):
        return cadence
    try:
        return Cadence(cadence)
    except ValueError:
        return None


def periods_per_year(
    cadence: Union[Cadence, str],
    hours_per_day: Any = DEFAULT_HOURS_PER_DAY,
    days_per_week: Any = DEFAULT_DAYS_PER_WEEK,
) -> Decimal:
    """Number of `cadence` periods in a year for the given work schedule.

    Unknown cadences have zero periods.
    """
    hours = to_decimal(hours_per_day)
    days = to_decimal(days_per_week)
    hours = ZERO if hours is None else hours
    days = ZERO if days is None else days

    parsed = parse_cadence(cadence)
    if parsed is Cadence.HOURLY:
        return hours * days * WEEKS_PER_YEAR
    if parsed is Cadence.DAILY:
        return days * WEEKS_PER_YEAR
    if parsed is Cadence.WEEKLY:
        return WEEKS_PER_YEAR
    if parsed is Cadence.BI_WEEKLY:
        return BIWEEKLY_PERIODS_PER_YEAR
    if parsed is Cadence.MONTHLY:
        return MONTHS_PER_YEAR
    if parsed is Cadence.YEARLY:
        return Decimal("1")
    return ZERO


def to_annual(
    amount: Any,
    cadence: Union[Cadence, str],
    hours_per_day: Any = DEFAULT_HOURS_PER_DAY,
    days_per_week: Any = DEFAULT_DAYS_PER_WEEK,
) -> Decimal:
    """Convert an amount at `cadence` to its annual equivalent.

    Args:
        amount: The amount as entered. Zero, None, NaN and non-numeric
            values yield 0.
        cadence: How often the amount recurs. Unknown cadences yield 0.
        hours_per_day: Used only for hourly amounts.
        days_per_week: Used for hourly and daily amounts.

    Returns:
        The annual amount.
    """
    value = to_decimal(amount)
    if not value:
        return ZERO
    return value * periods_per_year(cadence, hours_per_day, days_per_week)


def from_annual(
    annual: Any,
    cadence: Union[Cadence, str],
    hours_per_day: Any = DEFAULT_HOURS_PER_DAY,
    days_per_week: Any = DEFAULT_DAYS_PER_WEEK,
) -> Decimal:
    """Restate an annual amount per `cadence` period.

    Returns 0 instead of dividing by zero when the schedule leaves no
    periods in the year.
    """
    value = to_decimal(annual)
    periods = periods_per_year(cadence, hours_per_day, days_per_week)
    if not value or periods <= 0:
        return ZERO
    return value / periods


def restate(annual: Decimal, cadence: Union[Cadence, str]) -> Decimal:
    """Rescale an annual total to a display cadence.

    This is presentation only: daily uses 365 days and hourly a standard
    2080-hour year. Yearly and unknown cadences are returned unchanged.
    """
    parsed = parse_cadence(cadence)
    if parsed is None:
        return annual
    return annual / DISPLAY_DIVISORS[parsed]
