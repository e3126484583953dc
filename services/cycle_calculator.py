"""Next-occurrence arithmetic for recurring expense schedules.

Every function here is pure: the only link to the clock is today() as the
default reference date.
"""
from datetime import date, datetime, timedelta
from models.recurring_expense import CycleDetails
from services.errors import ValidationError
from utils.constants import (
    DEFAULT_DAY_OF_MONTH,
    DEFAULT_DAY_OF_WEEK,
    DEFAULT_MONTH_OF_YEAR,
)
from utils.date_helpers import as_date, clamp_day_to_month, today


def _sunday_based_weekday(d: date) -> int:
    """0 = Sunday .. 6 = Saturday, the numbering cycle_details uses."""
    return (d.weekday() + 1) % 7


def _next_daily(from_date: date, cycle: CycleDetails) -> date:
    return from_date + timedelta(days=1)


def _next_weekly(from_date: date, cycle: CycleDetails) -> date:
    target = cycle.day_of_week if cycle.day_of_week is not None else DEFAULT_DAY_OF_WEEK
    days_ahead = (target - _sunday_based_weekday(from_date)) % 7
    return from_date + timedelta(days=days_ahead or 7)


def _next_monthly(from_date: date, cycle: CycleDetails) -> date:
    target_day = cycle.day_of_month or DEFAULT_DAY_OF_MONTH
    y, m = from_date.year, from_date.month + 1
    if m > 12:
        y, m = y + 1, 1
    return date(y, m, clamp_day_to_month(y, m, target_day))


def _next_yearly(from_date: date, cycle: CycleDetails) -> date:
    target_month = cycle.month_of_year or DEFAULT_MONTH_OF_YEAR
    target_day = cycle.day_of_month or DEFAULT_DAY_OF_MONTH
    y = from_date.year + 1
    return date(y, target_month, clamp_day_to_month(y, target_month, target_day))


_ADVANCERS = {
    "daily": _next_daily,
    "weekly": _next_weekly,
    "monthly": _next_monthly,
    "yearly": _next_yearly,
}


def compute_next(
    frequency: str,
    cycle_details: CycleDetails | None = None,
    from_date: date | datetime | None = None,
) -> date:
    """Return the first occurrence strictly after from_date (default: today).

    monthly/yearly move to the following calendar month/year and clamp the
    anchor day to that month's length (31 -> 30, Feb 29 -> Feb 28).
    """
    advance = _ADVANCERS.get(frequency)
    if advance is None:
        raise ValidationError("frequency", f"Unknown frequency '{frequency}'.")
    ref = as_date(from_date) if from_date is not None else today()
    return advance(ref, cycle_details or CycleDetails())


def preview_next_due(
    frequency: str,
    cycle_details: CycleDetails | None = None,
    from_date: date | datetime | None = None,
) -> date:
    """Display-only next due date; touches no stored state."""
    return compute_next(frequency, cycle_details, from_date)


def upcoming_dates(
    frequency: str,
    cycle_details: CycleDetails | None,
    from_date: date | datetime,
    count: int,
) -> list[date]:
    """The next `count` occurrences after from_date, each chained from the last."""
    result: list[date] = []
    current = as_date(from_date)
    for _ in range(max(count, 0)):
        current = compute_next(frequency, cycle_details, current)
        result.append(current)
    return result
