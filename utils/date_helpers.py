from datetime import date, datetime, time
import calendar
import math
from utils.constants import DATE_FORMAT, DATETIME_FORMAT

SECONDS_PER_DAY = 24 * 60 * 60


def today() -> date:
    return date.today()


def now() -> datetime:
    return datetime.now().replace(microsecond=0)


def as_date(value: date | datetime) -> date:
    """Reduce a datetime to its calendar date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def as_datetime(value: date | datetime) -> datetime:
    """Promote a bare date to midnight of that day."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def parse_date(date_str: str) -> date | None:
    """Parse a date string in YYYY-MM-DD format, returning None on failure."""
    if not date_str:
        return None
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    return None


def parse_datetime(value: str) -> datetime | None:
    """Parse a stored ISO timestamp. Bare dates are read as midnight."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        d = parse_date(value)
        return as_datetime(d) if d else None


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def format_datetime(dt: datetime) -> str:
    return dt.strftime(DATETIME_FORMAT)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    return min(day, days_in_month(year, month))


def days_between(due: date | datetime, reference: date | datetime) -> int:
    """Whole days from reference until due, partial days rounded up.

    A due date later today (or at midnight today) reports 0, never -1.
    """
    delta = as_datetime(due) - as_datetime(reference)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)
