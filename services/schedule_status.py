from datetime import date, datetime
from enum import Enum
from models.recurring_expense import RecurringExpense
from utils.constants import (
    STATUS_DUE_TODAY,
    STATUS_INACTIVE,
    STATUS_OVERDUE,
    STATUS_REMINDER,
    STATUS_SCHEDULED,
)
from utils.date_helpers import days_between, now as current_time


class ScheduleStatus(str, Enum):
    INACTIVE = STATUS_INACTIVE
    OVERDUE = STATUS_OVERDUE
    DUE_TODAY = STATUS_DUE_TODAY
    REMINDER = STATUS_REMINDER
    SCHEDULED = STATUS_SCHEDULED


def days_until_due(
    schedule: RecurringExpense, now: date | datetime | None = None
) -> int | None:
    if schedule.next_due is None:
        return None
    return days_between(schedule.next_due, now or current_time())


def derive_status(
    schedule: RecurringExpense, now: date | datetime | None = None
) -> ScheduleStatus:
    """inactive, then overdue, then due_today, then reminder window, else scheduled."""
    if not schedule.active:
        return ScheduleStatus.INACTIVE
    days = days_until_due(schedule, now)
    if days is None:
        return ScheduleStatus.SCHEDULED
    if days < 0:
        return ScheduleStatus.OVERDUE
    if days == 0:
        return ScheduleStatus.DUE_TODAY
    if days <= schedule.reminder_days:
        return ScheduleStatus.REMINDER
    return ScheduleStatus.SCHEDULED
