from dataclasses import dataclass
from datetime import date, datetime
from services.recurring_service import RecurringService
from services.schedule_status import ScheduleStatus
from utils.constants import SEVERITY_ORDER
from utils.currency import format_currency
from utils.date_helpers import now as current_time


@dataclass
class Reminder:
    type: str       # 'overdue_recurring' | 'due_today_recurring' | 'upcoming_recurring'
    severity: str   # 'info' | 'warning' | 'error'
    title: str
    detail: str
    due_date: date
    days_until_due: int
    key: str = ""   # e.g. "recurring:5"


class ReminderService:
    """Computes reminder records from schedule status; delivering them is up to the caller."""

    def __init__(self, recurring_service: RecurringService):
        self._recurring = recurring_service

    def get_reminders(
        self,
        user_id: int | None = None,
        now: date | datetime | None = None,
    ) -> list[Reminder]:
        ref = now or current_time()
        reminders: list[Reminder] = []
        for schedule in self._recurring.get_all(user_id=user_id, active=True):
            status = self._recurring.derive_status(schedule, ref)
            days = self._recurring.days_until_due(schedule, ref)
            due_label = schedule.next_due.strftime("%b %d")
            detail = (
                f"{format_currency(schedule.amount)} · {schedule.category_name} · "
                f"{schedule.frequency}"
            )

            if status == ScheduleStatus.OVERDUE:
                reminders.append(Reminder(
                    type="overdue_recurring",
                    severity="error",
                    title=f"{schedule.title} is overdue",
                    detail=f"Was due on {due_label} · {detail}",
                    due_date=schedule.next_due,
                    days_until_due=days,
                    key=f"recurring:{schedule.id}",
                ))
            elif status == ScheduleStatus.DUE_TODAY:
                reminders.append(Reminder(
                    type="due_today_recurring",
                    severity="warning",
                    title=f"{schedule.title} due today",
                    detail=f"Due on {due_label} · {detail}",
                    due_date=schedule.next_due,
                    days_until_due=days,
                    key=f"recurring:{schedule.id}",
                ))
            elif status == ScheduleStatus.REMINDER:
                day_label = "tomorrow" if days == 1 else f"in {days} days"
                reminders.append(Reminder(
                    type="upcoming_recurring",
                    severity="info",
                    title=f"{schedule.title} due {day_label}",
                    detail=f"Due on {due_label} · {detail}",
                    due_date=schedule.next_due,
                    days_until_due=days,
                    key=f"recurring:{schedule.id}",
                ))

        return sorted(reminders, key=lambda r: (SEVERITY_ORDER[r.severity], r.due_date))
