import unittest
from datetime import date, datetime

from services.reminder_service import ReminderService
from support import ServiceTestCase

NOW = datetime(2024, 6, 10, 9, 0)


class TestReminderService(ServiceTestCase):
    def setUp(self):
        super().setUp()
        self.reminders = ReminderService(self.service)

    def _schedule_due(self, title: str, next_due: date, **overrides):
        return self.set_next_due(self.make_schedule(title=title, **overrides), next_due)

    def test_statuses_become_reminders(self):
        self._schedule_due("Rent", date(2024, 6, 8))
        self._schedule_due("Phone", date(2024, 6, 10))
        self._schedule_due("Gym", date(2024, 6, 13), reminder_days=3)
        self._schedule_due("Netflix", date(2024, 6, 20), reminder_days=3)

        reminders = self.reminders.get_reminders(now=NOW)

        self.assertEqual(
            [(r.type, r.severity, r.title) for r in reminders],
            [
                ("overdue_recurring", "error", "Rent is overdue"),
                ("due_today_recurring", "warning", "Phone due today"),
                ("upcoming_recurring", "info", "Gym due in 3 days"),
            ],
        )
        self.assertEqual(reminders[2].days_until_due, 3)
        self.assertTrue(all(r.key.startswith("recurring:") for r in reminders))

    def test_tomorrow_label(self):
        self._schedule_due("Water", date(2024, 6, 11))
        reminders = self.reminders.get_reminders(now=NOW)
        self.assertEqual(reminders[0].title, "Water due tomorrow")

    def test_inactive_schedules_are_quiet(self):
        schedule = self._schedule_due("Old lease", date(2024, 1, 1))
        self.service.set_active(schedule.id, False)
        self.assertEqual(self.reminders.get_reminders(now=NOW), [])

    def test_scoped_to_user(self):
        self._schedule_due("Rent", date(2024, 6, 8))
        other = self.user_dao.create("flatmate")
        self.assertEqual(self.reminders.get_reminders(user_id=other.id, now=NOW), [])
        self.assertEqual(len(self.reminders.get_reminders(user_id=self.user.id, now=NOW)), 1)


if __name__ == "__main__":
    unittest.main()
