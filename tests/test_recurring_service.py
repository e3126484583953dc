import unittest
from datetime import date, datetime

from models.recurring_expense import CycleDetails
from services.errors import NotFoundError, ValidationError
from support import ServiceTestCase


class TestUpsertCreate(ServiceTestCase):
    def test_next_due_computed_from_start_date(self):
        schedule = self.make_schedule(
            cycle_details={"day_of_month": 15}, start_date=date(2024, 1, 10),
        )
        self.assertIsNotNone(schedule.id)
        self.assertEqual(schedule.next_due, date(2024, 2, 15))
        self.assertEqual(schedule.category_name, "Utilities")
        self.assertTrue(schedule.active)
        self.assertTrue(schedule.auto_create)
        self.assertEqual(schedule.reminder_days, 1)
        self.assertEqual(schedule.created_expenses, [])

    def test_defaults_start_date_to_today(self):
        data = self.schedule_data(frequency="daily")
        del data["start_date"]
        schedule = self.service.upsert_schedule(data)
        self.assertEqual(schedule.start_date, date.today())

    def test_datetime_start_date_accepted(self):
        schedule = self.make_schedule(frequency="daily", start_date=datetime(2024, 3, 5, 18, 30))
        self.assertEqual(schedule.start_date, date(2024, 3, 5))
        self.assertEqual(schedule.next_due, date(2024, 3, 6))

    def test_optional_fields_round_trip_through_store(self):
        schedule = self.make_schedule(
            frequency="yearly",
            cycle_details={"month_of_year": 4, "day_of_month": 15},
            end_date=date(2030, 1, 1),
            description="Car insurance",
            tags=["car", "insurance"],
            auto_create=False,
            reminder_days=7,
        )
        stored = self.service.get_by_id(schedule.id)
        self.assertEqual(stored.cycle_details, CycleDetails(day_of_month=15, month_of_year=4))
        self.assertEqual(stored.end_date, date(2030, 1, 1))
        self.assertEqual(stored.tags, ["car", "insurance"])
        self.assertFalse(stored.auto_create)
        self.assertEqual(stored.reminder_days, 7)
        self.assertEqual(stored.next_due, date(2025, 4, 15))

    def test_unknown_category(self):
        with self.assertRaises(NotFoundError):
            self.make_schedule(category_id=9999)
        self.assertEqual(self.service.get_all(), [])


class TestValidation(ServiceTestCase):
    def assertRejected(self, field: str, **overrides):
        with self.assertRaises(ValidationError) as ctx:
            self.make_schedule(**overrides)
        self.assertEqual(ctx.exception.field, field)
        self.assertEqual(self.service.get_all(), [])

    def test_zero_amount(self):
        self.assertRejected("amount", amount=0)

    def test_negative_amount(self):
        self.assertRejected("amount", amount=-5)

    def test_infinite_amount(self):
        self.assertRejected("amount", amount=float("inf"))

    def test_nan_amount(self):
        self.assertRejected("amount", amount=float("nan"))

    def test_boolean_amount(self):
        self.assertRejected("amount", amount=True)

    def test_boolean_reminder_days(self):
        self.assertRejected("reminder_days", reminder_days=True)

    def test_unknown_frequency(self):
        self.assertRejected("frequency", frequency="biweekly")

    def test_reminder_days_above_limit(self):
        self.assertRejected("reminder_days", reminder_days=31)

    def test_negative_reminder_days(self):
        self.assertRejected("reminder_days", reminder_days=-1)

    def test_end_date_equal_to_start_date(self):
        self.assertRejected("end_date", start_date=date(2024, 1, 1), end_date=date(2024, 1, 1))

    def test_end_date_before_start_date(self):
        self.assertRejected("end_date", start_date=date(2024, 1, 1), end_date=date(2023, 12, 1))

    def test_day_of_week_out_of_range(self):
        self.assertRejected(
            "cycle_details.day_of_week", frequency="weekly", cycle_details={"day_of_week": 7},
        )

    def test_day_of_month_out_of_range(self):
        self.assertRejected("cycle_details.day_of_month", cycle_details={"day_of_month": 0})
        self.assertRejected("cycle_details.day_of_month", cycle_details={"day_of_month": 32})

    def test_month_of_year_out_of_range(self):
        self.assertRejected(
            "cycle_details.month_of_year",
            frequency="yearly",
            cycle_details={"month_of_year": 13, "day_of_month": 1},
        )

    def test_title_too_long(self):
        self.assertRejected("title", title="x" * 51)

    def test_blank_title(self):
        self.assertRejected("title", title="   ")

    def test_tag_too_long(self):
        self.assertRejected("tags.0", tags=["t" * 21])

    def test_next_due_cannot_be_supplied(self):
        self.assertRejected("next_due", next_due=date(2024, 6, 1))


class TestUpsertUpdate(ServiceTestCase):
    def setUp(self):
        super().setUp()
        self.schedule = self.make_schedule()
        # Pretend a few cycles were processed so next_due no longer matches start_date.
        self.schedule = self.set_next_due(self.schedule, date(2024, 5, 1))

    def test_plain_field_change_keeps_next_due(self):
        updated = self.service.upsert_schedule({"amount": 59.99, "title": "Fiber"}, self.schedule.id)
        self.assertEqual(updated.amount, 59.99)
        self.assertEqual(updated.title, "Fiber")
        self.assertEqual(updated.next_due, date(2024, 5, 1))
        self.assertEqual(updated.frequency, "monthly")

    def test_frequency_change_recomputes_from_start_date(self):
        updated = self.service.upsert_schedule(
            {"frequency": "weekly", "cycle_details": {"day_of_week": 5}}, self.schedule.id,
        )
        self.assertEqual(updated.next_due, date(2024, 1, 5))

    def test_cycle_details_change_recomputes(self):
        updated = self.service.upsert_schedule(
            {"cycle_details": {"day_of_month": 10}}, self.schedule.id,
        )
        self.assertEqual(updated.next_due, date(2024, 2, 10))

    def test_start_date_change_recomputes(self):
        updated = self.service.upsert_schedule({"start_date": date(2024, 3, 20)}, self.schedule.id)
        self.assertEqual(updated.next_due, date(2024, 4, 1))

    def test_invalid_update_leaves_schedule_untouched(self):
        with self.assertRaises(ValidationError):
            self.service.upsert_schedule({"amount": 0, "frequency": "daily"}, self.schedule.id)
        stored = self.service.get_by_id(self.schedule.id)
        self.assertEqual(stored.amount, 49.99)
        self.assertEqual(stored.frequency, "monthly")
        self.assertEqual(stored.next_due, date(2024, 5, 1))

    def test_end_date_checked_against_stored_start_date(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.upsert_schedule({"end_date": date(2023, 12, 31)}, self.schedule.id)
        self.assertEqual(ctx.exception.field, "end_date")

    def test_missing_schedule(self):
        with self.assertRaises(NotFoundError):
            self.service.upsert_schedule({"amount": 10}, 9999)


class TestLifecycle(ServiceTestCase):
    def test_toggle_active(self):
        schedule = self.make_schedule()
        self.assertFalse(self.service.toggle_active(schedule.id).active)
        self.assertTrue(self.service.toggle_active(schedule.id).active)

    def test_filters(self):
        self.make_schedule(title="Rent")
        weekly = self.make_schedule(title="Groceries", frequency="weekly", cycle_details={})
        self.service.set_active(weekly.id, False)

        self.assertEqual([s.title for s in self.service.get_all(active=True)], ["Rent"])
        self.assertEqual([s.title for s in self.service.get_all(frequency="weekly")], ["Groceries"])
        other = self.user_dao.create("second")
        self.assertEqual(self.service.get_all(user_id=other.id), [])

    def test_get_upcoming(self):
        soon = self.make_schedule(title="Soon")
        later = self.make_schedule(title="Later")
        past = self.make_schedule(title="Past")
        today = self.make_schedule(title="Today")
        self.set_next_due(soon, date(2024, 6, 5))
        self.set_next_due(later, date(2024, 8, 1))
        self.set_next_due(past, date(2024, 5, 20))
        self.set_next_due(today, date(2024, 6, 1))

        upcoming = self.service.get_upcoming(days=30, now=datetime(2024, 6, 1, 9))
        self.assertEqual([s.title for s in upcoming], ["Soon"])

    def test_delete(self):
        schedule = self.make_schedule()
        self.service.delete(schedule.id)
        self.assertIsNone(self.service.get_by_id(schedule.id))
        with self.assertRaises(NotFoundError):
            self.service.delete(schedule.id)

    def test_preview_does_not_touch_store(self):
        schedule = self.make_schedule()
        preview = self.service.preview_next_due("weekly", CycleDetails(day_of_week=1), date(2024, 1, 1))
        self.assertEqual(preview, date(2024, 1, 8))
        self.assertEqual(self.service.get_by_id(schedule.id).next_due, schedule.next_due)


if __name__ == "__main__":
    unittest.main()
