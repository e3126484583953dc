import unittest
from dataclasses import replace
from datetime import date

from database.db_manager import DatabaseManager
from database.category_dao import CategoryDAO
from database.expense_dao import ExpenseDAO
from database.recurring_dao import RecurringDAO
from database.user_dao import UserDAO
from models.recurring_expense import RecurringExpense
from services.recurring_service import RecurringService
from utils.constants import DEFAULT_USER_NAME


class ServiceTestCase(unittest.TestCase):
    """Fresh in-memory database with the default user and categories seeded."""

    def setUp(self):
        self.db = DatabaseManager(":memory:")
        self.db.initialize()
        self.category_dao = CategoryDAO(self.db)
        self.expense_dao = ExpenseDAO(self.db)
        self.recurring_dao = RecurringDAO(self.db)
        self.user_dao = UserDAO(self.db)
        self.service = self.build_service()
        self.user = self.user_dao.get_by_name(DEFAULT_USER_NAME)
        self.category = self.category_dao.get_by_name("Utilities")

    def tearDown(self):
        self.db.close()

    def build_service(self, expense_dao=None, recurring_dao=None) -> RecurringService:
        return RecurringService(
            self.db,
            recurring_dao or self.recurring_dao,
            expense_dao or self.expense_dao,
            self.category_dao,
        )

    def schedule_data(self, **overrides) -> dict:
        data = {
            "user_id": self.user.id,
            "category_id": self.category.id,
            "title": "Internet",
            "amount": 49.99,
            "frequency": "monthly",
            "cycle_details": {"day_of_month": 1},
            "start_date": date(2024, 1, 1),
        }
        data.update(overrides)
        return data

    def make_schedule(self, **overrides) -> RecurringExpense:
        return self.service.upsert_schedule(self.schedule_data(**overrides))

    def set_next_due(self, schedule: RecurringExpense, next_due: date) -> RecurringExpense:
        """Move next_due directly in the store, bypassing the service."""
        return self.recurring_dao.save(replace(schedule, next_due=next_due))
