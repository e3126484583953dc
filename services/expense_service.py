import math
from datetime import date, datetime
from database.category_dao import CategoryDAO
from database.expense_dao import ExpenseDAO
from models.expense import Expense
from services.errors import NotFoundError, ValidationError
from utils.constants import REMARKS_MAX_LEN
from utils.date_helpers import as_date, today


class ExpenseService:
    """Plain user-entered expenses. Recurring-derived ones come from RecurringService."""

    def __init__(self, expense_dao: ExpenseDAO, category_dao: CategoryDAO):
        self._dao = expense_dao
        self._category_dao = category_dao

    def get_for_user(
        self,
        user_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Expense]:
        return self._dao.get_by_user(user_id, start, end)

    def get_for_schedule(self, recurring_id: int) -> list[Expense]:
        return self._dao.get_by_recurring(recurring_id)

    def create(
        self,
        user_id: int,
        category_id: int,
        amount: float,
        date: date | datetime,
        remarks: str = "",
        recurring_id: int | None = None,
    ) -> Expense:
        if recurring_id is not None:
            raise ValidationError(
                "recurring_id",
                "Recurring expenses are created by processing their schedule.",
            )
        self._validate(amount, date, remarks)
        if self._category_dao.get_by_id(category_id) is None:
            raise NotFoundError("Category", category_id)
        return self._dao.create(
            user_id=user_id,
            category_id=category_id,
            amount=amount,
            date=as_date(date),
            remarks=remarks.strip(),
        )

    def delete(self, expense_id: int):
        if self._dao.get_by_id(expense_id) is None:
            raise NotFoundError("Expense", expense_id)
        self._dao.delete(expense_id)

    def _validate(self, amount: float, date, remarks: str):
        if isinstance(amount, bool) or not math.isfinite(amount):
            raise ValidationError("amount", "Amount must be a finite number.")
        if amount <= 0:
            raise ValidationError("amount", "Amount must be greater than 0.")
        if date is None:
            raise ValidationError("date", "Date is required.")
        if as_date(date) > today():
            raise ValidationError("date", "Expense date cannot be in the future.")
        if len(remarks.strip()) > REMARKS_MAX_LEN:
            raise ValidationError("remarks", f"Remarks cannot exceed {REMARKS_MAX_LEN} characters.")
