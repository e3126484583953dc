from datetime import date
from typing import Optional
from database.db_manager import DatabaseManager
from models.expense import Expense
from utils.date_helpers import format_date, parse_date


class ExpenseDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Expense:
        return Expense(
            id=row["id"],
            user_id=row["user_id"],
            category_id=row["category_id"],
            category_name=row["category_name"] if "category_name" in row.keys() else "",
            amount=row["amount"],
            date=parse_date(row["date"]),
            remarks=row["remarks"],
            is_recurring=bool(row["is_recurring"]),
            recurring_id=row["recurring_id"],
            created_at=row["created_at"],
        )

    def _select(self) -> str:
        return """
            SELECT e.*,
                   COALESCE(c.name, '') AS category_name
            FROM expenses e
            LEFT JOIN categories c ON e.category_id = c.id
        """

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE e.id = ?", (expense_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_user(
        self,
        user_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Expense]:
        conn = self._db.get_connection()
        sql = self._select() + " WHERE e.user_id = ?"
        params: list = [user_id]
        if start:
            sql += " AND e.date >= ?"
            params.append(format_date(start))
        if end:
            sql += " AND e.date <= ?"
            params.append(format_date(end))
        sql += " ORDER BY e.date ASC, e.id ASC"
        rows = conn.execute(sql, params).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_recurring(self, recurring_id: int) -> list[Expense]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " WHERE e.recurring_id = ? ORDER BY e.date ASC, e.id ASC",
            (recurring_id,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def find_for_cycle(self, recurring_id: int, due: date) -> Optional[Expense]:
        """The expense a schedule already produced for this due date, if any."""
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE e.recurring_id = ? AND e.date = ?",
            (recurring_id, format_date(due)),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        user_id: int,
        category_id: int,
        amount: float,
        date: date,
        remarks: str = "",
        is_recurring: bool = False,
        recurring_id: int | None = None,
        commit: bool = True,
    ) -> Expense:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO expenses
               (user_id, category_id, amount, date, remarks, is_recurring, recurring_id)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                user_id, category_id, amount, format_date(date), remarks,
                1 if is_recurring else 0, recurring_id,
            ),
        )
        if commit:
            conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def delete(self, expense_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
        conn.commit()
