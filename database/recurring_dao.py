import json
from datetime import date, datetime
from typing import Optional
from database.db_manager import DatabaseManager
from models.recurring_expense import CreatedExpense, CycleDetails, RecurringExpense
from utils.date_helpers import format_date, format_datetime, parse_date, parse_datetime


class RecurringDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> RecurringExpense:
        return RecurringExpense(
            id=row["id"],
            user_id=row["user_id"],
            category_id=row["category_id"],
            title=row["title"],
            amount=row["amount"],
            frequency=row["frequency"],
            cycle_details=CycleDetails(
                day_of_week=row["day_of_week"],
                day_of_month=row["day_of_month"],
                month_of_year=row["month_of_year"],
            ),
            start_date=parse_date(row["start_date"]),
            end_date=parse_date(row["end_date"]) if row["end_date"] else None,
            next_due=parse_date(row["next_due"]),
            last_processed_date=parse_datetime(row["last_processed_date"]),
            active=bool(row["active"]),
            auto_create=bool(row["auto_create"]),
            reminder_days=row["reminder_days"],
            description=row["description"],
            tags=json.loads(row["tags"]) if row["tags"] else [],
            category_name=row["category_name"] or "",
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _select(self) -> str:
        return """
            SELECT r.*,
                   c.name AS category_name
            FROM recurring_expenses r
            LEFT JOIN categories c ON r.category_id = c.id
        """

    def _fetch(self, where: str = "", params: tuple = (), order: str = "r.next_due, r.id") -> list[RecurringExpense]:
        conn = self._db.get_connection()
        sql = self._select()
        if where:
            sql += " WHERE " + where
        sql += " ORDER BY " + order
        schedules = [self._row_to_model(r) for r in conn.execute(sql, params).fetchall()]
        self._attach_ledgers(schedules)
        return schedules

    def _attach_ledgers(self, schedules: list[RecurringExpense]):
        """Load every schedule's created-expense ledger in a single query."""
        if not schedules:
            return
        by_id = {s.id: s for s in schedules}
        placeholders = ",".join("?" * len(by_id))
        rows = self._db.get_connection().execute(
            f"""SELECT * FROM recurring_created_expenses
                WHERE recurring_id IN ({placeholders})
                ORDER BY id""",
            tuple(by_id),
        ).fetchall()
        for row in rows:
            by_id[row["recurring_id"]].created_expenses.append(CreatedExpense(
                id=row["id"],
                expense_id=row["expense_id"],
                date_created=parse_datetime(row["date_created"]),
                amount=row["amount"],
            ))

    def get_all(
        self,
        user_id: int | None = None,
        active: bool | None = None,
        frequency: str | None = None,
    ) -> list[RecurringExpense]:
        clauses: list[str] = []
        params: list = []
        if user_id is not None:
            clauses.append("r.user_id = ?")
            params.append(user_id)
        if active is not None:
            clauses.append("r.active = ?")
            params.append(1 if active else 0)
        if frequency:
            clauses.append("r.frequency = ?")
            params.append(frequency)
        return self._fetch(" AND ".join(clauses), tuple(params))

    def get_by_id(self, recurring_id: int) -> Optional[RecurringExpense]:
        found = self._fetch("r.id = ?", (recurring_id,))
        return found[0] if found else None

    def find_eligible(self, now: datetime | date) -> list[RecurringExpense]:
        """Active auto-create schedules whose next_due has arrived and whose end_date has not."""
        ref = format_date(now.date() if isinstance(now, datetime) else now)
        return self._fetch(
            """r.active = 1 AND r.auto_create = 1 AND r.next_due <= ?
               AND (r.end_date IS NULL OR r.end_date > ?)""",
            (ref, ref),
        )

    def get_due_between(
        self, start: date, end: date, user_id: int | None = None
    ) -> list[RecurringExpense]:
        where = "r.active = 1 AND r.next_due >= ? AND r.next_due <= ?"
        params: list = [format_date(start), format_date(end)]
        if user_id is not None:
            where += " AND r.user_id = ?"
            params.append(user_id)
        return self._fetch(where, tuple(params))

    def save(self, schedule: RecurringExpense, commit: bool = True) -> RecurringExpense:
        """Insert or update the schedule, then append any new ledger rows.

        Ledger rows are only ever inserted here, never updated or deleted.
        """
        conn = self._db.get_connection()
        cycle = schedule.cycle_details
        values = (
            schedule.user_id, schedule.category_id, schedule.title,
            schedule.amount, schedule.frequency,
            cycle.day_of_week, cycle.day_of_month, cycle.month_of_year,
            format_date(schedule.start_date),
            format_date(schedule.end_date) if schedule.end_date else None,
            format_date(schedule.next_due),
            format_datetime(schedule.last_processed_date) if schedule.last_processed_date else None,
            1 if schedule.active else 0,
            1 if schedule.auto_create else 0,
            schedule.reminder_days,
            schedule.description,
            json.dumps(schedule.tags) if schedule.tags else "",
        )
        if schedule.id is None:
            cursor = conn.execute(
                """INSERT INTO recurring_expenses
                   (user_id, category_id, title, amount, frequency,
                    day_of_week, day_of_month, month_of_year,
                    start_date, end_date, next_due, last_processed_date,
                    active, auto_create, reminder_days, description, tags)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                values,
            )
            recurring_id = cursor.lastrowid
        else:
            recurring_id = schedule.id
            conn.execute(
                """UPDATE recurring_expenses SET
                   user_id=?, category_id=?, title=?, amount=?, frequency=?,
                   day_of_week=?, day_of_month=?, month_of_year=?,
                   start_date=?, end_date=?, next_due=?, last_processed_date=?,
                   active=?, auto_create=?, reminder_days=?, description=?, tags=?,
                   updated_at=datetime('now')
                   WHERE id=?""",
                values + (recurring_id,),
            )

        for entry in schedule.created_expenses:
            if entry.id is not None:
                continue
            conn.execute(
                """INSERT INTO recurring_created_expenses
                   (recurring_id, expense_id, date_created, amount)
                   VALUES (?, ?, ?, ?)""",
                (recurring_id, entry.expense_id,
                 format_datetime(entry.date_created), entry.amount),
            )

        if commit:
            conn.commit()
        return self.get_by_id(recurring_id)

    def set_active(self, recurring_id: int, active: bool):
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE recurring_expenses SET active = ?, updated_at = datetime('now') WHERE id = ?",
            (1 if active else 0, recurring_id),
        )
        conn.commit()

    def delete(self, recurring_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM recurring_expenses WHERE id = ?", (recurring_id,))
        conn.commit()
