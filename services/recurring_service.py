import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from pydantic import ValidationError as SchemaValidationError
from database.db_manager import DatabaseManager
from database.category_dao import CategoryDAO
from database.expense_dao import ExpenseDAO
from database.recurring_dao import RecurringDAO
from models.batch_result import BatchResult, ScanFailure, ScanSuccess
from models.expense import Expense
from models.recurring_expense import CreatedExpense, CycleDetails, RecurringExpense
from models.schemas import RecurringExpenseInput
from services.cycle_calculator import compute_next, preview_next_due
from services.errors import (
    InactiveScheduleError,
    MaterializationError,
    NotFoundError,
    ValidationError,
)
from services.schedule_status import ScheduleStatus, days_until_due, derive_status
from utils.constants import UPCOMING_DAYS
from utils.currency import format_currency
from utils.date_helpers import as_date, as_datetime, format_date, now as current_time

logger = logging.getLogger(__name__)

# Changing any of these moves the cycle anchor, so next_due is recomputed.
_CYCLE_FIELDS = ("frequency", "start_date", "cycle_details")


class RecurringService:
    def __init__(
        self,
        db: DatabaseManager,
        recurring_dao: RecurringDAO,
        expense_dao: ExpenseDAO,
        category_dao: CategoryDAO,
    ):
        self._db = db
        self._dao = recurring_dao
        self._expense_dao = expense_dao
        self._category_dao = category_dao

    # ── Queries ──────────────────────────────────────────────────────────────

    def get_all(
        self,
        user_id: int | None = None,
        active: bool | None = None,
        frequency: str | None = None,
    ) -> list[RecurringExpense]:
        return self._dao.get_all(user_id=user_id, active=active, frequency=frequency)

    def get_by_id(self, recurring_id: int) -> RecurringExpense | None:
        return self._dao.get_by_id(recurring_id)

    def get_upcoming(
        self,
        user_id: int | None = None,
        days: int = UPCOMING_DAYS,
        now: date | datetime | None = None,
    ) -> list[RecurringExpense]:
        """Active schedules due after today and within `days`, soonest first.

        Schedules due today are already past their midnight due time.
        """
        start = as_date(now) if now else current_time().date()
        return self._dao.get_due_between(
            start + timedelta(days=1), start + timedelta(days=days), user_id=user_id,
        )

    def preview_next_due(
        self,
        frequency: str,
        cycle_details: CycleDetails | None = None,
        from_date: date | datetime | None = None,
    ) -> date:
        return preview_next_due(frequency, cycle_details, from_date)

    def derive_status(
        self, schedule: RecurringExpense, now: date | datetime | None = None
    ) -> ScheduleStatus:
        return derive_status(schedule, now)

    def days_until_due(
        self, schedule: RecurringExpense, now: date | datetime | None = None
    ) -> int | None:
        return days_until_due(schedule, now)

    # ── Create / update ──────────────────────────────────────────────────────

    def upsert_schedule(
        self, data: dict, recurring_id: int | None = None
    ) -> RecurringExpense:
        """Create a schedule, or apply a partial update to an existing one.

        The merged result is validated as a whole before anything is written.
        next_due is derived from start_date on create and whenever frequency,
        start_date or cycle_details change; callers cannot set it.
        """
        existing = None
        if recurring_id is not None:
            existing = self._dao.get_by_id(recurring_id)
            if existing is None:
                raise NotFoundError("Recurring expense", recurring_id)
            merged = self._to_input(existing)
            merged.update(data)
        else:
            merged = dict(data)

        fields = self._validate(merged)
        if self._category_dao.get_by_id(fields.category_id) is None:
            raise NotFoundError("Category", fields.category_id)

        cycle = CycleDetails(**fields.cycle_details.model_dump())
        values = dict(
            user_id=fields.user_id,
            category_id=fields.category_id,
            title=fields.title,
            amount=fields.amount,
            frequency=fields.frequency,
            cycle_details=cycle,
            start_date=fields.start_date,
            end_date=fields.end_date,
            active=fields.active,
            auto_create=fields.auto_create,
            reminder_days=fields.reminder_days,
            description=fields.description,
            tags=list(fields.tags),
        )

        if existing is None:
            schedule = RecurringExpense(
                id=None,
                next_due=compute_next(fields.frequency, cycle, fields.start_date),
                **values,
            )
        else:
            schedule = replace(existing, **values)
            if any(getattr(existing, f) != getattr(schedule, f) for f in _CYCLE_FIELDS):
                schedule.next_due = compute_next(fields.frequency, cycle, fields.start_date)

        saved = self._dao.save(schedule)
        logger.info(
            "%s recurring expense %d '%s' (%s, next due %s)",
            "Created" if existing is None else "Updated",
            saved.id, saved.title, saved.frequency, format_date(saved.next_due),
        )
        return saved

    def set_active(self, recurring_id: int, active: bool) -> RecurringExpense:
        if self._dao.get_by_id(recurring_id) is None:
            raise NotFoundError("Recurring expense", recurring_id)
        self._dao.set_active(recurring_id, active)
        return self._dao.get_by_id(recurring_id)

    def toggle_active(self, recurring_id: int) -> RecurringExpense:
        schedule = self._dao.get_by_id(recurring_id)
        if schedule is None:
            raise NotFoundError("Recurring expense", recurring_id)
        return self.set_active(recurring_id, not schedule.active)

    def delete(self, recurring_id: int):
        """Remove the schedule and its ledger; materialized expenses stay."""
        if self._dao.get_by_id(recurring_id) is None:
            raise NotFoundError("Recurring expense", recurring_id)
        self._dao.delete(recurring_id)

    # ── Materialization ──────────────────────────────────────────────────────

    def run_scheduled_scan(self, now: date | datetime | None = None) -> BatchResult:
        """Materialize one occurrence for every eligible schedule.

        next_due advances one cycle from the previous next_due, not to the
        present, so a schedule several cycles behind needs one scan per
        missed cycle. Per-schedule failures are returned, never raised.
        """
        snapshot = as_datetime(now) if now else current_time()
        with self._db.lock:
            result = self._scan(snapshot)
        if result.failed:
            logger.warning(
                "Recurring scan finished: %d succeeded, %d failed",
                len(result.succeeded), len(result.failed),
            )
        return result

    def _scan(self, snapshot: datetime) -> BatchResult:
        result = BatchResult()
        eligible = self._dao.find_eligible(snapshot)
        logger.info("Processing %d due recurring expense(s)", len(eligible))

        for schedule in eligible:
            due = schedule.next_due
            try:
                expense, saved, reused = self._materialize(
                    schedule, due=due, advance_from=due, now=snapshot, allow_reuse=True,
                )
            except MaterializationError as exc:
                logger.warning(
                    "Recurring expense %d '%s' failed: %s",
                    schedule.id, schedule.title, exc.reason,
                )
                result.add(ScanFailure(
                    recurring_id=schedule.id,
                    title=schedule.title,
                    reason=exc.reason,
                ))
                continue

            logger.info(
                "Recurring expense %d '%s': %s on %s, next due %s",
                schedule.id, schedule.title, format_currency(schedule.amount),
                format_date(due), format_date(saved.next_due),
            )
            result.add(ScanSuccess(
                recurring_id=schedule.id,
                title=schedule.title,
                expense_id=expense.id,
                amount=expense.amount,
                due_date=due,
                next_due=saved.next_due,
                reused_existing=reused,
            ))
        return result

    def materialize_one(
        self,
        recurring_id: int,
        effective_date: date | datetime | None = None,
        user_id: int | None = None,
        now: date | datetime | None = None,
    ) -> Expense:
        """Create one occurrence on demand, e.g. for auto_create=False schedules.

        The expense is dated effective_date (default today) and next_due
        advances from that date rather than from the stored next_due.
        """
        stamp = as_datetime(now) if now else current_time()
        due = as_date(effective_date) if effective_date else stamp.date()
        with self._db.lock:
            schedule = self._dao.get_by_id(recurring_id)
            if schedule is None or (user_id is not None and schedule.user_id != user_id):
                raise NotFoundError("Recurring expense", recurring_id)
            if not schedule.active:
                raise InactiveScheduleError(recurring_id)
            expense, saved, _ = self._materialize(
                schedule, due=due, advance_from=due, now=stamp, allow_reuse=False,
            )
        logger.info(
            "Manually processed recurring expense %d '%s' on %s, next due %s",
            schedule.id, schedule.title, format_date(due), format_date(saved.next_due),
        )
        return expense

    def _materialize(
        self,
        schedule: RecurringExpense,
        due: date,
        advance_from: date,
        now: datetime,
        allow_reuse: bool,
    ) -> tuple[Expense, RecurringExpense, bool]:
        """Create the expense, extend the ledger and advance next_due atomically.

        An expense already recorded for (schedule, due) is reused when
        allow_reuse is set, so a retried cycle never produces a duplicate.
        """
        try:
            with self._db.transaction():
                expense = self._expense_dao.find_for_cycle(schedule.id, due)
                reused = expense is not None
                if reused and not allow_reuse:
                    raise MaterializationError(
                        schedule.id,
                        f"'{schedule.title}' was already processed for {format_date(due)}.",
                    )
                if expense is None:
                    expense = self._expense_dao.create(
                        user_id=schedule.user_id,
                        category_id=schedule.category_id,
                        amount=schedule.amount,
                        date=due,
                        remarks=f"{schedule.title} (Recurring)",
                        is_recurring=True,
                        recurring_id=schedule.id,
                        commit=False,
                    )

                ledger = list(schedule.created_expenses)
                if not any(entry.expense_id == expense.id for entry in ledger):
                    ledger.append(CreatedExpense(
                        expense_id=expense.id,
                        date_created=now,
                        amount=schedule.amount,
                    ))

                updated = replace(
                    schedule,
                    created_expenses=ledger,
                    last_processed_date=now,
                    next_due=compute_next(schedule.frequency, schedule.cycle_details, advance_from),
                )
                saved = self._dao.save(updated, commit=False)
        except MaterializationError:
            raise
        except Exception as exc:
            raise MaterializationError(schedule.id, str(exc)) from exc
        return expense, saved, reused

    # ── Validation ───────────────────────────────────────────────────────────

    def _to_input(self, schedule: RecurringExpense) -> dict:
        return {
            "user_id": schedule.user_id,
            "category_id": schedule.category_id,
            "title": schedule.title,
            "amount": schedule.amount,
            "frequency": schedule.frequency,
            "cycle_details": schedule.cycle_details.to_dict(),
            "start_date": schedule.start_date,
            "end_date": schedule.end_date,
            "active": schedule.active,
            "auto_create": schedule.auto_create,
            "reminder_days": schedule.reminder_days,
            "description": schedule.description,
            "tags": list(schedule.tags),
        }

    def _validate(self, data: dict) -> RecurringExpenseInput:
        if isinstance(data.get("cycle_details"), CycleDetails):
            data = {**data, "cycle_details": data["cycle_details"].to_dict()}
        try:
            return RecurringExpenseInput.model_validate(data)
        except SchemaValidationError as exc:
            error = exc.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or "schedule"
            raise ValidationError(field, error["msg"]) from exc
