import logging
import os
import sys
import time

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.category_dao import CategoryDAO
from database.expense_dao import ExpenseDAO
from database.recurring_dao import RecurringDAO

from services.recurring_service import RecurringService
from services.reminder_service import ReminderService
from services.scan_runner import ScanRunner

from utils.app_config import get_db_folder, get_scan_interval_minutes
from utils.constants import APP_NAME
from utils.date_helpers import format_datetime, now

logger = logging.getLogger(APP_NAME)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager.open(db_folder=get_db_folder())

    # ── DAOs ─────────────────────────────────────────────────────────────────
    category_dao = CategoryDAO(db)
    expense_dao = ExpenseDAO(db)
    recurring_dao = RecurringDAO(db)

    # ── Services ─────────────────────────────────────────────────────────────
    recurring_svc = RecurringService(db, recurring_dao, expense_dao, category_dao)
    reminder_svc = ReminderService(recurring_svc)
    interval = get_scan_interval_minutes()
    runner = ScanRunner(recurring_svc, interval_seconds=(interval or 60) * 60)

    # ── Process due recurring expenses ───────────────────────────────────────
    result = runner.run_now()
    db.set_setting("last_scan_at", format_datetime(now()))
    logger.info(
        "Processed due recurring expenses: %d created, %d failed",
        len(result.succeeded), len(result.failed),
    )
    for failure in result.failed:
        logger.error("  %s (#%s): %s", failure.title, failure.recurring_id, failure.reason)

    for reminder in reminder_svc.get_reminders():
        logger.info("[%s] %s: %s", reminder.severity, reminder.title, reminder.detail)

    # ── Periodic trigger ─────────────────────────────────────────────────────
    if interval is None:
        db.close()
        return

    runner.start()
    try:
        while runner.running:
            time.sleep(1.0)
    except KeyboardInterrupt:
        logger.info("Stopping periodic scan")
    finally:
        runner.stop()
        db.close()


if __name__ == "__main__":
    main()
