from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass
class CycleDetails:
    day_of_week: Optional[int] = None    # 0=Sun..6=Sat, weekly only
    day_of_month: Optional[int] = None   # 1-31, monthly/yearly
    month_of_year: Optional[int] = None  # 1-12, yearly only

    def to_dict(self) -> dict:
        return {
            "day_of_week": self.day_of_week,
            "day_of_month": self.day_of_month,
            "month_of_year": self.month_of_year,
        }


@dataclass
class CreatedExpense:
    """One ledger row: an expense this schedule materialized."""
    expense_id: Optional[int]
    date_created: datetime
    amount: float
    id: Optional[int] = None


@dataclass
class RecurringExpense:
    id: Optional[int]
    user_id: int
    category_id: int
    title: str
    amount: float
    frequency: str          # 'daily' | 'weekly' | 'monthly' | 'yearly'
    start_date: date
    next_due: date
    cycle_details: CycleDetails = field(default_factory=CycleDetails)
    end_date: Optional[date] = None
    last_processed_date: Optional[datetime] = None
    active: bool = True
    auto_create: bool = True
    reminder_days: int = 1
    description: str = ""
    tags: list[str] = field(default_factory=list)
    created_expenses: list[CreatedExpense] = field(default_factory=list)
    category_name: str = ""
    created_at: str = ""
    updated_at: str = ""
