from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass
class Expense:
    id: int
    user_id: int
    category_id: int
    category_name: str
    amount: float
    date: date
    remarks: str
    is_recurring: bool = False
    recurring_id: Optional[int] = None
    created_at: str = ""
