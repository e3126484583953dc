"""Input schemas for recurring expense create/update."""

from datetime import date, datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from utils.constants import (
    DESCRIPTION_MAX_LEN,
    MAX_REMINDER_DAYS,
    DEFAULT_REMINDER_DAYS,
    TAG_MAX_LEN,
    TITLE_MAX_LEN,
)

Frequency = Literal["daily", "weekly", "monthly", "yearly"]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=TAG_MAX_LEN)]


class CycleDetailsInput(BaseModel):
    """Cycle anchor. day_of_week uses 0 = Sunday .. 6 = Saturday."""

    model_config = ConfigDict(extra="forbid")

    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    month_of_year: Optional[int] = Field(None, ge=1, le=12)


class RecurringExpenseInput(BaseModel):
    """Full schedule definition. next_due is derived and never accepted here."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    user_id: int
    category_id: int
    title: str = Field(min_length=1, max_length=TITLE_MAX_LEN)
    amount: float = Field(gt=0, allow_inf_nan=False)
    frequency: Frequency = "monthly"
    cycle_details: CycleDetailsInput = Field(default_factory=CycleDetailsInput)
    start_date: date = Field(default_factory=date.today)
    end_date: Optional[date] = None
    active: bool = True
    auto_create: bool = True
    reminder_days: int = Field(DEFAULT_REMINDER_DAYS, ge=0, le=MAX_REMINDER_DAYS)
    description: str = Field("", max_length=DESCRIPTION_MAX_LEN)
    tags: list[Tag] = Field(default_factory=list)

    @field_validator("amount", "reminder_days", mode="before")
    @classmethod
    def _no_bool(cls, value):
        if isinstance(value, bool):
            raise ValueError("Input should be a number, not a boolean")
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _drop_time(cls, value):
        if isinstance(value, datetime):
            return value.date()
        return value

    @field_validator("cycle_details", mode="before")
    @classmethod
    def _none_means_empty(cls, value):
        return {} if value is None else value

    @field_validator("end_date")
    @classmethod
    def _end_after_start(cls, value, info):
        start = info.data.get("start_date")
        if value is not None and start is not None and value <= start:
            raise ValueError("End date must be after start date")
        return value
