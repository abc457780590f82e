"""Pydantic models for reminders and their weekly recurrence metadata."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReminderType(str, Enum):
    """Semantic category of a reminder."""
    GYM = "gym"
    SUPPLEMENT = "supplement"
    WORKOUT = "workout"
    GENERIC = "generic"


class Weekday(str, Enum):
    """Weekday codes, declared in calendar order starting on Sunday.

    The code doubles as the ``BYDAY`` value in the stored rrule string, while
    ``index`` is the 0 (Sunday) .. 6 (Saturday) position used for arithmetic.
    """
    SU = "SU"
    MO = "MO"
    TU = "TU"
    WE = "WE"
    TH = "TH"
    FR = "FR"
    SA = "SA"

    @property
    def index(self) -> int:
        return _WEEKDAY_ORDER.index(self)

    @property
    def full_name(self) -> str:
        return WEEKDAY_NAMES[self.index]

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        return _WEEKDAY_ORDER[index % 7]

    @classmethod
    def from_name(cls, name: str) -> "Weekday":
        """Look up a weekday by its full lowercase name ("monday")."""
        return _WEEKDAY_ORDER[WEEKDAY_NAMES.index(name.strip().lower())]

    @classmethod
    def of(cls, moment: datetime) -> "Weekday":
        # datetime.weekday() is Monday=0, the enum index is Sunday=0
        return _WEEKDAY_ORDER[(moment.weekday() + 1) % 7]


_WEEKDAY_ORDER = list(Weekday)

WEEKDAY_NAMES = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)


class RecurrenceMeta(BaseModel):
    """Weekly recurrence tag carried by recurring gym sessions."""
    byday: Weekday
    rrule: str


class Reminder(BaseModel):
    """A scheduled reminder.

    ``time`` is a naive local wall-clock datetime. It is ``None`` only when a
    persisted value could not be parsed; such records never match any date
    filter.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: int
    label: str = Field(min_length=1)
    type: ReminderType = ReminderType.GENERIC
    time: Optional[datetime] = None
    details: Optional[str] = None
    completed: bool = False
    workouts: Optional[list[str]] = None
    meta: Optional[RecurrenceMeta] = None

    @field_validator("time", mode="before")
    @classmethod
    def _lenient_time(cls, value):
        if value is None or isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None

    @property
    def is_recurring(self) -> bool:
        return self.meta is not None


def build_rrule(byday: Weekday, when: datetime) -> str:
    """Descriptive rrule string; informational only, never parsed back."""
    return f"FREQ=WEEKLY;BYDAY={byday.value};BYHOUR={when.hour};BYMINUTE={when.minute}"
