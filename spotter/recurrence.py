"""Weekday-keyed recurring gym sessions.

A recurring reminder is tagged with ``meta.byday`` and is updated in place
week over week instead of being recreated. There is at most one recurring
reminder per ``(label, byday)``.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from typing import Iterable, Optional, Sequence, Union

from .dates import next_weekday_occurrence
from .models import RecurrenceMeta, Reminder, ReminderType, Weekday, build_rrule
from .store import ReminderStore, allocate_id

logger = logging.getLogger(__name__)

GYM_LABEL = "Gym"
DAILY = "DAILY"

DayCode = Union[Weekday, str]


def merge_unique(existing: Iterable[str], additions: Iterable[str]) -> list[str]:
    """Case-insensitive ordered union, lowercased."""
    merged: list[str] = []
    for tag in [*existing, *additions]:
        value = str(tag).strip().lower()
        if value and value not in merged:
            merged.append(value)
    return merged


def tags_from_details(details: Optional[str]) -> list[str]:
    if not details:
        return []
    return [part.strip().lower() for part in details.split(",") if part.strip()]


def _expand_days(bydays: Sequence[DayCode]) -> list[Weekday]:
    codes = [d.value if isinstance(d, Weekday) else str(d).upper() for d in bydays]
    if codes == [DAILY]:
        return [Weekday.MO, Weekday.TU, Weekday.WE, Weekday.TH, Weekday.FR, Weekday.SA, Weekday.SU]
    return [Weekday(code) for code in codes]


def _matches(reminder: Reminder, label: str, byday: Weekday) -> bool:
    return reminder.label == label and reminder.meta is not None and reminder.meta.byday == byday


def _set_workouts(reminder: Reminder, workouts: list[str]) -> None:
    reminder.workouts = workouts
    reminder.details = ", ".join(workouts) if workouts else None


def _current_workouts(reminder: Reminder) -> list[str]:
    if reminder.workouts is not None:
        return list(reminder.workouts)
    return tags_from_details(reminder.details)


def upsert_gym_sessions(
    store: ReminderStore,
    bydays: Sequence[DayCode],
    base_time: time,
    now: datetime,
    workouts: Sequence[str] = (),
) -> list[Reminder]:
    """Create or refresh the recurring Gym reminder for each weekday.

    Args:
        store: Reminder collection
        bydays: Weekday codes, or ``["DAILY"]`` for all seven
        base_time: Time of day for every session
        now: Reference instant; every session lands strictly after it
        workouts: Optional workout tags merged into each session

    Returns:
        The created or updated reminders, one per weekday
    """
    reminders = store.load()
    tags = merge_unique([], workouts)
    out = []

    for offset, day in enumerate(_expand_days(bydays)):
        when = next_weekday_occurrence(day, base_time, now)
        reminder = next((r for r in reminders if _matches(r, GYM_LABEL, day)), None)

        if reminder is None:
            reminder = Reminder(
                id=allocate_id(reminders, now, offset),
                label=GYM_LABEL,
                type=ReminderType.GYM,
                time=when,
                meta=RecurrenceMeta(byday=day, rrule=build_rrule(day, when)),
            )
            _set_workouts(reminder, tags)
            reminders.append(reminder)
            logger.info(f"Created recurring Gym session {reminder.id} on {day.value}")
        else:
            reminder.time = when
            if tags:
                _set_workouts(reminder, merge_unique(_current_workouts(reminder), tags))
            reminder.meta = RecurrenceMeta(byday=day, rrule=build_rrule(day, when))
            reminder.completed = False
            logger.info(f"Updated recurring Gym session {reminder.id} on {day.value}")
        out.append(reminder)

    store.replace(reminders)
    return out


def replace_workouts_for_day(
    store: ReminderStore, label: str, byday: Weekday, workouts: Sequence[str]
) -> list[Reminder]:
    reminders = store.load()
    changed = []
    for reminder in reminders:
        if _matches(reminder, label, byday):
            _set_workouts(reminder, merge_unique([], workouts))
            reminder.completed = False
            changed.append(reminder)
    store.replace(reminders)
    return changed


def add_workouts_to_day(
    store: ReminderStore, label: str, byday: Weekday, workouts: Sequence[str]
) -> list[Reminder]:
    reminders = store.load()
    changed = []
    for reminder in reminders:
        if _matches(reminder, label, byday):
            _set_workouts(reminder, merge_unique(_current_workouts(reminder), workouts))
            reminder.completed = False
            changed.append(reminder)
    store.replace(reminders)
    return changed


def remove_workouts_from_day(
    store: ReminderStore, label: str, byday: Weekday, workouts: Sequence[str]
) -> list[Reminder]:
    """Drop tags case-insensitively; completion state is left as is."""
    drop = {w.strip().lower() for w in workouts}
    reminders = store.load()
    changed = []
    for reminder in reminders:
        if _matches(reminder, label, byday):
            _set_workouts(reminder, [w for w in _current_workouts(reminder) if w.lower() not in drop])
            changed.append(reminder)
    store.replace(reminders)
    return changed


def change_time_for_day(
    store: ReminderStore, label: str, byday: Weekday, new_time: time, now: datetime
) -> list[Reminder]:
    """Move the sessions for one weekday to a new time of day."""
    reminders = store.load()
    changed = []
    for reminder in reminders:
        if _matches(reminder, label, byday):
            when = next_weekday_occurrence(byday, new_time, now)
            reminder.time = when
            reminder.completed = False
            reminder.meta = RecurrenceMeta(byday=byday, rrule=build_rrule(byday, when))
            changed.append(reminder)
    store.replace(reminders)
    return changed


def remove_gym_day(store: ReminderStore, byday: Weekday) -> list[Reminder]:
    """Remove every recurring Gym reminder tagged with ``byday``."""
    reminders = store.load()
    removed = [r for r in reminders if _matches(r, GYM_LABEL, byday)]
    store.replace([r for r in reminders if not _matches(r, GYM_LABEL, byday)])
    if removed:
        logger.info(f"Removed {len(removed)} Gym session(s) on {byday.value}")
    return removed


def skip_gym_once(store: ReminderStore, now: datetime, when: str = "today") -> list[Reminder]:
    """Mark only the next Gym instance (today or tomorrow) complete.

    Future recurrences are untouched.
    """
    target = now + timedelta(days=1) if when == "tomorrow" else now
    target_day = Weekday.of(target)
    reminders = store.load()
    changed = []
    for reminder in reminders:
        if not _matches(reminder, GYM_LABEL, target_day):
            continue
        if reminder.time is not None and reminder.time.date() == target.date():
            reminder.completed = True
            changed.append(reminder)
    store.replace(reminders)
    return changed
