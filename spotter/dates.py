"""Weekday and calendar-date resolution.

All functions take the reference instant ``now`` explicitly and work on naive
local wall-clock datetimes, so results are reproducible in tests.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Optional

from .models import WEEKDAY_NAMES, Weekday

_DAY_ALIASES = [
    (re.compile(r"\bmon(day)?\b"), "monday"),
    (re.compile(r"\btue(s|sday)?\b"), "tuesday"),
    (re.compile(r"\bwed(nesday)?\b"), "wednesday"),
    (re.compile(r"\bthu(r|rs|rsday|rsd)?\b"), "thursday"),
    (re.compile(r"\bfri(day)?\b"), "friday"),
    (re.compile(r"\bsat(urday)?\b"), "saturday"),
    (re.compile(r"\bsun(day)?\b"), "sunday"),
]

_DAY_NAME = r"(sunday|monday|tuesday|wednesday|thursday|friday|saturday)"
_RANGE_RE = re.compile(
    rf"\b{_DAY_NAME}\b\s*(?:-|to|through|till|until)\s*\b{_DAY_NAME}\b"
)
_NEXT_WEEKDAY_RE = re.compile(rf"\bnext\s+{_DAY_NAME}\b")
_ISO_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")
_ISO_DATE_EXACT_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

WEEKDAYS = [Weekday.MO, Weekday.TU, Weekday.WE, Weekday.TH, Weekday.FR]
WEEKEND = [Weekday.SA, Weekday.SU]
EVERY_DAY = list(Weekday)


def normalize_day_tokens(text: str) -> str:
    """Lowercase ``text`` and expand weekday abbreviations to full names."""
    normalized = text.lower()
    for pattern, full in _DAY_ALIASES:
        normalized = pattern.sub(full, normalized)
    return normalized


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max)


def is_on_day(moment: Optional[datetime], day: datetime) -> bool:
    """True if ``moment`` falls within the calendar day of ``day``."""
    if moment is None:
        return False
    return start_of_day(day) <= moment <= end_of_day(day)


def next_weekday_occurrence(day: Weekday, at: time, now: datetime) -> datetime:
    """Next datetime on ``day`` at ``at`` strictly after ``now``.

    When today is ``day`` and ``at`` is at or before the current time, the
    result is one week out.
    """
    delta = (day.index - Weekday.of(now).index) % 7
    candidate = datetime.combine(now.date() + timedelta(days=delta), at.replace(second=0, microsecond=0))
    if candidate <= now:
        candidate += timedelta(days=7)
    return candidate


def parse_iso_date(text: str) -> Optional[date]:
    """Parse ``YYYY-MM-DD``; impossible calendar dates return None."""
    match = _ISO_DATE_EXACT_RE.match(str(text).strip())
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def find_iso_date(text: str) -> Optional[date]:
    """First ISO date token in ``text`` that is a real calendar date."""
    match = _ISO_DATE_RE.search(text)
    if not match:
        return None
    return parse_iso_date(match.group(1))


def parse_next_weekday(text: str) -> Optional[Weekday]:
    """Weekday named in a "next <weekday>" phrase."""
    match = _NEXT_WEEKDAY_RE.search(normalize_day_tokens(text))
    if not match:
        return None
    return Weekday.from_name(match.group(1))


def find_weekday(text: str) -> Optional[Weekday]:
    """First weekday (in Sunday..Saturday order) whose name appears in ``text``."""
    normalized = normalize_day_tokens(text)
    for name in WEEKDAY_NAMES:
        if name in normalized:
            return Weekday.from_name(name)
    return None


def resolve_weekday_set(text: str) -> Optional[list[Weekday]]:
    """Map a phrase to the weekdays it mentions.

    Returns:
        Unique weekdays in a stable order, or None when the phrase carries no
        weekday signal at all.
    """
    normalized = normalize_day_tokens(text)

    if re.search(r"\bweekdays?\b", normalized):
        return list(WEEKDAYS)
    if re.search(r"\bweekend\b", normalized):
        return list(WEEKEND)
    if re.search(r"\bevery\s*day\b|\beveryday\b|\bdaily\b", normalized):
        return list(EVERY_DAY)

    match = _RANGE_RE.search(normalized)
    if match:
        start = Weekday.from_name(match.group(1))
        end = Weekday.from_name(match.group(2))
        days = [start]
        index = start.index
        while index != end.index:
            index = (index + 1) % 7
            days.append(Weekday.from_index(index))
        return days

    found = [Weekday.from_name(name) for name in WEEKDAY_NAMES if name in normalized]
    return found or None


def resolve_base_date(text: str, at: time, now: datetime) -> datetime:
    """Resolve the date an utterance refers to and combine it with ``at``.

    Priority: ISO date, "next <weekday>", a bare weekday, "tomorrow", today.
    Without any day signal, a time of day that already passed rolls over to
    tomorrow.
    """
    at = at.replace(second=0, microsecond=0)
    lower = text.lower()

    iso_date = find_iso_date(lower)
    if iso_date is not None:
        return datetime.combine(iso_date, at)

    weekday = parse_next_weekday(lower) or find_weekday(lower)
    if weekday is not None:
        return next_weekday_occurrence(weekday, at, now)

    if re.search(r"\btomorrow\b", lower):
        return datetime.combine(now.date() + timedelta(days=1), at)

    if (now.hour, now.minute) > (at.hour, at.minute):
        return datetime.combine(now.date() + timedelta(days=1), at)
    return datetime.combine(now.date(), at)
