"""Clock-time parsing for reminder commands.

Two steps are kept separate: ``extract_time_token`` finds a candidate token in
a whole utterance, ``parse_time_of_day`` turns an isolated token into a
``datetime.time``.
"""

from __future__ import annotations

import re
from datetime import time
from typing import Optional

from .errors import InvalidTime

_NAMED_TIMES = {
    "noon": time(12, 0),
    "midnight": time(0, 0),
}

_TIME_24H = re.compile(r"^([01]?\d|2[0-3])(?::([0-5]\d))?$")
_TIME_12H = re.compile(r"^(\d{1,2})(?::([0-5]\d))?\s*(am|pm)$")
_BARE_HOUR = re.compile(r"^\d{1,2}$")

# Extraction priority: qualified times beat bare clock times, which beat a
# lone number. The first rule that matches anywhere wins.
_EXTRACT_PATTERNS = [
    (re.compile(r"\b(\d{1,2}:\d{2}\s*(?:am|pm))\b"), 1),
    (re.compile(r"\b(\d{1,2}\s*(?:am|pm))\b"), 1),
    (re.compile(r"\b(?:[01]?\d|2[0-3]):[0-5]\d\b"), 0),
    (re.compile(r"\bnoon\b"), 0),
    (re.compile(r"\bmidnight\b"), 0),
    # Heuristic: a quantity like "3 sets" reads as 3 o'clock when no
    # better time expression exists.
    (re.compile(r"\b(\d{1,2})\b"), 1),
]


def parse_time_of_day(token: str) -> time:
    """Parse an isolated time token.

    Args:
        token: e.g. "noon", "18:30", "7", "7:15 pm"

    Returns:
        The time of day with seconds set to zero

    Raises:
        InvalidTime: if the token is not a recognized clock time
    """
    value = str(token or "").strip().lower()

    if value in _NAMED_TIMES:
        return _NAMED_TIMES[value]

    match = _TIME_24H.match(value)
    if match:
        return time(int(match.group(1)), int(match.group(2) or 0))

    match = _TIME_12H.match(value)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if not 1 <= hour <= 12:
            raise InvalidTime()
        if match.group(3) == "pm" and hour < 12:
            hour += 12
        elif match.group(3) == "am" and hour == 12:
            hour = 0
        return time(hour, minute)

    if _BARE_HOUR.match(value):
        hour = int(value)
        if 0 <= hour <= 23:
            return time(hour, 0)

    raise InvalidTime()


def extract_time_token(text: str) -> Optional[str]:
    """Return the highest-priority time token in ``text``, or None."""
    lower = text.lower()
    for pattern, group in _EXTRACT_PATTERNS:
        match = pattern.search(lower)
        if match:
            return match.group(group)
    return None


def find_time_of_day(text: str) -> Optional[time]:
    """Extract and parse in one go; an unparseable token counts as no time."""
    token = extract_time_token(text)
    if token is None:
        return None
    try:
        return parse_time_of_day(token)
    except InvalidTime:
        return None
