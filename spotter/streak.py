"""Gym streak calculation over completed reminders."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from .models import Reminder


def compute_gym_streak(reminders: Iterable[Reminder], now: datetime) -> int:
    """Count consecutive days with a completed gym reminder.

    The streak ends at today or yesterday; if the most recent completed gym
    day is older than that, the streak has lapsed and is 0.
    """
    days = sorted(
        {
            reminder.time.date()
            for reminder in reminders
            if reminder.completed
            and reminder.time is not None
            and "gym" in reminder.label.lower()
        },
        reverse=True,
    )
    if not days:
        return 0

    if (now.date() - days[0]).days > 1:
        return 0

    streak = 1
    for newer, older in zip(days, days[1:]):
        if newer - older != timedelta(days=1):
            break
        streak += 1
    return streak
