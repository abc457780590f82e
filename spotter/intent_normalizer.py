"""Title normalization for reminder commands.

Maps a free-text title fragment to a reminder category and a canonical
display label, so "hit legs", "Leg day" and "leg day session" all land on the
same label.
"""

import logging
import re
from dataclasses import dataclass

from .models import ReminderType

logger = logging.getLogger(__name__)

CREATE_RE = re.compile(
    r"\b(?:schedule a|schedule|remind me to|remind me|make a|create a|add a|add|"
    r"set a|set|book a|book|put|new)\b",
    re.IGNORECASE,
)
CHANGE_RE = re.compile(r"\b(change|update|reschedule|move|modify|edit)\b", re.IGNORECASE)
CANCEL_RE = re.compile(r"\b(cancel|cancle|delete|drop|remove|nix|get rid of)\b", re.IGNORECASE)

# Checked in order; the first keyword contained in the title wins.
WORKOUT_KEYWORDS = [
    "cardio", "run", "jog", "lift", "exercise",
    "push day", "pull day", "leg day", "legs",
    "chest", "back", "arms", "shoulders", "workout",
]
SUPPLEMENT_KEYWORDS = ["protein", "creatine", "pre workout", "pre-workout", "preworkout"]

_TRAILING_CLAUSE_RE = re.compile(r" at | on | for | with ")
_STOP_TITLES = {"my", "schedule", "reminder"}


@dataclass(frozen=True)
class TitleIntent:
    """Category and display label resolved from a title fragment."""
    type: ReminderType
    label: str


def normalize_title_intent(text: str) -> TitleIntent:
    """Classify a title fragment.

    Args:
        text: Title candidate in its original case

    Returns:
        TitleIntent with the reminder type and canonical label
    """
    lowered = re.sub(r"^to\s+", "", text.lower()).strip()

    for keyword in WORKOUT_KEYWORDS:
        if keyword in lowered:
            return TitleIntent(ReminderType.WORKOUT, keyword.title())

    if "gym" in lowered:
        return TitleIntent(ReminderType.GYM, "Gym")

    if any(keyword in lowered for keyword in SUPPLEMENT_KEYWORDS):
        if "protein" in lowered:
            return TitleIntent(ReminderType.SUPPLEMENT, "Protein")
        if "creatine" in lowered:
            return TitleIntent(ReminderType.SUPPLEMENT, "Creatine")
        return TitleIntent(ReminderType.SUPPLEMENT, "Pre-Workout")

    cleaned = CREATE_RE.sub("", text, count=1)
    cleaned = CHANGE_RE.sub("", cleaned, count=1)
    cleaned = _TRAILING_CLAUSE_RE.split(cleaned)[0].strip()

    if cleaned and cleaned.lower() not in _STOP_TITLES:
        return TitleIntent(ReminderType.GENERIC, cleaned[0].upper() + cleaned[1:])

    logger.debug("No usable title in %r, falling back to 'Reminder'", text)
    return TitleIntent(ReminderType.GENERIC, "Reminder")


def is_supplement_label(label: str) -> bool:
    lowered = label.lower()
    return any(keyword in lowered for keyword in SUPPLEMENT_KEYWORDS)
