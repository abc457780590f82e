"""Intent classification for Spotter commands.

Classifies a raw utterance into exactly one intent using an ordered list of
rules. The order of ``INTENT_RULES`` is a contract: earlier rules always win,
so a phrase like "cancel gym today" never reaches the generic cancel rule and
"move gym to 7pm" is a change, never a create.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .intent_normalizer import CANCEL_RE, CHANGE_RE, CREATE_RE
from .time_parser import extract_time_token

logger = logging.getLogger(__name__)


class IntentType(Enum):
    """Supported command intents."""
    NAVIGATE = "navigate"
    MUTE = "mute"
    UNMUTE = "unmute"
    GYM_CHECK_IN = "gym_check_in"
    STREAK_QUERY = "streak_query"
    TODAY_QUERY = "today_query"
    SUPPLEMENT_QUERY = "supplement_query"
    CANCEL_TODAY = "cancel_today"
    CANCEL = "cancel"
    CHANGE = "change"
    CREATE = "create"
    UNKNOWN = "unknown"


class Page(Enum):
    """Pages the presentation layer can navigate to."""
    STATS = "stats-page"
    CALENDAR = "calendar-page"
    SETTINGS = "settings-page"
    TODAY = "today-page"


@dataclass
class IntentResult:
    """Result of classifying an utterance.

    Attributes:
        intent_type: The classified intent
        text: The original (trimmed) utterance
        lower: Lowercased utterance the rules were evaluated on
        payload: Intent-specific data (page, cancel label, ...)
    """
    intent_type: IntentType
    text: str
    lower: str
    payload: Dict[str, Any] = field(default_factory=dict)


NAVIGATION_PHRASES = {
    "open stats": Page.STATS,
    "show my progress": Page.STATS,
    "stats": Page.STATS,
    "open calendar": Page.CALENDAR,
    "show calendar": Page.CALENDAR,
    "calendar": Page.CALENDAR,
    "open settings": Page.SETTINGS,
    "settings": Page.SETTINGS,
    "open profile": Page.SETTINGS,
    "open today": Page.TODAY,
    "today": Page.TODAY,
    "go to today": Page.TODAY,
}

GYM_CHECK_IN_PHRASES = {
    "i went to the gym today",
    "i did gym today",
    "yes i went to gym",
    "mark gym done",
}

STREAK_PHRASES = {"what's my streak", "whats my streak", "what is my streak"}

TODAY_PHRASES = {"what are today's tasks", "what are todays tasks", "what do i have today"}

SUPPLEMENT_PHRASES = {"did i take supplements", "did i take my supplements"}

# Fast paths for cancelling today's reminders by label.
CANCEL_TODAY_PREFIXES = [
    ("cancel gym today", "gym"),
    ("cancle gym today", "gym"),
    ("cancel protein today", "protein"),
]


def _cancel_today_label(lower: str) -> Optional[str]:
    for prefix, label in CANCEL_TODAY_PREFIXES:
        if lower.startswith(prefix):
            return label
    return None


def _is_create(lower: str) -> bool:
    return bool(CREATE_RE.search(lower)) or extract_time_token(lower) is not None


IntentRule = tuple[IntentType, Callable[[str], bool]]

INTENT_RULES: list[IntentRule] = [
    (IntentType.NAVIGATE, lambda lower: lower in NAVIGATION_PHRASES),
    (IntentType.MUTE, lambda lower: lower == "mute notifications"),
    (IntentType.UNMUTE, lambda lower: lower == "unmute notifications"),
    (IntentType.GYM_CHECK_IN, lambda lower: lower in GYM_CHECK_IN_PHRASES),
    (IntentType.STREAK_QUERY, lambda lower: lower in STREAK_PHRASES),
    (IntentType.TODAY_QUERY, lambda lower: lower in TODAY_PHRASES),
    (IntentType.SUPPLEMENT_QUERY, lambda lower: lower in SUPPLEMENT_PHRASES),
    (IntentType.CANCEL_TODAY, lambda lower: _cancel_today_label(lower) is not None),
    (IntentType.CANCEL, lambda lower: bool(CANCEL_RE.search(lower))),
    (IntentType.CHANGE, lambda lower: bool(CHANGE_RE.search(lower))),
    (IntentType.CREATE, _is_create),
]


def classify_intent(text: str) -> IntentResult:
    """Classify an utterance into a single intent.

    Args:
        text: Raw utterance from the keyboard or a speech transcript

    Returns:
        IntentResult; ``IntentType.UNKNOWN`` when no rule matches
    """
    text = (text or "").strip()
    lower = text.lower()

    for intent_type, predicate in INTENT_RULES:
        if predicate(lower):
            payload: Dict[str, Any] = {}
            if intent_type is IntentType.NAVIGATE:
                payload["page"] = NAVIGATION_PHRASES[lower]
            elif intent_type is IntentType.CANCEL_TODAY:
                payload["label"] = _cancel_today_label(lower)
            logger.debug(f"Classified {lower!r} as {intent_type.value}")
            return IntentResult(intent_type, text, lower, payload)

    logger.debug(f"No intent rule matched {lower!r}")
    return IntentResult(IntentType.UNKNOWN, text, lower)
