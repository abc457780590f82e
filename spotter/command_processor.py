"""Command processor for Spotter.

Turns one utterance into at most one mutation of the reminder collection:

- classify the utterance (``intent_parser.classify_intent``)
- route it to exactly one handler
- load the snapshot, mutate it in memory, replace it once
- report a status message plus the created/changed/removed ids

Handlers raise ``CommandError`` subclasses for user-facing failures; the
processor converts those into a failed ``CommandResult`` so a bad command
never takes the host down.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol

from .dates import (
    end_of_day,
    find_iso_date,
    is_on_day,
    next_weekday_occurrence,
    parse_next_weekday,
    resolve_base_date,
    resolve_weekday_set,
    start_of_day,
)
from .errors import CommandError, MissingTime, NoTargetFound, NotUnderstood
from .intent_normalizer import (
    CHANGE_RE,
    CREATE_RE,
    TitleIntent,
    is_supplement_label,
    normalize_title_intent,
)
from .intent_parser import IntentResult, IntentType, Page, classify_intent
from .models import Reminder, ReminderType, Weekday
from .profile import ProfileStore
from .store import ReminderStore, allocate_id
from .streak import compute_gym_streak
from .time_parser import extract_time_token, find_time_of_day, parse_time_of_day

logger = logging.getLogger(__name__)

DEFAULT_DEDUP_WINDOW = timedelta(seconds=60)
BROAD_WORKOUT_LABELS = {"workout", "exercise"}

_DATE_QUALIFIER_RE = re.compile(r"\btoday\b|\btomorrow\b|^\d{1,2}")
_FOR_CLAUSE_RE = re.compile(r"\bfor\s+(.*)$")
_WITH_CLAUSE_RE = re.compile(r"\bwith\s+(.*)$")
_TITLE_SPLITTERS = (" on ", " at ", " for ", " with ")


@dataclass
class CommandResult:
    """Outcome of one command."""

    ok: bool
    message: str
    intent: IntentType = IntentType.UNKNOWN
    created_ids: list[int] = field(default_factory=list)
    changed_ids: list[int] = field(default_factory=list)
    removed_ids: list[int] = field(default_factory=list)
    page: Optional[Page] = None

    @property
    def mutated(self) -> bool:
        return bool(self.created_ids or self.changed_ids or self.removed_ids)

    @property
    def affected_ids(self) -> list[int]:
        return [*self.created_ids, *self.changed_ids]


class Presenter(Protocol):
    """Outbound collaborator for everything the core does not own."""

    def show_status(self, message: str) -> None: ...

    def navigate(self, page: Page) -> None: ...

    def highlight(self, reminder_ids: list[int]) -> None: ...

    def refresh(self) -> None: ...

    def sync_notifications(self, scheduled_ids: list[int], removed_ids: list[int]) -> None: ...

    def speak(self, text: str) -> None: ...


class LoggingPresenter:
    """Presenter that only logs; used when the host supplies none."""

    def show_status(self, message: str) -> None:
        logger.info(f"[STATUS] {message}")

    def navigate(self, page: Page) -> None:
        logger.info(f"[NAVIGATE] {page.value}")

    def highlight(self, reminder_ids: list[int]) -> None:
        logger.debug(f"[HIGHLIGHT] {reminder_ids}")

    def refresh(self) -> None:
        logger.debug("[REFRESH]")

    def sync_notifications(self, scheduled_ids: list[int], removed_ids: list[int]) -> None:
        logger.debug(f"[NOTIFY] schedule={scheduled_ids} unschedule={removed_ids}")

    def speak(self, text: str) -> None:
        pass


def title_for_command(original: str, lower: str) -> str:
    """Title portion of a create command.

    Trailing " on/at/for/with" clauses describe day, time or details, so the
    title ends at the last of them.
    """
    split_idx = max(lower.rfind(splitter) for splitter in _TITLE_SPLITTERS)
    title = original[:split_idx] if split_idx != -1 else original
    title = CREATE_RE.sub("", title, count=1)
    title = CHANGE_RE.sub("", title, count=1).strip()
    return title or original


def extract_details(lower: str) -> Optional[str]:
    match = _FOR_CLAUSE_RE.search(lower) or _WITH_CLAUSE_RE.search(lower)
    return match.group(1) if match else None


def is_duplicate(reminders: list[Reminder], label: str, when: datetime, window: timedelta) -> bool:
    return any(
        r.label == label and r.time is not None and abs(r.time - when) < window
        for r in reminders
    )


class CommandProcessor:
    """Process free-text reminder commands."""

    def __init__(
        self,
        store: ReminderStore,
        profile: Optional[ProfileStore] = None,
        presenter: Optional[Presenter] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        dedup_window: timedelta = DEFAULT_DEDUP_WINDOW,
        speak_confirmations: bool = False,
    ):
        """Initialize command processor.

        Args:
            store: Reminder collection accessor/mutator
            profile: Profile flags store (needed for mute/unmute)
            presenter: Receives status, navigation and refresh requests
            now_fn: Clock returning naive local time (defaults to datetime.now)
            dedup_window: Same-label reminders closer than this are duplicates
            speak_confirmations: Ask the presenter to speak successful results
        """
        self.store = store
        self.profile = profile
        self.presenter = presenter or LoggingPresenter()
        self.now_fn = now_fn or datetime.now
        self.dedup_window = dedup_window
        self.speak_confirmations = speak_confirmations

        self._handlers: dict[IntentType, Callable[[IntentResult, datetime], CommandResult]] = {
            IntentType.NAVIGATE: self._handle_navigate,
            IntentType.MUTE: self._handle_mute,
            IntentType.UNMUTE: self._handle_mute,
            IntentType.GYM_CHECK_IN: self._handle_gym_check_in,
            IntentType.STREAK_QUERY: self._handle_streak_query,
            IntentType.TODAY_QUERY: self._handle_today_query,
            IntentType.SUPPLEMENT_QUERY: self._handle_supplement_query,
            IntentType.CANCEL_TODAY: self._handle_cancel_today,
            IntentType.CANCEL: self._handle_generic_cancel,
            IntentType.CHANGE: self._handle_change,
            IntentType.CREATE: self._handle_create,
        }

    def process(self, text: str) -> CommandResult:
        """Process one utterance and notify the presenter.

        Args:
            text: Raw utterance

        Returns:
            CommandResult describing what happened
        """
        intent = classify_intent(text)
        now = self.now_fn()

        try:
            handler = self._handlers.get(intent.intent_type)
            if handler is None:
                raise NotUnderstood()
            result = handler(intent, now)
        except CommandError as e:
            logger.info(f"Command {intent.lower!r} not applied: {e.message}")
            result = CommandResult(ok=False, message=e.message, intent=intent.intent_type)

        self._emit(result)
        return result

    def _emit(self, result: CommandResult) -> None:
        self.presenter.show_status(result.message)
        if result.page is not None:
            self.presenter.navigate(result.page)
        if result.mutated:
            self.presenter.refresh()
            self.presenter.sync_notifications(result.affected_ids, result.removed_ids)
            if result.affected_ids:
                self.presenter.highlight(result.affected_ids)
        if self.speak_confirmations and result.ok:
            try:
                self.presenter.speak(result.message)
            except Exception as e:
                logger.warning(f"Speech confirmation failed: {e}")

    # ----- navigation / profile -----

    def _handle_navigate(self, intent: IntentResult, now: datetime) -> CommandResult:
        page = intent.payload["page"]
        return CommandResult(ok=True, message=f"Opening {page.value}.", intent=intent.intent_type, page=page)

    def _handle_mute(self, intent: IntentResult, now: datetime) -> CommandResult:
        muted = intent.intent_type is IntentType.MUTE
        if self.profile is None:
            logger.warning("Mute requested but no profile store is configured")
            return CommandResult(ok=False, message="Profile storage is not available.", intent=intent.intent_type)
        self.profile.set_notifications_muted(muted)
        message = "Notifications muted." if muted else "Notifications unmuted."
        return CommandResult(ok=True, message=message, intent=intent.intent_type)

    # ----- queries -----

    def _handle_gym_check_in(self, intent: IntentResult, now: datetime) -> CommandResult:
        reminders = self.store.load()
        changed = []
        for reminder in reminders:
            if is_on_day(reminder.time, now) and "gym" in reminder.label.lower():
                reminder.completed = True
                changed.append(reminder.id)

        if not changed:
            return CommandResult(ok=True, message="I didn't find a gym reminder for today.", intent=intent.intent_type)

        self.store.replace(reminders)
        return CommandResult(
            ok=True,
            message="Nice! Gym marked as done 🔥",
            intent=intent.intent_type,
            changed_ids=changed,
        )

    def _handle_streak_query(self, intent: IntentResult, now: datetime) -> CommandResult:
        streak = compute_gym_streak(self.store.load(), now)
        if streak == 0:
            message = "You're at 0 today. Let's start!"
        else:
            message = f"You're on a {streak}-day streak 🔥"
        return CommandResult(ok=True, message=message, intent=intent.intent_type)

    def _handle_today_query(self, intent: IntentResult, now: datetime) -> CommandResult:
        today = [r for r in self.store.load() if is_on_day(r.time, now)]
        if not today:
            return CommandResult(ok=True, message="No reminders for today.", intent=intent.intent_type)
        names = ", ".join(r.label for r in today[:3])
        suffix = "…" if len(today) > 3 else ""
        return CommandResult(ok=True, message=f"Today: {names}{suffix}", intent=intent.intent_type)

    def _handle_supplement_query(self, intent: IntentResult, now: datetime) -> CommandResult:
        supplements = [
            r for r in self.store.load()
            if is_on_day(r.time, now)
            and (r.type is ReminderType.SUPPLEMENT or is_supplement_label(r.label))
        ]
        if not supplements:
            message = "No supplements scheduled today."
        else:
            remaining = sum(1 for r in supplements if not r.completed)
            if remaining == 0:
                message = "All supplements done ✅"
            else:
                message = f"You still have {remaining} supplement(s) to do."
        return CommandResult(ok=True, message=message, intent=intent.intent_type)

    # ----- cancel -----

    def _handle_cancel_today(self, intent: IntentResult, now: datetime) -> CommandResult:
        return self.cancel_today_by_label(intent.payload["label"], now)

    def cancel_today_by_label(self, label: str, now: datetime) -> CommandResult:
        """Remove today's reminders whose label contains ``label``."""
        fragment = label.lower()
        reminders = self.store.load()
        remaining, removed = [], []
        for reminder in reminders:
            if is_on_day(reminder.time, now) and fragment in reminder.label.lower():
                removed.append(reminder.id)
            else:
                remaining.append(reminder)

        if not removed:
            return CommandResult(ok=True, message=f"No {label} found for today.", intent=IntentType.CANCEL_TODAY)

        self.store.replace(remaining)
        logger.info(f"Canceled {len(removed)} '{label}' reminder(s) for today")
        return CommandResult(
            ok=True,
            message=f"Canceled {len(removed)} {label} for today.",
            intent=IntentType.CANCEL_TODAY,
            removed_ids=removed,
        )

    def _handle_generic_cancel(self, intent: IntentResult, now: datetime) -> CommandResult:
        return CommandResult(
            ok=False,
            message="Cancel command isn't fully built yet! Try: “cancel gym today”.",
            intent=intent.intent_type,
        )

    # ----- create -----

    def _handle_create(self, intent: IntentResult, now: datetime) -> CommandResult:
        original, lower = intent.text, intent.lower
        title = normalize_title_intent(title_for_command(original, lower))
        details = extract_details(lower)

        token = extract_time_token(lower)
        if token is None:
            raise MissingTime()
        at = parse_time_of_day(token)

        days = resolve_weekday_set(lower)
        if days:
            candidates = [next_weekday_occurrence(day, at, now) for day in days]
        else:
            candidates = [resolve_base_date(lower, at, now)]

        reminders = self.store.load()
        created: list[Reminder] = []
        for when in candidates:
            if is_duplicate(reminders, title.label, when, self.dedup_window):
                logger.debug(f"Skipping duplicate {title.label!r} at {when.isoformat()}")
                continue
            reminder = Reminder(
                id=allocate_id(reminders, now, len(created)),
                label=title.label,
                type=title.type,
                time=when,
                details=details,
            )
            reminders.append(reminder)
            created.append(reminder)

        if not created:
            return CommandResult(ok=True, message="Reminder already exists at that time.", intent=intent.intent_type)

        self.store.replace(reminders)
        logger.info(f"Created {len(created)} {title.label!r} reminder(s)")
        return CommandResult(
            ok=True,
            message=f"Added {len(created)} reminder(s).",
            intent=intent.intent_type,
            created_ids=[r.id for r in created],
        )

    # ----- change -----

    def _resolve_change_target(self, lower: str) -> TitleIntent:
        match = CHANGE_RE.search(lower)
        before = lower[:match.start()].strip()
        after = lower[match.end():].strip()
        first_words = " ".join(after.split(" ")[:2])

        context = first_words
        if (
            _DATE_QUALIFIER_RE.search(first_words)
            or resolve_weekday_set(first_words)
            or parse_next_weekday(first_words)
        ):
            context = before
        if not context:
            context = before
        return normalize_title_intent(context)

    def _change_candidates(
        self, target: TitleIntent, now: datetime
    ) -> tuple[list[Reminder], list[Reminder]]:
        """Full snapshot plus the incomplete, upcoming reminders matching ``target``."""
        reminders = self.store.load()
        day_start = start_of_day(now)
        broad = target.label.lower() in BROAD_WORKOUT_LABELS

        def matches(reminder: Reminder) -> bool:
            if reminder.completed or reminder.time is None or reminder.time < day_start:
                return False
            if broad:
                return reminder.type is ReminderType.WORKOUT
            return reminder.label.lower() == target.label.lower()

        candidates = sorted((r for r in reminders if matches(r)), key=lambda r: r.time)
        return reminders, candidates

    def _narrow_targets(self, lower: str, candidates: list[Reminder], now: datetime) -> list[Reminder]:
        days = resolve_weekday_set(lower)
        if days:
            wanted = set(days)
            seen: set[Weekday] = set()
            selected = []
            for reminder in candidates:
                day = Weekday.of(reminder.time)
                if day in wanted and day not in seen:
                    seen.add(day)
                    selected.append(reminder)
            return selected

        iso_date = find_iso_date(lower)
        if iso_date is not None:
            on_date = [r for r in candidates if r.time.date() == iso_date]
            return on_date[:1]

        has_tomorrow = re.search(r"\btomorrow\b", lower)
        if has_tomorrow or re.search(r"\btoday\b", lower):
            target_day = now + timedelta(days=1) if has_tomorrow else now
            in_day = [r for r in candidates if start_of_day(target_day) <= r.time <= end_of_day(target_day)]
            return in_day[:1]

        if len(candidates) > 1:
            logger.debug(f"{len(candidates)} candidates for change, taking the soonest")
        return candidates[:1]

    def _handle_change(self, intent: IntentResult, now: datetime) -> CommandResult:
        original, lower = intent.text, intent.lower

        new_time = find_time_of_day(lower)
        match = CHANGE_RE.search(lower)
        new_title = normalize_title_intent(original[match.end():].strip())
        target = self._resolve_change_target(lower)

        reminders, candidates = self._change_candidates(target, now)
        targets = self._narrow_targets(lower, candidates, now)
        if not targets:
            raise NoTargetFound(f"Couldn't find upcoming \"{target.label}\" to change.")

        changed = []
        for reminder in targets:
            touched = False
            if new_time is not None:
                reminder.time = reminder.time.replace(
                    hour=new_time.hour, minute=new_time.minute, second=0, microsecond=0
                )
                touched = True
            if new_title.type is not ReminderType.GENERIC and new_title.label != target.label:
                reminder.label = new_title.label
                reminder.type = new_title.type
                touched = True
            if touched:
                changed.append(reminder.id)

        if not changed:
            return CommandResult(ok=True, message="Didn't find anything specific to change.", intent=intent.intent_type)

        self.store.replace(reminders)
        logger.info(f"Changed {len(changed)} {target.label!r} reminder(s)")
        return CommandResult(
            ok=True,
            message=f"Updated {len(changed)} reminder(s).",
            intent=intent.intent_type,
            changed_ids=changed,
        )


def process_command(
    text: str,
    store: ReminderStore,
    profile: Optional[ProfileStore] = None,
    presenter: Optional[Presenter] = None,
    now: Optional[datetime] = None,
) -> CommandResult:
    """One-shot convenience wrapper around ``CommandProcessor.process``."""
    now_fn = (lambda: now) if now is not None else None
    return CommandProcessor(store, profile=profile, presenter=presenter, now_fn=now_fn).process(text)
