"""Reminder collection persistence for Spotter.

The core only ever loads the full snapshot and replaces the full snapshot.
``JsonReminderStore`` persists to a JSON file with atomic replace;
``InMemoryReminderStore`` backs tests and embedding hosts.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Protocol

import pytz
from pydantic import ValidationError

from .models import Reminder

logger = logging.getLogger(__name__)


DEFAULT_TIMEZONE = "America/Chicago"


def to_local_naive(moment: Optional[datetime], tz) -> Optional[datetime]:
    """Convert an offset-aware instant to naive wall-clock time in ``tz``.

    Naive values are assumed to be local already and pass through.
    """
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(tz).replace(tzinfo=None)


class ReminderStore(Protocol):
    """Snapshot accessor/mutator for the reminder collection.

    ``load`` returns reminders whose times are naive local datetimes, the same
    clock the command processor's ``now`` runs on.
    """

    def load(self) -> list[Reminder]:
        ...

    def replace(self, reminders: Iterable[Reminder]) -> None:
        ...


class InMemoryReminderStore:
    """Reminder store kept in process memory.

    Offset-aware times handed in by a host are converted to naive time in
    ``timezone`` on the way in.
    """

    def __init__(
        self,
        reminders: Optional[Iterable[Reminder]] = None,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self.tz = pytz.timezone(timezone)
        self._reminders = self._copy(reminders or [])

    def load(self) -> list[Reminder]:
        return [r.model_copy(deep=True) for r in self._reminders]

    def replace(self, reminders: Iterable[Reminder]) -> None:
        self._reminders = self._copy(reminders)

    def _copy(self, reminders: Iterable[Reminder]) -> list[Reminder]:
        copies = []
        for reminder in reminders:
            clone = reminder.model_copy(deep=True)
            clone.time = to_local_naive(clone.time, self.tz)
            copies.append(clone)
        return copies


class JsonReminderStore:
    """JSON-file reminder storage.

    Times are naive local datetimes in memory. On disk they are ISO-8601
    instants carrying the UTC offset of ``timezone``.
    """

    def __init__(self, path: Path, timezone: str = DEFAULT_TIMEZONE):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.tz = pytz.timezone(timezone)
        self._lock = threading.Lock()

    def load(self) -> list[Reminder]:
        with self._lock:
            if not self.path.exists():
                return []
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            except json.JSONDecodeError as e:
                logger.error(f"Unreadable reminders file {self.path}: {e}")
                return []

        if not isinstance(raw, list):
            logger.error(f"Reminders file {self.path} does not hold a list")
            return []

        reminders = []
        for record in raw:
            try:
                reminder = Reminder.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping malformed reminder record {record!r}: {e}")
                continue
            if reminder.time is None and isinstance(record, dict) and record.get("time"):
                logger.warning(f"Reminder {reminder.id} has unparseable time {record['time']!r}")
            reminder.time = to_local_naive(reminder.time, self.tz)
            reminders.append(reminder)
        return reminders

    def replace(self, reminders: Iterable[Reminder]) -> None:
        payload = [self._serialize(r) for r in reminders]
        with self._lock:
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".reminders-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(payload, handle, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except OSError:
                logger.error(f"Failed to write reminders to {self.path}", exc_info=True)
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        logger.debug(f"Wrote {len(payload)} reminders to {self.path}")

    def _serialize(self, reminder: Reminder) -> dict:
        record = reminder.model_dump(mode="json", exclude_none=True)
        if reminder.time is not None:
            moment = reminder.time
            if moment.tzinfo is None:
                moment = self.tz.localize(moment)
            record["time"] = moment.isoformat()
        return record


def allocate_id(existing: Iterable[Reminder], now: datetime, offset: int = 0) -> int:
    """Id derived from the creation instant in ms, bumped past any collision."""
    taken = {r.id for r in existing}
    candidate = int(now.timestamp() * 1000) + offset
    while candidate in taken:
        candidate += 1
    return candidate


def toggle_complete(store: ReminderStore, reminder_id: int) -> Optional[Reminder]:
    """Flip the completed flag of one reminder."""
    reminders = store.load()
    for reminder in reminders:
        if reminder.id == reminder_id:
            reminder.completed = not reminder.completed
            store.replace(reminders)
            return reminder
    return None


def update_item(
    store: ReminderStore,
    reminder_id: int,
    label: Optional[str] = None,
    time: Optional[datetime] = None,
) -> Optional[Reminder]:
    """Update the label and/or time of one reminder."""
    reminders = store.load()
    for reminder in reminders:
        if reminder.id == reminder_id:
            if label:
                reminder.label = label
            if time is not None:
                reminder.time = time
            store.replace(reminders)
            return reminder
    return None


def delete_item(store: ReminderStore, reminder_id: int) -> bool:
    reminders = store.load()
    remaining = [r for r in reminders if r.id != reminder_id]
    if len(remaining) == len(reminders):
        return False
    store.replace(remaining)
    return True
