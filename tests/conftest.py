from __future__ import annotations

from datetime import datetime

import pytest

from spotter.command_processor import CommandProcessor
from spotter.intent_parser import Page
from spotter.models import Reminder, ReminderType
from spotter.profile import ProfileStore
from spotter.store import InMemoryReminderStore

# Monday, Jan 19, 2026 at 10:00 local time
FIXED_NOW = datetime(2026, 1, 19, 10, 0, 0)


class RecordingPresenter:
    """Presenter double that records every call."""

    def __init__(self):
        self.statuses: list[str] = []
        self.pages: list[Page] = []
        self.highlighted: list[list[int]] = []
        self.refreshes = 0
        self.notification_syncs: list[tuple[list[int], list[int]]] = []
        self.spoken: list[str] = []

    def show_status(self, message: str) -> None:
        self.statuses.append(message)

    def navigate(self, page: Page) -> None:
        self.pages.append(page)

    def highlight(self, reminder_ids: list[int]) -> None:
        self.highlighted.append(reminder_ids)

    def refresh(self) -> None:
        self.refreshes += 1

    def sync_notifications(self, scheduled_ids: list[int], removed_ids: list[int]) -> None:
        self.notification_syncs.append((scheduled_ids, removed_ids))

    def speak(self, text: str) -> None:
        self.spoken.append(text)


@pytest.fixture
def fixed_now():
    """Fixed datetime for deterministic date resolution."""
    return FIXED_NOW


@pytest.fixture
def store():
    return InMemoryReminderStore()


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def profile(tmp_path):
    return ProfileStore(tmp_path / "profile.yaml")


@pytest.fixture
def processor(store, profile, presenter, fixed_now):
    return CommandProcessor(store, profile=profile, presenter=presenter, now_fn=lambda: fixed_now)


@pytest.fixture
def make_reminder():
    """Factory for reminders with sequential ids."""
    counter = {"next": 1}

    def _make(label, time, type=ReminderType.GENERIC, completed=False, **kwargs):
        reminder = Reminder(
            id=kwargs.pop("id", counter["next"]),
            label=label,
            type=type,
            time=time,
            completed=completed,
            **kwargs,
        )
        counter["next"] += 1
        return reminder

    return _make
