"""Tests for reminder creation through the command processor."""

from datetime import datetime

from spotter.intent_parser import IntentType
from spotter.models import ReminderType


def test_create_supplement_later_today(processor, store):
    result = processor.process("remind me to take creatine at 8pm")

    assert result.ok
    assert result.intent == IntentType.CREATE
    assert result.message == "Added 1 reminder(s)."
    reminders = store.load()
    assert len(reminders) == 1
    assert reminders[0].label == "Creatine"
    assert reminders[0].type == ReminderType.SUPPLEMENT
    assert reminders[0].time == datetime(2026, 1, 19, 20, 0)
    assert result.created_ids == [reminders[0].id]


def test_create_rolls_past_time_to_tomorrow(processor, store):
    processor.process("remind me to take creatine at 9am")
    assert store.load()[0].time == datetime(2026, 1, 20, 9, 0)


def test_duplicate_within_window_is_rejected(processor, store):
    first = processor.process("gym at 6am")
    second = processor.process("gym at 6am")

    assert first.message == "Added 1 reminder(s)."
    assert second.message == "Reminder already exists at that time."
    assert second.created_ids == []
    assert len(store.load()) == 1


def test_duplicate_check_uses_time_window(processor, store, make_reminder):
    store.replace([make_reminder("Gym", datetime(2026, 1, 20, 6, 0, 30), ReminderType.GYM)])
    result = processor.process("gym at 6am")
    assert result.message == "Reminder already exists at that time."


def test_same_time_different_label_is_not_duplicate(processor, store, make_reminder):
    store.replace([make_reminder("Protein", datetime(2026, 1, 20, 6, 0), ReminderType.SUPPLEMENT)])
    processor.process("gym at 6am")
    assert sorted(r.label for r in store.load()) == ["Gym", "Protein"]


def test_weekday_set_creates_one_per_day(processor, store):
    result = processor.process("gym every weekday at 6am")

    assert result.message == "Added 5 reminder(s)."
    times = sorted(r.time for r in store.load())
    assert times == [
        datetime(2026, 1, 20, 6, 0),
        datetime(2026, 1, 21, 6, 0),
        datetime(2026, 1, 22, 6, 0),
        datetime(2026, 1, 23, 6, 0),
        datetime(2026, 1, 26, 6, 0),  # Monday 6am already passed
    ]
    ids = [r.id for r in store.load()]
    assert len(set(ids)) == 5
    assert all(r.label == "Gym" for r in store.load())


def test_weekday_set_skips_existing_duplicate(processor, store, make_reminder):
    store.replace([make_reminder("Gym", datetime(2026, 1, 21, 6, 0), ReminderType.GYM)])
    result = processor.process("gym every weekday at 6am")
    assert result.message == "Added 4 reminder(s)."
    assert len(store.load()) == 5


def test_next_weekday(processor, store):
    processor.process("gym next friday at 7am")
    assert store.load()[0].time == datetime(2026, 1, 23, 7, 0)


def test_iso_date_and_generic_title(processor, store):
    processor.process("dentist on 2026-02-03 at 3pm")
    reminder = store.load()[0]
    assert reminder.label == "Dentist"
    assert reminder.type == ReminderType.GENERIC
    assert reminder.time == datetime(2026, 2, 3, 15, 0)


def test_with_clause_becomes_details(processor, store):
    processor.process("remind me to take protein at 9pm with water")
    reminder = store.load()[0]
    assert reminder.label == "Protein"
    assert reminder.details == "water"


def test_for_clause_outranks_with_clause(processor, store):
    processor.process("schedule gym at 6pm for an hour with sam")
    reminder = store.load()[0]
    assert reminder.label == "Gym"
    assert reminder.details == "an hour with sam"


def test_missing_time(processor, store):
    result = processor.process("remind me to stretch")
    assert not result.ok
    assert result.message == "Please specify a time."
    assert store.load() == []


def test_invalid_time(processor, store):
    result = processor.process("remind me to stretch at 13pm")
    assert not result.ok
    assert result.message == "Couldn't understand that time."
    assert store.load() == []


def test_presenter_is_notified(processor, presenter, store):
    result = processor.process("gym at 6pm")
    assert presenter.statuses == ["Added 1 reminder(s)."]
    assert presenter.highlighted == [result.created_ids]
    assert presenter.refreshes == 1
    assert presenter.notification_syncs == [(result.created_ids, [])]
