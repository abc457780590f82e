"""Tests for environment-driven configuration and the CLI."""

import json
from datetime import datetime, timedelta

import pytest
import pytz

from spotter import cli
from spotter.config import Config
from spotter_logging import LOG_FILE

ENV_VARS = [
    "SPOTTER_STATE_DIR", "STATE_DIR", "SPOTTER_TIMEZONE", "TZ",
    "SPOTTER_DEDUP_SECONDS", "SPOTTER_SPEAK", "LOG_DIR", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # set first so values loaded from .env files are undone too
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("SPOTTER_STATE_DIR", str(tmp_path / "state"))
    return tmp_path


def test_defaults(clean_env):
    config = Config.from_env()

    assert config.state_dir == clean_env / "state"
    assert config.reminders_path == clean_env / "state" / "reminders.json"
    assert config.profile_path == clean_env / "state" / "profile.yaml"
    assert config.timezone == "America/Chicago"
    assert config.dedup_window == timedelta(seconds=60)
    assert config.speak_confirmations is False
    assert config.log_dir == clean_env / "state" / "logs"
    assert config.log_level == "INFO"
    config.validate()


def test_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("SPOTTER_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("SPOTTER_DEDUP_SECONDS", "120")
    monkeypatch.setenv("SPOTTER_SPEAK", "yes")

    config = Config.from_env()

    assert config.timezone == "Europe/Berlin"
    assert config.dedup_seconds == 120
    assert config.speak_confirmations is True


def test_now_is_naive_time_in_configured_zone(clean_env, monkeypatch):
    monkeypatch.setenv("SPOTTER_TIMEZONE", "Pacific/Kiritimati")
    config = Config.from_env()

    expected = datetime.now(pytz.timezone("Pacific/Kiritimati")).replace(tzinfo=None)
    now = config.now()

    assert now.tzinfo is None
    assert abs(now - expected) < timedelta(minutes=1)


def test_env_file(clean_env):
    env_file = clean_env / "spotter.env"
    env_file.write_text("SPOTTER_DEDUP_SECONDS=5\n")
    assert Config.from_env(env_file).dedup_seconds == 5


@pytest.mark.parametrize("name,value,match", [
    ("SPOTTER_TIMEZONE", "Mars/Olympus_Mons", "Unknown SPOTTER_TIMEZONE"),
    ("SPOTTER_DEDUP_SECONDS", "-1", "SPOTTER_DEDUP_SECONDS"),
])
def test_validate_rejects(clean_env, monkeypatch, name, value, match):
    monkeypatch.setenv(name, value)
    config = Config.from_env()
    with pytest.raises(ValueError, match=match):
        config.validate()


class TestCli:
    def test_say_and_list(self, clean_env, capsys):
        assert cli.main(["say", "gym", "tomorrow", "at", "7am"]) == 0
        assert "Added 1 reminder(s)." in capsys.readouterr().out

        records = json.loads((clean_env / "state" / "reminders.json").read_text())
        assert records[0]["label"] == "Gym"

        assert cli.main(["list"]) == 0
        assert "Gym" in capsys.readouterr().out
        assert (clean_env / "state" / "logs" / LOG_FILE).is_file()

    @pytest.mark.parametrize("zone", ["Pacific/Kiritimati", "Pacific/Pago_Pago"])
    def test_say_resolves_today_in_configured_zone(self, clean_env, monkeypatch, zone):
        monkeypatch.setenv("TZ", "UTC")
        monkeypatch.setenv("SPOTTER_TIMEZONE", zone)
        soon = datetime.now(pytz.timezone(zone)) + timedelta(minutes=90)

        assert cli.main(["say", "gym", "at", soon.strftime("%H:%M")]) == 0

        records = json.loads((clean_env / "state" / "reminders.json").read_text())
        stored = datetime.fromisoformat(records[0]["time"])
        # 90 minutes ahead in the configured zone, never pushed a day out
        assert stored.replace(tzinfo=None) == soon.replace(tzinfo=None, second=0, microsecond=0)

    def test_say_failure_exit_code(self, clean_env, capsys):
        assert cli.main(["say", "remind", "me", "to", "stretch"]) == 1
        assert "Please specify a time." in capsys.readouterr().out

    def test_gym_rejects_unknown_day(self, clean_env, capsys):
        assert cli.main(["gym", "--days", "MO,XX", "--at", "6am"]) == 1
        assert "unknown day code" in capsys.readouterr().err

    def test_gym_creates_sessions(self, clean_env, capsys):
        assert cli.main(["gym", "--days", "mo,we", "--at", "6:30am", "--workouts", "legs,core"]) == 0
        out = capsys.readouterr().out
        assert "Gym MO:" in out
        assert "Gym WE:" in out

        records = json.loads((clean_env / "state" / "reminders.json").read_text())
        assert {r["meta"]["byday"] for r in records} == {"MO", "WE"}
        assert all(r["details"] == "legs, core" for r in records)

        assert cli.main(["list"]) == 0
        assert "(every Monday) - legs, core" in capsys.readouterr().out

    def test_bad_config_exit_code(self, clean_env, monkeypatch, capsys):
        monkeypatch.setenv("SPOTTER_TIMEZONE", "Nowhere/Special")
        assert cli.main(["streak"]) == 1
        assert "Configuration error" in capsys.readouterr().err
