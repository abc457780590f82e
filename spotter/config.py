"""Configuration management for Spotter"""

import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import pytz
from dotenv import load_dotenv

from .state_paths import resolve_profile_path, resolve_reminders_path, resolve_state_dir


@dataclass
class Config:
    """Configuration for the command interpreter"""

    # Storage
    state_dir: Path
    reminders_path: Path
    profile_path: Path
    timezone: str

    # Command behaviour
    dedup_seconds: int
    speak_confirmations: bool

    # Logging
    log_dir: Path
    log_level: str

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Config":
        """Load configuration from environment variables (and .env if present)"""
        load_dotenv(dotenv_path=env_file)

        def parse_bool(value: Optional[str], default: bool) -> bool:
            if value is None:
                return default
            normalized = value.strip().lower()
            if normalized in {"1", "true", "yes", "on"}:
                return True
            if normalized in {"0", "false", "no", "off"}:
                return False
            return default

        state_dir = resolve_state_dir()
        timezone = os.getenv("SPOTTER_TIMEZONE") or os.getenv("TZ") or "America/Chicago"
        dedup_seconds = int(os.getenv("SPOTTER_DEDUP_SECONDS", "60"))
        speak_confirmations = parse_bool(os.getenv("SPOTTER_SPEAK"), False)

        log_dir = Path(os.getenv("LOG_DIR", state_dir / "logs")).expanduser()
        log_level = os.getenv("LOG_LEVEL", "INFO")

        return cls(
            state_dir=state_dir,
            reminders_path=resolve_reminders_path(state_dir),
            profile_path=resolve_profile_path(state_dir),
            timezone=timezone,
            dedup_seconds=dedup_seconds,
            speak_confirmations=speak_confirmations,
            log_dir=log_dir,
            log_level=log_level,
        )

    @property
    def dedup_window(self) -> timedelta:
        return timedelta(seconds=self.dedup_seconds)

    def now(self) -> datetime:
        """Naive wall-clock time in ``timezone``, comparable with stored reminder times."""
        return datetime.now(pytz.timezone(self.timezone)).replace(tzinfo=None)

    def validate(self) -> None:
        """Validate configuration"""
        if self.timezone not in pytz.all_timezones_set:
            raise ValueError(f"Unknown SPOTTER_TIMEZONE: {self.timezone}")

        if self.dedup_seconds < 0:
            raise ValueError(f"SPOTTER_DEDUP_SECONDS must be >= 0, got {self.dedup_seconds}")
