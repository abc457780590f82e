"""Shared helpers for resolving Spotter state paths.

All components (CLI, command processor hosts, log setup) resolve files through
here so they agree on one reminders file.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

DEFAULT_STATE_DIR = Path.home() / ".local" / "state" / "spotter"

REMINDERS_FILE = "reminders.json"
PROFILE_FILE = "profile.yaml"


def resolve_state_dir(base_dir: Optional[Path] = None) -> Path:
    """Resolve the Spotter base state directory.

    Expands both ~ and $VAR so values from systemd EnvironmentFile and shell
    scripts behave the same.
    """
    if base_dir is not None:
        return Path(os.path.expandvars(str(base_dir))).expanduser()
    env_dir = os.getenv("SPOTTER_STATE_DIR") or os.getenv("STATE_DIR")
    if env_dir:
        return Path(os.path.expandvars(env_dir)).expanduser()
    return DEFAULT_STATE_DIR


def resolve_reminders_path(base_dir: Optional[Path] = None) -> Path:
    """The one reminders file every component reads and writes."""
    return resolve_state_dir(base_dir) / REMINDERS_FILE


def resolve_profile_path(base_dir: Optional[Path] = None) -> Path:
    return resolve_state_dir(base_dir) / PROFILE_FILE
