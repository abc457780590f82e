"""User profile flags stored as YAML."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class ProfileStore:
    """Small YAML-backed profile; only ``notifications_muted`` is used by commands."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def get(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            return {}
        return data

    def save(self, profile: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(profile, handle, sort_keys=False)

    def set_notifications_muted(self, muted: bool) -> dict[str, Any]:
        profile = self.get()
        profile["notifications_muted"] = muted
        self.save(profile)
        logger.info(f"Notifications {'muted' if muted else 'unmuted'}")
        return profile

    @property
    def notifications_muted(self) -> bool:
        return bool(self.get().get("notifications_muted", False))
