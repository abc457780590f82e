"""Spotter - deterministic command interpreter for gym and supplement reminders"""

from .command_processor import CommandProcessor, CommandResult, process_command
from .models import Reminder, ReminderType, Weekday
from .store import InMemoryReminderStore, JsonReminderStore

__version__ = "0.1.0"

__all__ = [
    "CommandProcessor",
    "CommandResult",
    "InMemoryReminderStore",
    "JsonReminderStore",
    "Reminder",
    "ReminderType",
    "Weekday",
    "process_command",
]
