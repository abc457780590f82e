"""Recoverable command errors.

Every error carries the user-facing status text. The command processor turns
them into a failed ``CommandResult``; none of them escape to the host.
"""

from __future__ import annotations


class CommandError(Exception):
    """Base class for errors surfaced to the user as a status message."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingTime(CommandError):
    default_message = "Please specify a time."


class InvalidTime(CommandError):
    default_message = "Couldn't understand that time."


class NoTargetFound(CommandError):
    default_message = "Couldn't find a matching reminder."


class NotUnderstood(CommandError):
    default_message = "Sorry, I didn't understand that command."
