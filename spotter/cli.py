"""CLI entrypoint for Spotter"""

import argparse
import logging
import sys

from spotter_logging import setup_logging

from .command_processor import CommandProcessor
from .config import Config
from .dates import is_on_day
from .errors import InvalidTime
from .intent_parser import Page
from .models import Weekday
from .profile import ProfileStore
from .recurrence import DAILY, upsert_gym_sessions
from .store import JsonReminderStore
from .streak import compute_gym_streak
from .time_parser import parse_time_of_day

logger = logging.getLogger(__name__)


class ConsolePresenter:
    """Print status lines; the terminal has no pages or notifications."""

    def show_status(self, message: str) -> None:
        print(message)

    def navigate(self, page: Page) -> None:
        logger.debug(f"Navigation to {page.value} ignored on the console")

    def highlight(self, reminder_ids: list[int]) -> None:
        print(f"  ids: {', '.join(str(i) for i in reminder_ids)}")

    def refresh(self) -> None:
        pass

    def sync_notifications(self, scheduled_ids: list[int], removed_ids: list[int]) -> None:
        pass

    def speak(self, text: str) -> None:
        pass


def cmd_say(args: argparse.Namespace, config: Config) -> int:
    """Run one utterance through the command processor."""
    processor = CommandProcessor(
        JsonReminderStore(config.reminders_path, timezone=config.timezone),
        profile=ProfileStore(config.profile_path),
        presenter=ConsolePresenter(),
        now_fn=config.now,
        dedup_window=config.dedup_window,
        speak_confirmations=config.speak_confirmations,
    )
    result = processor.process(" ".join(args.utterance))
    return 0 if result.ok else 1


def cmd_list(args: argparse.Namespace, config: Config) -> int:
    """Print reminders, soonest first."""
    store = JsonReminderStore(config.reminders_path, timezone=config.timezone)
    now = config.now()
    reminders = store.load()
    if args.today:
        reminders = [r for r in reminders if is_on_day(r.time, now)]
    reminders.sort(key=lambda r: (r.time is None, r.time or now))

    if not reminders:
        print("No reminders.")
        return 0

    for r in reminders:
        when = r.time.strftime("%a %Y-%m-%d %H:%M") if r.time else "??"
        status = "x" if r.completed else " "
        repeat = f" (every {r.meta.byday.full_name.title()})" if r.is_recurring else ""
        details = f" - {r.details}" if r.details else ""
        print(f"[{status}] {r.id}  {when}  {r.label}{repeat}{details}")
    return 0


def cmd_gym(args: argparse.Namespace, config: Config) -> int:
    """Create or refresh recurring gym sessions."""
    try:
        base_time = parse_time_of_day(args.at)
    except InvalidTime as e:
        print(f"Error: {e.message} ({args.at})", file=sys.stderr)
        return 1

    codes = [c.strip().upper() for c in args.days.split(",") if c.strip()]
    if codes != [DAILY] and any(c not in Weekday.__members__ for c in codes):
        print(f"Error: unknown day code in {args.days!r} (use SU,MO,TU,WE,TH,FR,SA or DAILY)", file=sys.stderr)
        return 1

    workouts = [w for w in (args.workouts or "").split(",") if w.strip()]
    store = JsonReminderStore(config.reminders_path, timezone=config.timezone)
    sessions = upsert_gym_sessions(store, codes, base_time, config.now(), workouts=workouts)
    for session in sessions:
        print(f"Gym {session.meta.byday.value}: {session.time:%Y-%m-%d %H:%M} (id {session.id})")
    return 0


def cmd_streak(args: argparse.Namespace, config: Config) -> int:
    store = JsonReminderStore(config.reminders_path, timezone=config.timezone)
    print(compute_gym_streak(store.load(), config.now()))
    return 0


def main(argv=None):
    """Main CLI entrypoint"""
    parser = argparse.ArgumentParser(
        description="Spotter - gym and supplement reminders from plain sentences",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  spotter say "remind me to take creatine at 8pm"
  spotter say "gym every weekday at 6am"
  spotter say "change leg day to 6pm"
  spotter list --today
  spotter gym --days MO,WE,FR --at 6:30am --workouts legs,core

Environment Variables:
  SPOTTER_STATE_DIR      State directory (default: ~/.local/state/spotter)
  SPOTTER_TIMEZONE       Time zone for stored instants (default: America/Chicago)
  SPOTTER_DEDUP_SECONDS  Duplicate window for new reminders (default: 60)
  SPOTTER_SPEAK          Request spoken confirmations (default: false)
  LOG_LEVEL              Logging level (default: INFO)
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose (DEBUG) logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    say = subparsers.add_parser("say", help="Run a command sentence")
    say.add_argument("utterance", nargs="+", help="The sentence, e.g. 'gym tomorrow at 7am'")
    say.set_defaults(func=cmd_say)

    list_parser = subparsers.add_parser("list", help="List reminders")
    list_parser.add_argument("--today", action="store_true", help="Only today's reminders")
    list_parser.set_defaults(func=cmd_list)

    gym = subparsers.add_parser("gym", help="Create or update recurring gym sessions")
    gym.add_argument("--days", required=True, help="Comma-separated day codes (MO,WE,FR) or DAILY")
    gym.add_argument("--at", required=True, help="Time of day, e.g. 6am or 18:30")
    gym.add_argument("--workouts", help="Comma-separated workout tags")
    gym.set_defaults(func=cmd_gym)

    streak = subparsers.add_parser("streak", help="Show the current gym streak")
    streak.set_defaults(func=cmd_streak)

    args = parser.parse_args(argv)

    try:
        config = Config.from_env()
        config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    log_level = "DEBUG" if args.verbose else config.log_level
    setup_logging(config.log_dir, log_level=log_level, verbose=args.verbose)

    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
