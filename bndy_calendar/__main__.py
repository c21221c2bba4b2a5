"""Command-line entry for bndy_calendar.

Works on local files so calendars can be checked without the web app:

  python -m bndy_calendar expand events.json --start 2025-12-01 --end 2025-12-31
  python -m bndy_calendar export events.json --artist-name "The Reds"
  python -m bndy_calendar import calendar.ics
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter

from .calendar_logging import configure_logging
from .calendar_models import Event, ExportOptions
from .config_loader import load_config
from .exceptions import CalendarError
from .ical_export import IcalSerializer, calendar_file_name, export_artist_calendar
from .ical_import import IcalParser
from .recurrence import expand_event

logger = logging.getLogger(__name__)

_EVENT_LIST = TypeAdapter(list[Event])


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the bndy_calendar CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="bndy-calendar",
        description="bndy calendar tools - expand recurring events, export and import iCal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", metavar="PATH", help="Config file (default: BNDY_CALENDAR_CONFIG)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    expand_cmd = commands.add_parser("expand", help="List event occurrences inside a date window")
    expand_cmd.add_argument("events", type=Path, help="JSON file with a list of events")
    expand_cmd.add_argument("--start", type=date.fromisoformat, required=True, metavar="YYYY-MM-DD")
    expand_cmd.add_argument("--end", type=date.fromisoformat, required=True, metavar="YYYY-MM-DD")

    export_cmd = commands.add_parser("export", help="Export events to an .ics file")
    export_cmd.add_argument("events", type=Path, help="JSON file with a list of events")
    export_cmd.add_argument("--artist-name", required=True, help="Artist name for organizer and description")
    export_cmd.add_argument("--description", help="Calendar description")
    export_cmd.add_argument("--include-private", action="store_true", help="Include non-public events")
    export_cmd.add_argument("--membership-id", help="Only export this membership's events")
    export_cmd.add_argument("--output", type=Path, help="Output file (default: generated file name)")

    import_cmd = commands.add_parser("import", help="Print the events of an .ics file as JSON")
    import_cmd.add_argument("calendar", type=Path, help="iCalendar file")

    return parser


def _load_events(path: Path) -> list[Event]:
    return _EVENT_LIST.validate_json(path.read_bytes())


def _run_expand(args: argparse.Namespace) -> int:
    occurrences = [
        occurrence.model_dump(mode="json", exclude={"event"})
        | {"title": occurrence.event.display_title}
        for event in _load_events(args.events)
        for occurrence in expand_event(event, args.start, args.end)
    ]
    occurrences.sort(key=lambda o: o["occurrence_date"])
    print(json.dumps(occurrences, indent=2))
    return 0


def _run_export(args: argparse.Namespace) -> int:
    options = ExportOptions(
        artist_name=args.artist_name,
        artist_description=args.description,
        include_private_events=args.include_private,
        membership_id=args.membership_id,
    )
    text = export_artist_calendar(_load_events(args.events), options, IcalSerializer(args.settings))
    output = args.output or Path(calendar_file_name(args.artist_name))
    output.write_text(text, encoding="utf-8")
    logger.info("Wrote %s", output)
    print(output)
    return 0


def _run_import(args: argparse.Namespace) -> int:
    events = IcalParser().parse(args.calendar.read_text(encoding="utf-8-sig"))
    print(json.dumps([e.model_dump(mode="json") for e in events], indent=2))
    return 0


_COMMANDS = {
    "expand": _run_expand,
    "export": _run_export,
    "import": _run_import,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Run the bndy_calendar CLI.

    Returns:
        Process exit status: 0 on success, 1 on calendar or input errors
    """
    parser = _create_parser()
    args = parser.parse_args(argv)

    configure_logging(debug_mode=args.debug)

    try:
        args.settings = load_config(args.config)
        return _COMMANDS[args.command](args)
    except (CalendarError, ValueError, OSError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
