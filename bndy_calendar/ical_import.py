"""iCalendar import for bndy calendars."""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from icalendar import Calendar, Event as ICalEvent

from .calendar_models import ParsedEvent
from .exceptions import IcalParseError

logger = logging.getLogger(__name__)


def _as_datetime(value: Any) -> datetime:
    """Date-only values become midnight; date-times pass through (floating stays naive)."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    raise IcalParseError(f"Unsupported date value: {value!r}")


def _optional_text(component: ICalEvent, name: str) -> Optional[str]:
    value = component.get(name)
    return str(value) if value is not None else None


def _optional_datetime(component: ICalEvent, name: str) -> Optional[datetime]:
    if name not in component:
        return None
    return _as_datetime(component.decoded(name))


def _parse_vevent(component: ICalEvent) -> ParsedEvent:
    if "DTSTART" not in component:
        raise IcalParseError(f"VEVENT {component.get('UID')!r} has no DTSTART")

    raw_start = component.decoded("DTSTART")
    is_all_day = isinstance(raw_start, date) and not isinstance(raw_start, datetime)
    start = _as_datetime(raw_start)

    if "DTEND" in component:
        end = _as_datetime(component.decoded("DTEND"))
    elif "DURATION" in component:
        end = start + component.decoded("DURATION")
    else:
        # RFC 5545: a date start alone lasts one day, a date-time start is instantaneous
        end = start + timedelta(days=1) if is_all_day else start

    rrule = component.get("RRULE")
    rrule_text = rrule.to_ical().decode("utf-8") if rrule is not None else None

    return ParsedEvent(
        uid=_optional_text(component, "UID"),
        summary=_optional_text(component, "SUMMARY"),
        description=_optional_text(component, "DESCRIPTION"),
        location=_optional_text(component, "LOCATION"),
        start=start,
        end=end,
        is_all_day=is_all_day,
        rrule=rrule_text,
        created=_optional_datetime(component, "CREATED"),
        last_modified=_optional_datetime(component, "LAST-MODIFIED"),
    )


class IcalParser:
    """Parse iCalendar text into ParsedEvent records."""

    def parse(self, ical_text: str) -> list[ParsedEvent]:
        """Extract every VEVENT from a calendar.

        Recurrence rules are returned as raw RRULE text; expanding them is the
        caller's job.

        Args:
            ical_text: iCalendar document

        Returns:
            Parsed events in document order

        Raises:
            IcalParseError: If the text is not a well-formed VCALENDAR; no partial results
        """
        ical_text = (ical_text or "").lstrip("\ufeff")
        if not ical_text or not ical_text.strip():
            raise IcalParseError("Empty iCal content")
        if not ical_text.lstrip().upper().startswith("BEGIN:VCALENDAR"):
            raise IcalParseError("iCal content does not start with BEGIN:VCALENDAR")

        try:
            calendar = Calendar.from_ical(ical_text)
            events = [_parse_vevent(component) for component in calendar.walk("VEVENT")]
        except IcalParseError:
            logger.warning("Rejected malformed iCal content")
            raise
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.exception("Failed to parse iCal content")
            raise IcalParseError(f"Failed to parse iCal: {e}") from e

        logger.debug("Parsed %d events from iCal content", len(events))
        return events


def parse_ical_events(ical_text: str) -> list[ParsedEvent]:
    """Convenience wrapper around :meth:`IcalParser.parse`."""
    return IcalParser().parse(ical_text)
