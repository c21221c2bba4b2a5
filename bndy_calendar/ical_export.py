"""iCalendar (RFC 5545) export for bndy calendars."""

import logging
import math
import re
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional

from icalendar import Calendar, Event as ICalEvent, vCalAddress, vRecur, vText

from .calendar_models import EVENT_CATEGORIES, Event, ExportOptions
from .config_loader import Config
from .exceptions import IcalExportError, InvalidRuleError
from .recurrence import rule_to_rrule, validate_rule

logger = logging.getLogger(__name__)

ATTRIBUTION_FOOTER = ("Powered by bndy - Band Calendar Management", "https://bndy.app")


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def filter_for_export(events: Iterable[Event], options: ExportOptions) -> list[Event]:
    """Apply export options before serialization.

    Non-public events are dropped unless ``include_private_events`` is set. With
    ``membership_id`` only that member's own events are kept, which excludes
    artist-wide events.
    """
    selected = list(events)
    if not options.include_private_events:
        selected = [e for e in selected if e.is_public]
    if options.membership_id:
        selected = [e for e in selected if e.membership_id == options.membership_id]
    return selected


def build_description(event: Event, options: ExportOptions) -> str:
    """Compose the multi-line DESCRIPTION for an exported event."""
    parts = [f"Event Type: {event.type_label}"]
    if event.notes:
        parts.append(f"Notes: {event.notes}")
    parts.append(f"Artist: {options.artist_name}")
    parts.append("Public Event" if event.is_public else "Private Event")
    parts.append("")
    parts.extend(ATTRIBUTION_FOOTER)
    return "\n".join(parts)


def calendar_file_name(artist_name: str, suffix: Optional[str] = None, today: Optional[date] = None) -> str:
    """Download file name: ``<sanitized-artist-name>-calendar-<iso-date>[-suffix].ics``."""
    sanitized = re.sub(r"[^a-z0-9]", "-", artist_name.lower())
    day = today or _now_utc().date()
    parts = [sanitized, "calendar", day.isoformat()]
    if suffix:
        parts.append(suffix)
    return "-".join(parts) + ".ics"


class IcalSerializer:
    """Serialize bndy events to iCalendar text."""

    def __init__(
        self,
        config: Optional[Config] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize serializer.

        Args:
            config: Export settings (UID domain, organizer, durations); defaults if None
            clock: Source of the DTSTAMP time, UTC-aware
        """
        self.config = config or Config()
        self._clock = clock or _now_utc

    def uid_for(self, event: Event) -> str:
        """Stable UID so calendar clients update rather than duplicate events."""
        return f"bndy-{event.id}@{self.config.uid_domain}"

    def all_day_duration(self, event: Event) -> timedelta:
        """Whole days between start and (exclusive) end date, at least one."""
        end = event.end_date or (event.date + timedelta(days=1))
        days = math.ceil((end - event.date) / timedelta(days=1))
        return timedelta(days=max(1, days))

    def timed_span(self, event: Event) -> tuple[datetime, timedelta]:
        """Start date-time and duration in minutes for a timed event.

        Events without an end time get the default duration; the minimum
        duration is applied afterwards.
        """
        start = datetime.combine(event.date, event.start_time or time(0, 0))
        if event.end_time is not None:
            end = datetime.combine(event.end_date or event.date, event.end_time)
        else:
            end = start + timedelta(minutes=self.config.default_event_minutes)
        minutes = math.floor((end - start) / timedelta(minutes=1))
        return start, timedelta(minutes=max(self.config.minimum_event_minutes, minutes))

    def _build_component(self, event: Event, options: ExportOptions, stamp: datetime) -> ICalEvent:
        component = ICalEvent()
        component.add("uid", self.uid_for(event))
        component.add("dtstamp", stamp)
        component.add("summary", event.display_title)
        component.add("description", build_description(event, options))

        if event.is_all_day:
            component.add("dtstart", event.date)
            component.add("duration", self.all_day_duration(event))
        else:
            start, duration = self.timed_span(event)
            component.add("dtstart", start)
            component.add("duration", duration)

        location = event.venue or event.location
        if location:
            component.add("location", location)

        component.add("categories", [EVENT_CATEGORIES[event.type]])

        organizer = vCalAddress(f"mailto:{self.config.organizer_email}")
        organizer.params["cn"] = vText(options.artist_name)
        component["organizer"] = organizer

        if event.recurring is not None:
            validate_rule(event.recurring)
            rrule_value = rule_to_rrule(event.recurring, timed=not event.is_all_day)
            component.add("rrule", vRecur.from_ical(rrule_value))

        return component

    def serialize(self, events: Iterable[Event], options: ExportOptions) -> str:
        """Serialize events into a VCALENDAR document.

        Args:
            events: Events to export, already filtered
            options: Export options (artist name and description)

        Returns:
            iCalendar text

        Raises:
            IcalExportError: If any event cannot be serialized; no partial output is returned
        """
        event_list = list(events)
        stamp = self._clock()

        try:
            calendar = Calendar()
            calendar.add("prodid", self.config.product_id)
            calendar.add("version", "2.0")
            calendar.add("calscale", "GREGORIAN")
            calendar.add("x-wr-calname", f"{options.artist_name} Calendar")
            if options.artist_description:
                calendar.add("x-wr-caldesc", options.artist_description)

            for event in event_list:
                calendar.add_component(self._build_component(event, options, stamp))

            text = calendar.to_ical().decode("utf-8")
        except (InvalidRuleError, ValueError, TypeError, KeyError) as e:
            logger.exception("iCal export failed for %s", options.artist_name)
            raise IcalExportError(f"Failed to create iCal: {e}") from e

        logger.debug("Exported %d events for %s", len(event_list), options.artist_name)
        return text


def export_artist_calendar(
    events: Iterable[Event],
    options: ExportOptions,
    serializer: Optional[IcalSerializer] = None,
) -> str:
    """Filter an artist's events by the export options and serialize them.

    Args:
        events: All candidate events
        options: Export options
        serializer: Serializer to use; a default one if None

    Returns:
        iCalendar text

    Raises:
        IcalExportError: If serialization fails
    """
    selected = filter_for_export(events, options)
    logger.info(
        "Exporting %d events for %s (private=%s, membership=%s)",
        len(selected),
        options.artist_name,
        options.include_private_events,
        options.membership_id,
    )
    return (serializer or IcalSerializer()).serialize(selected, options)
