"""Calendar orchestration: fetch, aggregate, expand and export.

The API client is injected at construction time so callers (and tests) decide
which client, credentials and transport are used.
"""

import logging
from datetime import date
from typing import Optional

from .aggregator import aggregate
from .api_client import CalendarApiClient
from .calendar_models import AnnotatedEvent, ExportOptions
from .config_loader import Config
from .ical_export import IcalSerializer, calendar_file_name, export_artist_calendar
from .recurrence import expand_event

logger = logging.getLogger(__name__)


class CalendarService:
    """High-level calendar operations over an injected API client."""

    def __init__(self, client: CalendarApiClient, config: Optional[Config] = None):
        self.client = client
        self.config = config or client.config
        self.serializer = IcalSerializer(self.config)

    async def load_artist_calendar(self, artist_id: str, start: date, end: date) -> list[AnnotatedEvent]:
        """Fetch an artist's calendar and project it onto the window.

        Events are aggregated (artist, personal, cross-artist) and every entry
        is expanded into one annotated entry per occurrence date inside
        ``[start, end]``. Recurring instances keep the parent's ID; their
        ``event.date`` / ``event.end_date`` are moved to the occurrence.

        Args:
            artist_id: Artist in view
            start: First date of the window
            end: Last date of the window

        Returns:
            Annotated entries in source order, occurrences in date order within each event

        Raises:
            CalendarApiError: If the fetch fails
            InvalidRuleError: If a stored recurrence rule is malformed
        """
        response = await self.client.fetch_artist_calendar(artist_id, start, end)
        entries = aggregate(response.artist_events, response.user_events, response.other_artist_events)

        expanded: list[AnnotatedEvent] = []
        for entry in entries:
            if entry.event.recurring is None:
                expanded.append(entry)
                continue
            for occurrence in expand_event(entry.event, start, end):
                instance = entry.event.model_copy(
                    update={"date": occurrence.occurrence_date, "end_date": occurrence.end_date}
                )
                expanded.append(entry.model_copy(update={"event": instance}))

        logger.info(
            "Loaded %d calendar entries for artist %s (%s..%s)", len(expanded), artist_id, start, end
        )
        return expanded

    async def export_artist_calendar(
        self,
        artist_id: str,
        start: date,
        end: date,
        options: ExportOptions,
        suffix: Optional[str] = None,
    ) -> tuple[str, str]:
        """Fetch an artist's own events and export them as an ``.ics`` download.

        Recurring events are exported once with an RRULE, not per occurrence.

        Returns:
            Tuple of (file name, iCalendar text)

        Raises:
            CalendarApiError: If the fetch fails
            IcalExportError: If serialization fails
        """
        response = await self.client.fetch_artist_calendar(artist_id, start, end)
        text = export_artist_calendar(response.artist_events, options, self.serializer)
        return calendar_file_name(options.artist_name, suffix), text
