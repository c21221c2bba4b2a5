"""Calendar aggregation and view filtering for bndy calendars."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Optional

from .calendar_models import AnnotatedEvent, CrossArtistEvent, Event, EventSource, EventType

logger = logging.getLogger(__name__)


def cross_artist_title(event: CrossArtistEvent) -> str:
    """Title shown for an event from another artist, e.g. ``"Band Rehearsal (The Reds)"``."""
    return f"{event.display_title} ({event.artist_name})"


def aggregate(
    artist_events: Iterable[Event],
    personal_events: Iterable[Event],
    cross_artist_events: Iterable[CrossArtistEvent],
) -> list[AnnotatedEvent]:
    """Merge the three calendar sources into one list.

    Sources are concatenated in the fixed order artist, personal, cross-artist,
    each keeping its input order. Cross-artist entries get the origin artist's
    name appended to their title. No deduplication or sorting is done: the
    upstream queries are expected to be disjoint, and callers sort by date
    themselves when needed.

    Args:
        artist_events: Events of the artist in view
        personal_events: The user's own events
        cross_artist_events: Events of the user's other artists

    Returns:
        Annotated events in source order
    """
    merged: list[AnnotatedEvent] = [
        AnnotatedEvent(event=event, display_title=event.display_title, source=EventSource.ARTIST)
        for event in artist_events
    ]
    merged.extend(
        AnnotatedEvent(event=event, display_title=event.display_title, source=EventSource.PERSONAL)
        for event in personal_events
    )
    merged.extend(
        AnnotatedEvent(
            event=event,
            display_title=cross_artist_title(event),
            source=EventSource.CROSS_ARTIST,
            origin_artist_name=event.artist_name,
        )
        for event in cross_artist_events
    )

    logger.debug("Aggregated %d calendar entries", len(merged))
    return merged


def is_cross_artist_event(event: Event, current_artist_id: Optional[str]) -> bool:
    """Detect an event that belongs to an artist other than the one in view."""
    if not current_artist_id or not event.artist_id:
        return False
    return event.artist_id != current_artist_id


def filter_events(
    entries: Sequence[AnnotatedEvent],
    show_artist_events: bool,
    show_my_events: bool,
    show_all_artists: bool,
    effective_artist_id: Optional[str] = None,
    current_user_id: Optional[str] = None,
) -> list[AnnotatedEvent]:
    """Apply the calendar page's visibility toggles.

    Three-level filtering:
    1. Artist events: the artist in view, and other members' unavailability
    2. My events: personal events and the user's own unavailability
    3. All artists: other artists' events, only together with artist events

    Args:
        entries: Aggregated calendar entries
        show_artist_events: "Artist events" toggle
        show_my_events: "My events" toggle
        show_all_artists: "All artists" toggle
        effective_artist_id: Artist in view, if any
        current_user_id: Signed-in user

    Returns:
        Entries that remain visible, in input order
    """

    def _visible(entry: AnnotatedEvent) -> bool:
        event = entry.event
        if event.type == EventType.UNAVAILABLE:
            if entry.is_cross_artist:
                return show_artist_events
            if current_user_id and event.owner_user_id == current_user_id:
                return show_my_events
            return show_artist_events

        if not event.artist_id:
            return show_my_events
        if effective_artist_id and event.artist_id == effective_artist_id:
            return show_artist_events
        if not effective_artist_id:
            return show_artist_events
        return show_all_artists and show_artist_events

    return [entry for entry in entries if _visible(entry)]


def filter_to_date_range(events: Iterable[Event], start: date, end: date) -> list[Event]:
    """Keep events whose span overlaps ``[start, end]``."""
    return [e for e in events if e.date <= end and (e.end_date or e.date) >= start]


def events_for_date(events: Iterable[Event], day: date) -> list[Event]:
    """Events on ``day``, including multi-day events spanning it."""
    return [e for e in events if e.date <= day <= (e.end_date or e.date)]


def event_span_days(event: Event) -> int:
    """Number of calendar days an event covers (1 for single-day events)."""
    if event.end_date is None or event.end_date == event.date:
        return 1
    return (event.end_date - event.date).days + 1
