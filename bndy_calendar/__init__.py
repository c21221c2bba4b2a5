"""bndy_calendar - calendar core for the bndy band management app.

Recurring-event expansion, calendar aggregation, iCal export/import and event
permission checks. The modules are pure computations over already-fetched
events; ``api_client`` and ``calendar_service`` add the async REST layer.
"""

__version__ = "1.0.0"

from .aggregator import aggregate
from .calendar_models import (
    AnnotatedEvent,
    CrossArtistEvent,
    Event,
    EventType,
    ExportOptions,
    Membership,
    MembershipRole,
    Occurrence,
    ParsedEvent,
    RecurrenceDuration,
    RecurrenceFrequency,
    RecurrenceRule,
)
from .exceptions import (
    CalendarApiError,
    CalendarError,
    IcalExportError,
    IcalParseError,
    InvalidRuleError,
)
from .ical_export import IcalSerializer, calendar_file_name, export_artist_calendar
from .ical_import import IcalParser, parse_ical_events
from .permissions import EventPermissions, can_create, can_delete, can_edit, is_owner
from .recurrence import expand, expand_event

__all__ = [
    "AnnotatedEvent",
    "CalendarApiError",
    "CalendarError",
    "CrossArtistEvent",
    "Event",
    "EventPermissions",
    "EventType",
    "ExportOptions",
    "IcalExportError",
    "IcalParseError",
    "IcalParser",
    "IcalSerializer",
    "InvalidRuleError",
    "Membership",
    "MembershipRole",
    "Occurrence",
    "ParsedEvent",
    "RecurrenceDuration",
    "RecurrenceFrequency",
    "RecurrenceRule",
    "aggregate",
    "calendar_file_name",
    "can_create",
    "can_delete",
    "can_edit",
    "expand",
    "expand_event",
    "export_artist_calendar",
    "is_owner",
    "parse_ical_events",
]
