"""Data models for bndy calendar processing."""

import datetime as dt
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    """Kinds of calendar event."""

    GIG = "gig"
    REHEARSAL = "rehearsal"
    RECORDING = "recording"
    OTHER = "other"
    UNAVAILABLE = "unavailable"


# Older payloads still send "practice" for rehearsals
_EVENT_TYPE_ALIASES: dict[str, EventType] = {
    "practice": EventType.REHEARSAL,
}

EVENT_TYPE_LABELS: dict[EventType, str] = {
    EventType.GIG: "Gig",
    EventType.REHEARSAL: "Band Rehearsal",
    EventType.RECORDING: "Recording Session",
    EventType.OTHER: "Band Event",
    EventType.UNAVAILABLE: "Unavailable",
}

EVENT_CATEGORIES: dict[EventType, str] = {
    EventType.GIG: "PERFORMANCE",
    EventType.REHEARSAL: "MUSIC",
    EventType.RECORDING: "MUSIC",
    EventType.OTHER: "OTHER",
    EventType.UNAVAILABLE: "PERSONAL",
}


class RecurrenceFrequency(str, Enum):
    """Supported recurrence cadences."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


_FREQUENCY_ALIASES: dict[str, RecurrenceFrequency] = {
    "day": RecurrenceFrequency.DAILY,
    "week": RecurrenceFrequency.WEEKLY,
    "month": RecurrenceFrequency.MONTHLY,
    "year": RecurrenceFrequency.YEARLY,
}


class RecurrenceDuration(str, Enum):
    """How the web app says a recurrence ends."""

    FOREVER = "forever"
    COUNT = "count"
    UNTIL = "until"


class _CamelModel(BaseModel):
    """Base model accepting both snake_case names and the API's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecurrenceRule(_CamelModel):
    """Recurrence definition owned by a single event.

    Structural checks (interval, count, weekday set) are made by the expander so
    that a stored rule can always be loaded and reported on.
    """

    frequency: RecurrenceFrequency = Field(
        ...,
        validation_alias=AliasChoices("frequency", "type"),
        description="Recurrence cadence; the API sends it as \"type\"",
    )
    interval: int = Field(default=1, description="Step between occurrences, in frequency units")
    until: Optional[dt.date] = Field(default=None, description="Last date an occurrence may fall on")
    count: Optional[int] = Field(default=None, description="Maximum number of occurrences")
    weekdays: Optional[list[int]] = Field(
        default=None, description="Weekday numbers (0=Monday) for weekly rules"
    )
    duration: Optional[RecurrenceDuration] = Field(
        default=None, description="End condition chosen in the app: forever, count or until"
    )

    @field_validator("frequency", mode="before")
    @classmethod
    def _normalize_frequency(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _FREQUENCY_ALIASES.get(lowered, lowered)
        return value

    @model_validator(mode="after")
    def _apply_duration(self) -> "RecurrenceRule":
        # Only the bound named by duration applies; stale form values are dropped
        if self.duration in (RecurrenceDuration.FOREVER, RecurrenceDuration.COUNT):
            self.until = None
        if self.duration in (RecurrenceDuration.FOREVER, RecurrenceDuration.UNTIL):
            self.count = None
        return self

    @property
    def is_bounded(self) -> bool:
        """True when the rule has an end date or an occurrence count."""
        return self.until is not None or self.count is not None


class Event(_CamelModel):
    """A scheduled gig, rehearsal, recording, other event or unavailability."""

    id: str = Field(..., description="Event ID")
    artist_id: Optional[str] = Field(default=None, description="Owning artist; None for personal events")
    type: EventType = Field(..., description="Event kind")
    title: Optional[str] = Field(default=None, description="Event title")

    # Date and time information
    date: dt.date = Field(..., description="Start date")
    end_date: Optional[dt.date] = Field(default=None, description="End date for multi-day events")
    start_time: Optional[dt.time] = Field(default=None, description="Start time of day")
    end_time: Optional[dt.time] = Field(default=None, description="End time of day")
    is_all_day: bool = Field(default=False, description="All-day event flag")

    venue: Optional[str] = Field(default=None, description="Venue name")
    location: Optional[str] = Field(default=None, description="Free-text location")
    notes: Optional[str] = Field(default=None, description="Notes")
    is_public: bool = Field(default=False, description="Visible outside the band")

    # Ownership
    membership_id: Optional[str] = Field(default=None, description="Owning membership")
    owner_user_id: Optional[str] = Field(default=None, description="Owning user")

    recurring: Optional[RecurrenceRule] = Field(default=None, description="Recurrence rule")

    created_at: Optional[dt.datetime] = Field(default=None, description="Creation time")
    updated_at: Optional[dt.datetime] = Field(default=None, description="Last modification time")

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _EVENT_TYPE_ALIASES.get(lowered, lowered)
        return value

    @model_validator(mode="after")
    def _check_unavailability_owner(self) -> "Event":
        if self.type == EventType.UNAVAILABLE:
            owners = [o for o in (self.membership_id, self.owner_user_id) if o]
            if len(owners) != 1:
                raise ValueError(
                    "unavailable events must name exactly one of membership_id or owner_user_id"
                )
        return self

    @property
    def type_label(self) -> str:
        """Human-readable label for the event kind."""
        return EVENT_TYPE_LABELS[self.type]

    @property
    def display_title(self) -> str:
        """Title if set, else the type label."""
        return self.title or self.type_label

    @property
    def is_recurring(self) -> bool:
        """Check if event carries a recurrence rule."""
        return self.recurring is not None

    @property
    def is_multi_day(self) -> bool:
        """Check if event spans more than one calendar date."""
        return self.end_date is not None and self.end_date != self.date

    @field_serializer("created_at", "updated_at", when_used="unless-none")
    def serialize_datetime(self, value: dt.datetime) -> str:
        """Serialize datetime fields to ISO format."""
        return value.isoformat()


class CrossArtistEvent(Event):
    """Event belonging to another artist the user is a member of."""

    artist_name: str = Field(..., description="Display name of the origin artist")


class Occurrence(BaseModel):
    """One concrete date of an event, computed on demand and never persisted."""

    parent_event_id: str = Field(..., description="ID of the event this occurrence projects")
    occurrence_date: dt.date = Field(..., description="Date of this occurrence")
    end_date: dt.date = Field(..., description="Last date of this occurrence")
    event: Event = Field(..., description="Parent event")

    @property
    def is_recurring_instance(self) -> bool:
        """True when generated from a recurrence rule."""
        return self.event.is_recurring


class MembershipRole(str, Enum):
    """Membership roles, most privileged first."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"

    @property
    def rank(self) -> int:
        """Privilege rank; higher outranks lower."""
        return _ROLE_RANKS[self]


_ROLE_RANKS: dict[MembershipRole, int] = {
    MembershipRole.OWNER: 3,
    MembershipRole.ADMIN: 2,
    MembershipRole.MEMBER: 1,
}


class Membership(_CamelModel):
    """A user's role-bearing relationship to one artist."""

    id: str = Field(..., description="Membership ID")
    artist_id: str = Field(..., description="Artist this membership belongs to")
    user_id: Optional[str] = Field(default=None, description="Member's user ID")
    role: MembershipRole = Field(default=MembershipRole.MEMBER, description="Role")
    display_name: Optional[str] = Field(default=None, description="Name shown in the band")
    icon: Optional[str] = Field(default=None, description="Member icon")
    color: Optional[str] = Field(default=None, description="Member colour")
    status: str = Field(default="active", description="Membership status")

    def has_role(self, minimum: MembershipRole) -> bool:
        """Check if this membership's role is at least ``minimum``."""
        return self.role.rank >= minimum.rank


class EventSource(str, Enum):
    """Where an aggregated event came from."""

    ARTIST = "artist"
    PERSONAL = "personal"
    CROSS_ARTIST = "cross_artist"


class AnnotatedEvent(BaseModel):
    """Aggregated calendar entry with the title the UI should show."""

    event: Event
    display_title: str
    source: EventSource
    origin_artist_name: Optional[str] = None

    @property
    def is_cross_artist(self) -> bool:
        return self.source == EventSource.CROSS_ARTIST


class CalendarResponse(_CamelModel):
    """Body of ``GET /api/artists/{id}/calendar``."""

    artist_events: list[Event] = Field(default_factory=list)
    user_events: list[Event] = Field(default_factory=list)
    other_artist_events: list[CrossArtistEvent] = Field(default_factory=list)


class ExportOptions(BaseModel):
    """Caller-supplied options for an iCal export."""

    artist_name: str = Field(..., description="Artist name used for organizer and description")
    artist_description: Optional[str] = Field(default=None, description="Calendar description")
    include_private_events: bool = Field(default=False, description="Keep non-public events")
    membership_id: Optional[str] = Field(
        default=None, description="Only export events owned by this membership"
    )


class ParsedEvent(BaseModel):
    """Event extracted from an imported iCal file."""

    uid: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start: dt.datetime
    end: dt.datetime
    is_all_day: bool = False
    rrule: Optional[str] = Field(default=None, description="Raw RRULE value, not expanded")
    created: Optional[dt.datetime] = None
    last_modified: Optional[dt.datetime] = None
