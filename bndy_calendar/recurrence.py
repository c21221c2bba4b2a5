"""Recurrence expansion for bndy calendar events.

Projects a recurring event onto the concrete dates that fall inside a query
window. Daily and weekly cadences are delegated to ``dateutil.rrule``; monthly
and yearly cadences are stepped with ``relativedelta`` from the anchor date so
that a 31st clamps to the last day of shorter months without drifting.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, WEEKLY, rrule

from .calendar_models import Event, Occurrence, RecurrenceFrequency, RecurrenceRule
from .exceptions import InvalidRuleError

logger = logging.getLogger(__name__)

WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")
_WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

_RRULE_FREQUENCIES = {
    RecurrenceFrequency.DAILY: DAILY,
    RecurrenceFrequency.WEEKLY: WEEKLY,
}

_UNIT_NAMES = {
    RecurrenceFrequency.DAILY: ("Daily", "days"),
    RecurrenceFrequency.WEEKLY: ("Weekly", "weeks"),
    RecurrenceFrequency.MONTHLY: ("Monthly", "months"),
    RecurrenceFrequency.YEARLY: ("Yearly", "years"),
}


def validate_rule(rule: RecurrenceRule) -> None:
    """Check a rule's structure before expansion.

    Args:
        rule: Rule to check

    Raises:
        InvalidRuleError: If the rule cannot be expanded
    """
    if rule.interval < 1:
        raise InvalidRuleError(f"Recurrence interval must be at least 1, got {rule.interval}")
    if rule.count is not None and rule.count < 1:
        raise InvalidRuleError(f"Recurrence count must be at least 1, got {rule.count}")
    if rule.count is not None and rule.until is not None:
        raise InvalidRuleError("Recurrence rule cannot have both an end date and a count")
    if rule.weekdays:
        if rule.frequency != RecurrenceFrequency.WEEKLY:
            raise InvalidRuleError(
                f"Weekday set is only valid for weekly rules, not {rule.frequency.value}"
            )
        bad = [d for d in rule.weekdays if not 0 <= d <= 6]
        if bad:
            raise InvalidRuleError(f"Weekday numbers must be 0 (Monday) to 6 (Sunday), got {bad}")


def _generate(rule: RecurrenceRule, anchor: date) -> Iterator[date]:
    """Yield every date produced by the rule, honouring its end condition only."""
    if rule.frequency in _RRULE_FREQUENCIES:
        byweekday = sorted(set(rule.weekdays)) if rule.weekdays else None
        until = datetime.combine(rule.until, time.max) if rule.until else None
        generator = rrule(
            _RRULE_FREQUENCIES[rule.frequency],
            dtstart=datetime.combine(anchor, time.min),
            interval=rule.interval,
            count=rule.count,
            until=until,
            byweekday=byweekday,
        )
        for occurrence in generator:
            yield occurrence.date()
        return

    # Monthly and yearly: always offset from the anchor so clamping never accumulates
    step = 0
    while rule.count is None or step < rule.count:
        if rule.frequency == RecurrenceFrequency.MONTHLY:
            candidate = anchor + relativedelta(months=step * rule.interval)
        else:
            candidate = anchor + relativedelta(years=step * rule.interval)
        if rule.until is not None and candidate > rule.until:
            return
        yield candidate
        step += 1


class OccurrenceDates(Iterable[date]):
    """Lazy, finite view of a rule's dates inside a window.

    Each iteration restarts from the anchor, so the view can be consumed any
    number of times.
    """

    def __init__(
        self,
        rule: RecurrenceRule,
        event_start: date,
        window_start: date,
        window_end: date,
    ) -> None:
        self.rule = rule
        self.event_start = event_start
        self.window_start = window_start
        self.window_end = window_end

    def __iter__(self) -> Iterator[date]:
        for occurrence in _generate(self.rule, self.event_start):
            if occurrence > self.window_end:
                return
            if occurrence >= self.window_start:
                yield occurrence

    def __repr__(self) -> str:
        return (
            f"OccurrenceDates({self.rule.frequency.value}, anchor={self.event_start}, "
            f"window={self.window_start}..{self.window_end})"
        )


def expand(
    rule: RecurrenceRule,
    event_start: date,
    window_start: date,
    window_end: date,
) -> OccurrenceDates:
    """Expand a recurrence rule into the dates inside ``[window_start, window_end]``.

    Dates before ``window_start`` are generated but not emitted, and still use
    up a count-limited rule's budget.

    Args:
        rule: Recurrence rule
        event_start: Anchor date of the recurrence
        window_start: First date of the query window (inclusive)
        window_end: Last date of the query window (inclusive)

    Returns:
        Restartable iterable of occurrence dates in ascending order

    Raises:
        InvalidRuleError: If the rule is malformed
    """
    validate_rule(rule)
    logger.debug(
        "Expanding %s rule (interval=%d) anchored %s over %s..%s",
        rule.frequency.value,
        rule.interval,
        event_start,
        window_start,
        window_end,
    )
    return OccurrenceDates(rule, event_start, window_start, window_end)


def expand_event(event: Event, window_start: date, window_end: date) -> list[Occurrence]:
    """Project an event onto the occurrences visible in a window.

    Non-recurring events produce one occurrence when their span overlaps the
    window. Recurring events produce one occurrence per expanded date, each
    keeping the parent's multi-day span.

    Args:
        event: Event to project
        window_start: First date of the window (inclusive)
        window_end: Last date of the window (inclusive)

    Returns:
        Occurrences in date order
    """
    span = timedelta(days=(event.end_date - event.date).days) if event.end_date else timedelta(0)

    if event.recurring is None:
        last_day = event.end_date or event.date
        if event.date <= window_end and last_day >= window_start:
            return [
                Occurrence(
                    parent_event_id=event.id,
                    occurrence_date=event.date,
                    end_date=last_day,
                    event=event,
                )
            ]
        return []

    return [
        Occurrence(
            parent_event_id=event.id,
            occurrence_date=day,
            end_date=day + span,
            event=event,
        )
        for day in expand(event.recurring, event.date, window_start, window_end)
    ]


def next_occurrence(rule: RecurrenceRule, event_start: date, after: date) -> Optional[date]:
    """Return the first occurrence strictly after ``after``, or None once the rule has ended."""
    validate_rule(rule)
    for occurrence in _generate(rule, event_start):
        if occurrence > after:
            return occurrence
    return None


def is_occurrence_date(rule: RecurrenceRule, event_start: date, day: date) -> bool:
    """Check if ``day`` is one of the rule's occurrences."""
    return any(True for _ in expand(rule, event_start, day, day))


def total_occurrences(rule: RecurrenceRule, event_start: date) -> Optional[int]:
    """Count a bounded rule's occurrences; None for rules that never end."""
    validate_rule(rule)
    if not rule.is_bounded:
        return None
    return sum(1 for _ in _generate(rule, event_start))


def describe_rule(rule: RecurrenceRule) -> str:
    """Format a rule for display.

    Examples:
        "Daily", "Every 2 weeks", "Weekly on Mon, Thu",
        "Monthly for 10 occurrences", "Every 3 months until 31 Jan 2026"
    """
    single, plural = _UNIT_NAMES[rule.frequency]
    text = single if rule.interval == 1 else f"Every {rule.interval} {plural}"

    if rule.weekdays:
        text += " on " + ", ".join(_WEEKDAY_NAMES[d] for d in sorted(set(rule.weekdays)))

    if rule.count:
        text += f" for {rule.count} occurrence{'s' if rule.count > 1 else ''}"
    elif rule.until:
        text += f" until {rule.until.day} {rule.until.strftime('%b')} {rule.until.year}"
    return text


def rule_to_rrule(rule: RecurrenceRule, timed: bool = False) -> str:
    """Render a rule as an RFC 5545 RRULE value.

    Args:
        rule: Rule to render
        timed: Render UNTIL as a local date-time (for events with a start time)

    Returns:
        RRULE value without the ``RRULE:`` prefix
    """
    parts = [f"FREQ={rule.frequency.value.upper()}"]
    if rule.interval != 1:
        parts.append(f"INTERVAL={rule.interval}")
    if rule.weekdays:
        parts.append("BYDAY=" + ",".join(WEEKDAY_CODES[d] for d in sorted(set(rule.weekdays))))
    if rule.count is not None:
        parts.append(f"COUNT={rule.count}")
    elif rule.until is not None:
        until = rule.until.strftime("%Y%m%d")
        parts.append(f"UNTIL={until}T235959" if timed else f"UNTIL={until}")
    return ";".join(parts)


def rule_from_rrule(value: str) -> RecurrenceRule:
    """Build a rule from an RRULE value such as ``FREQ=WEEKLY;INTERVAL=2;BYDAY=MO``.

    Parts with no equivalent (BYMONTHDAY, BYSETPOS, WKST, ...) are ignored.

    Raises:
        InvalidRuleError: If the value is empty, lacks a supported FREQ, or has malformed parts
    """
    text = (value or "").strip()
    if text.upper().startswith("RRULE:"):
        text = text[len("RRULE:"):]
    if not text:
        raise InvalidRuleError("Empty RRULE string")

    fields: dict[str, object] = {}
    try:
        for part in text.split(";"):
            if "=" not in part:
                continue
            key, raw = part.split("=", 1)
            key = key.strip().upper()
            raw = raw.strip()

            if key == "FREQ":
                fields["frequency"] = RecurrenceFrequency(raw.lower())
            elif key == "INTERVAL":
                fields["interval"] = int(raw)
            elif key == "COUNT":
                fields["count"] = int(raw)
            elif key == "UNTIL":
                fields["until"] = datetime.strptime(raw[:8], "%Y%m%d").date()
            elif key == "BYDAY":
                fields["weekdays"] = [WEEKDAY_CODES.index(code.strip().upper()) for code in raw.split(",")]
            else:
                logger.debug("Ignoring unsupported RRULE part %s=%s", key, raw)
    except ValueError as e:
        raise InvalidRuleError(f"Invalid RRULE format: {value}") from e

    if "frequency" not in fields:
        raise InvalidRuleError(f"RRULE missing required FREQ parameter: {value}")

    rule = RecurrenceRule(**fields)
    validate_rule(rule)
    return rule
