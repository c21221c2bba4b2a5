"""Unit tests for bndy_calendar.ical_import."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from bndy_calendar.calendar_models import ExportOptions, RecurrenceRule
from bndy_calendar.exceptions import IcalParseError
from bndy_calendar.ical_import import IcalParser, parse_ical_events
from bndy_calendar.recurrence import rule_from_rrule

pytestmark = pytest.mark.unit


def _ics(*event_lines: str) -> str:
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//Test//Test//EN", *event_lines, "END:VCALENDAR"]
    return "\r\n".join(lines) + "\r\n"


class TestRoundTrip:
    """Export with IcalSerializer, then import again."""

    def test_timed_event_round_trip(self, serializer, make_event):
        event = make_event(
            id="gig-1",
            type="gig",
            title="Friday Gig",
            venue="The Half Moon",
            start_time=time(20, 0),
            end_time=time(20, 30),
        )

        parsed = parse_ical_events(serializer.serialize([event], ExportOptions(artist_name="The Blues")))

        assert len(parsed) == 1
        result = parsed[0]
        assert result.uid == "bndy-gig-1@bndy.app"
        assert result.summary == "Friday Gig"
        assert result.location == "The Half Moon"
        assert result.start == datetime(2025, 12, 1, 20, 0)
        assert result.end == datetime(2025, 12, 1, 21, 0)
        assert not result.is_all_day
        assert result.rrule is None
        assert result.description.startswith("Event Type: Gig\n")

    def test_all_day_event_round_trip(self, serializer, export_options, make_event):
        event = make_event(is_all_day=True, date=date(2025, 12, 1), end_date=date(2025, 12, 3))

        result = parse_ical_events(serializer.serialize([event], export_options))[0]

        assert result.is_all_day
        assert result.start == datetime(2025, 12, 1)
        assert result.end == datetime(2025, 12, 3)

    def test_recurrence_rule_survives_as_text(self, serializer, export_options, make_event):
        rule = RecurrenceRule(frequency="weekly", interval=2, weekdays=[0, 3], count=6)
        event = make_event(is_all_day=True, recurring=rule)

        result = parse_ical_events(serializer.serialize([event], export_options))[0]

        assert result.rrule is not None
        assert rule_from_rrule(result.rrule).model_dump() == rule.model_dump()

    def test_events_keep_document_order(self, serializer, export_options, make_event):
        events = [make_event(id=f"e{i}", date=date(2025, 12, 10 - i)) for i in range(3)]

        parsed = parse_ical_events(serializer.serialize(events, export_options))

        assert [p.uid for p in parsed] == ["bndy-e0@bndy.app", "bndy-e1@bndy.app", "bndy-e2@bndy.app"]


class TestParseVevent:
    def test_dtend_and_timestamps(self):
        text = _ics(
            "BEGIN:VEVENT",
            "UID:ext-1",
            "SUMMARY:Studio day",
            "DTSTART:20251201T100000Z",
            "DTEND:20251201T180000Z",
            "CREATED:20251101T080000Z",
            "LAST-MODIFIED:20251102T080000Z",
            "END:VEVENT",
        )

        result = IcalParser().parse(text)[0]

        assert result.start == datetime(2025, 12, 1, 10, 0, tzinfo=timezone.utc)
        assert result.end - result.start == timedelta(hours=8)
        assert result.created == datetime(2025, 11, 1, 8, 0, tzinfo=timezone.utc)
        assert result.last_modified == datetime(2025, 11, 2, 8, 0, tzinfo=timezone.utc)
        assert result.description is None
        assert result.location is None

    def test_duration_sets_end(self):
        text = _ics(
            "BEGIN:VEVENT",
            "UID:ext-2",
            "DTSTART:20251201T190000",
            "DURATION:PT2H30M",
            "END:VEVENT",
        )

        result = IcalParser().parse(text)[0]

        assert result.end == datetime(2025, 12, 1, 21, 30)

    def test_date_start_without_end_lasts_one_day(self):
        text = _ics("BEGIN:VEVENT", "UID:ext-3", "DTSTART;VALUE=DATE:20251224", "END:VEVENT")

        result = IcalParser().parse(text)[0]

        assert result.is_all_day
        assert result.end == datetime(2025, 12, 25)

    def test_date_time_start_without_end_is_instant(self):
        text = _ics("BEGIN:VEVENT", "UID:ext-4", "DTSTART:20251224T180000", "END:VEVENT")

        result = IcalParser().parse(text)[0]

        assert result.end == result.start

    def test_rrule_is_not_expanded(self):
        text = _ics(
            "BEGIN:VEVENT",
            "UID:ext-5",
            "DTSTART:20251201T190000",
            "RRULE:FREQ=DAILY;COUNT=5",
            "END:VEVENT",
        )

        parsed = IcalParser().parse(text)

        assert len(parsed) == 1
        assert rule_from_rrule(parsed[0].rrule).count == 5

    def test_calendar_without_events(self):
        assert IcalParser().parse(_ics()) == []

    def test_leading_byte_order_mark_is_ignored(self):
        text = "\ufeff" + _ics("BEGIN:VEVENT", "UID:bom", "DTSTART:20251201T190000", "END:VEVENT")

        assert [p.uid for p in IcalParser().parse(text)] == ["bom"]


class TestParseErrors:
    @pytest.mark.parametrize("text", ["", "   \n", "BEGIN:VEVENT\r\nEND:VEVENT\r\n", "not a calendar"])
    def test_rejects_non_calendar_text(self, text):
        with pytest.raises(IcalParseError):
            IcalParser().parse(text)

    def test_rejects_unterminated_calendar(self):
        with pytest.raises(IcalParseError, match="Failed to parse iCal"):
            IcalParser().parse("BEGIN:VCALENDAR\r\nVERSION:2.0\r\n")

    def test_missing_dtstart_fails_whole_document(self):
        text = _ics(
            "BEGIN:VEVENT",
            "UID:ok",
            "DTSTART:20251201T190000",
            "END:VEVENT",
            "BEGIN:VEVENT",
            "UID:broken",
            "SUMMARY:No start",
            "END:VEVENT",
        )

        with pytest.raises(IcalParseError, match="DTSTART"):
            IcalParser().parse(text)
