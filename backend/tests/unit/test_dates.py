"""Tests for local-time helpers."""

from datetime import datetime, timezone

from lumi.utils.dates import format_due, local_at, parse_iso, to_local


class TestToLocal:

    def test_naive_values_are_utc(self, at):
        assert to_local(datetime(2025, 10, 20, 12, 30)) == at(2025, 10, 20, 18, 0)

    def test_aware_values_are_converted(self, at):
        assert to_local(datetime(2025, 10, 20, 0, 0, tzinfo=timezone.utc)) == at(2025, 10, 20, 5, 30)


class TestParseIso:

    def test_naive_string_is_local(self, at):
        assert parse_iso("2025-10-21T18:00:00") == at(2025, 10, 21, 18, 0)

    def test_offset_is_kept(self, at):
        assert parse_iso("2025-10-21T12:30:00Z") == at(2025, 10, 21, 18, 0)


class TestFormatDue:
    """Test the human due-date labels."""

    def test_today(self, at):
        now = at(2025, 10, 20, 10, 0)
        assert format_due(at(2025, 10, 20, 18, 0), now) == "Today at 6:00 PM"

    def test_tomorrow(self, at):
        now = at(2025, 10, 20, 10, 0)
        assert format_due(at(2025, 10, 21, 9, 0), now) == "Tomorrow at 9:00 AM"

    def test_later_date(self, at):
        now = at(2025, 10, 20, 10, 0)
        assert format_due(at(2025, 10, 25, 18, 0), now) == "Oct 25, 6:00 PM"

    def test_utc_value_uses_local_day(self, at):
        now = at(2025, 10, 20, 10, 0)
        # 20:00 UTC on the 20th is already the 21st in Kolkata
        due = datetime(2025, 10, 20, 20, 0, tzinfo=timezone.utc)
        assert format_due(due, now) == "Tomorrow at 1:30 AM"

    def test_missing(self):
        assert format_due(None) is None

    def test_local_at_applies_offset(self, at):
        assert local_at(at(2025, 10, 20).date(), 21).isoformat() == "2025-10-20T21:00:00+05:30"
