"""Tests for conference_companion.adapters.dates -- date label parsing."""

from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from conference_companion.adapters.dates import (
    day_start,
    parse_date_label,
    parse_event_end,
    parse_event_start,
    parse_time_label,
    to_epoch_millis,
)

PACIFIC = ZoneInfo("America/Los_Angeles")

# ---------------------------------------------------------------------------
# parse_date_label()
# ---------------------------------------------------------------------------


class TestParseDateLabel:
    """Tests for parse_date_label()."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("Monday, June 1", date(2026, 6, 1)),
            ("June 1", date(2026, 6, 1)),
            ("Tuesday, Jun 2", date(2026, 6, 2)),
            ("Sept 30", date(2026, 9, 30)),
            ("June 3rd", date(2026, 6, 3)),
            ("  Wednesday,   June 3  ", date(2026, 6, 3)),
        ],
    )
    def test_labels_without_year_use_default(self, label, expected):
        assert parse_date_label(label, default_year=2026) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("label", ["Monday, June 1, 2027", "June 1 2027"])
    def test_explicit_year_wins(self, label):
        assert parse_date_label(label, default_year=2026) == date(2027, 6, 1)

    @pytest.mark.unit
    def test_no_year_and_no_default_fails_closed(self):
        assert parse_date_label("Monday, June 1") is None

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "label",
        ["", None, "TBD", "2026-06-01", "6/1/2026", "Smarch 3", "February 30", "June", 20260601],
    )
    def test_unaccepted_labels_return_none(self, label):
        assert parse_date_label(label, default_year=2026) is None


# ---------------------------------------------------------------------------
# parse_time_label()
# ---------------------------------------------------------------------------


class TestParseTimeLabel:
    """Tests for parse_time_label()."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("9:00 AM", time(9, 0)),
            ("9:30am", time(9, 30)),
            ("12:00 PM", time(12, 0)),
            ("12:15 AM", time(0, 15)),
            ("5 PM", time(17, 0)),
            ("5:45 p.m.", time(17, 45)),
            ("13:30", time(13, 30)),
            ("07:05", time(7, 5)),
        ],
    )
    def test_accepted_formats(self, label, expected):
        assert parse_time_label(label) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("label", ["", None, "noon", "13:00 PM", "0:30 AM", "24:00", "9:75 AM", "9"])
    def test_malformed_times_return_none(self, label):
        assert parse_time_label(label) is None


# ---------------------------------------------------------------------------
# parse_event_start() / parse_event_end()
# ---------------------------------------------------------------------------


class TestEventInstants:
    """Tests for start/end instant computation."""

    @pytest.mark.unit
    def test_start_combines_date_and_time_in_timezone(self):
        start = parse_event_start("Monday, June 1", "9:00 AM", tz=PACIFIC, default_year=2026)
        assert start == datetime(2026, 6, 1, 9, 0, tzinfo=PACIFIC)
        assert start.astimezone(UTC).hour == 16

    @pytest.mark.unit
    def test_missing_start_time_means_midnight(self):
        start = parse_event_start("Monday, June 1", None, tz=PACIFIC, default_year=2026)
        assert start == datetime(2026, 6, 1, 0, 0, tzinfo=PACIFIC)

    @pytest.mark.unit
    def test_malformed_start_time_fails_closed(self):
        assert parse_event_start("Monday, June 1", "after lunch", tz=PACIFIC, default_year=2026) is None

    @pytest.mark.unit
    def test_end_on_same_day(self):
        start = datetime(2026, 6, 1, 9, 0, tzinfo=PACIFIC)
        assert parse_event_end(start, "10:30 AM") == datetime(2026, 6, 1, 10, 30, tzinfo=PACIFIC)

    @pytest.mark.unit
    @pytest.mark.parametrize("end_time", [None, "", "late", "8:00 AM"])
    def test_end_falls_back_to_default_duration(self, end_time):
        start = datetime(2026, 6, 1, 9, 0, tzinfo=PACIFIC)
        assert parse_event_end(start, end_time) == start + timedelta(minutes=60)

    @pytest.mark.unit
    def test_end_equal_to_start_is_kept(self):
        start = datetime(2026, 6, 1, 9, 0, tzinfo=PACIFIC)
        assert parse_event_end(start, "9:00 AM") == start

    @pytest.mark.unit
    def test_custom_default_duration(self):
        start = datetime(2026, 6, 1, 9, 0, tzinfo=PACIFIC)
        assert parse_event_end(start, None, default_duration=timedelta(minutes=90)) == start + timedelta(minutes=90)

    @pytest.mark.unit
    def test_no_start_means_no_end(self):
        assert parse_event_end(None, "10:00 AM") is None


# ---------------------------------------------------------------------------
# to_epoch_millis() / day_start()
# ---------------------------------------------------------------------------


class TestEpochHelpers:
    """Tests for to_epoch_millis() and day_start()."""

    @pytest.mark.unit
    def test_epoch_millis(self):
        assert to_epoch_millis(datetime(1970, 1, 1, 0, 0, 1, tzinfo=UTC)) == 1000

    @pytest.mark.unit
    def test_epoch_millis_none(self):
        assert to_epoch_millis(None) is None

    @pytest.mark.unit
    def test_day_start_truncates_to_local_midnight(self):
        value = datetime(2026, 6, 1, 23, 30, tzinfo=PACIFIC)
        assert day_start(value) == datetime(2026, 6, 1, tzinfo=PACIFIC)

    @pytest.mark.unit
    def test_day_start_none(self):
        assert day_start(None) is None
