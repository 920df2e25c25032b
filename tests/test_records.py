"""Tests for agrihub.db.records and agrihub.db.dates."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from agrihub.db.dates import DATE_UNAVAILABLE, format_date, parse_date
from agrihub.db.records import get_float, get_int, get_map, get_str, str_or_empty


class TestAccessors:
    def test_absent_and_mistyped_are_none(self) -> None:
        row = {"name": 5, "ph": "7.1", "flag": True}
        assert get_str(row, "name") is None
        assert get_str(row, "missing") is None
        assert get_float(row, "ph") is None
        assert get_float(row, "flag") is None

    def test_zero_is_distinct_from_absent(self) -> None:
        row = {"moisture": 0, "note": ""}
        assert get_float(row, "moisture") == 0.0
        assert get_str(row, "note") == ""
        assert get_float(row, "humidity") is None

    def test_get_int(self) -> None:
        assert get_int({"n": 4}, "n") == 4
        assert get_int({"n": 4.0}, "n") == 4
        assert get_int({"n": 4.5}, "n") is None
        assert get_int({"n": False}, "n") is None

    def test_get_map_and_helpers(self) -> None:
        assert get_map({"c": {"lat": 1}}, "c") == {"lat": 1}
        assert get_map({"c": [1]}, "c") is None
        assert str_or_empty({}, "x") == ""


class TestParseDate:
    def test_iso_with_zone(self) -> None:
        parsed = parse_date("2024-03-05T14:07:00Z")
        assert parsed == datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)

    def test_fractional_seconds(self) -> None:
        parsed = parse_date("2024-03-05T14:07:00.123Z")
        assert parsed is not None and parsed.microsecond == 123000

    def test_space_separated(self) -> None:
        assert parse_date("2024-03-05 14:07:00") == datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)

    def test_unix_seconds(self) -> None:
        assert parse_date(1709647620) == datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)
        assert parse_date(1709647620.9) == datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)

    def test_native_values(self) -> None:
        assert parse_date(date(2024, 3, 5)) == datetime(2024, 3, 5, tzinfo=timezone.utc)
        naive = datetime(2024, 3, 5, 1, 2)
        assert parse_date(naive).tzinfo is timezone.utc

    def test_temporal_objects_with_to_native(self) -> None:
        class Temporal:
            def to_native(self):
                return datetime(2024, 1, 2, tzinfo=timezone.utc)

        assert parse_date(Temporal()) == datetime(2024, 1, 2, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "yesterday", True, {"d": 1}, []])
    def test_unparseable(self, value) -> None:
        assert parse_date(value) is None


class TestFormatDate:
    def test_date_only(self) -> None:
        assert format_date(datetime(2006, 1, 2, 15, 4)) == "January 2, 2006"

    def test_with_time(self) -> None:
        assert format_date(datetime(2006, 1, 2, 15, 4), with_time=True) == "January 2, 2006 - 3:04pm"
        assert format_date(datetime(2006, 1, 2, 0, 5), with_time=True) == "January 2, 2006 - 12:05am"

    def test_sentinel(self) -> None:
        assert format_date(None) == DATE_UNAVAILABLE == "Date unavailable"
