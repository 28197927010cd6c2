"""Unit tests for record field extraction."""

from datetime import datetime, timedelta, timezone

import pytest
import pytz

from app.services.record_fields import (
    extract_aura_percent,
    extract_club_id,
    extract_phone,
    format_percent,
    parse_offset_timestamp,
    parse_percent,
    parse_timestamp,
    percent_from_container,
    scalar_to_str,
)


class TestScalarFields:
    """Test phone and club id extraction."""

    def test_phone_as_string_or_number(self):
        """Test phone may be stored as a string or a number."""
        assert extract_phone({"phone": "79990001122"}) == "79990001122"
        assert extract_phone({"phone": 79990001122}) == "79990001122"

    @pytest.mark.parametrize("value", [None, "", True, ["7999"], {"n": 1}])
    def test_phone_absent(self, value):
        """Test unusable phone values are treated as absent."""
        assert extract_phone({"phone": value}) is None

    def test_club_id_number(self):
        """Test numeric club ids are stringified."""
        assert extract_club_id({"club_id": 7}) == "7"
        assert extract_club_id({}) is None

    def test_scalar_to_str(self):
        """Test only strings and numbers survive."""
        assert scalar_to_str(30) == "30"
        assert scalar_to_str(None) == ""
        assert scalar_to_str(False) == ""


class TestPercent:
    """Test aura percent parsing."""

    @pytest.mark.parametrize("value,expected", [
        (91, 91.0),
        (91.5, 91.5),
        ("91%", 91.0),
        (" 91 % ", 91.0),
        ("72.25", 72.25),
    ])
    def test_parse_percent(self, value, expected):
        """Test numbers and percent strings parse."""
        assert parse_percent(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", None, True, "nan", "inf", float("nan")])
    def test_parse_percent_failures(self, value):
        """Test invalid percents return None."""
        assert parse_percent(value) is None

    def test_container_object(self):
        """Test a dict with a percent key."""
        assert percent_from_container({"percent": "65%"}) == 65.0

    def test_container_json_string(self):
        """Test JSON text holding an object."""
        assert percent_from_container('{"percent": 88, "color": "green"}') == 88.0

    def test_container_bare_string(self):
        """Test a bare percentage string."""
        assert percent_from_container("42%") == 42.0

    def test_container_without_percent(self):
        """Test an object without percent yields None."""
        assert percent_from_container({"color": "red"}) is None
        assert percent_from_container('{"color": "red"}') is None

    def test_text_aura_preferred_over_aura(self):
        """Test text_aura wins when both are usable."""
        record = {"text_aura": {"percent": 70}, "aura": {"percent": 10}}
        assert extract_aura_percent(record) == 70.0

    def test_falls_back_to_aura(self):
        """Test aura is used when text_aura is unusable."""
        record = {"text_aura": "broken", "aura": '{"percent": "55%"}'}
        assert extract_aura_percent(record) == 55.0

    def test_no_aura(self):
        """Test a record without aura fields."""
        assert extract_aura_percent({}) is None

    def test_format_percent(self):
        """Test integral values render without a fraction."""
        assert format_percent(91.0) == "91"
        assert format_percent(91.5) == "91.5"


class TestTimestamps:
    """Test timestamp parsing."""

    def test_offset_timestamp_keeps_offset(self):
        """Test the original offset is preserved."""
        parsed = parse_offset_timestamp("2024-01-01 10:00:00+0300")
        assert parsed.hour == 10
        assert parsed.utcoffset() == timedelta(hours=3)

    def test_colon_offset_accepted(self):
        """Test +HH:MM offsets parse too."""
        parsed = parse_offset_timestamp("2024-01-01 10:00:00+03:00")
        assert parsed.tzinfo is not None
        assert parsed.utcoffset() == timedelta(hours=3)

    def test_parse_timestamp_converts_to_utc(self):
        """Test offset timestamps are normalized to UTC."""
        parsed = parse_timestamp("2024-01-01 10:00:00+0300")
        assert parsed == datetime(2024, 1, 1, 7, 0, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    def test_naive_timestamp_is_utc(self):
        """Test naive timestamps are taken as UTC."""
        assert parse_timestamp("2024-01-01 10:00:00") == pytz.UTC.localize(datetime(2024, 1, 1, 10, 0))

    @pytest.mark.parametrize("value", [None, 123, "", "yesterday", "2024-01-01T10:00:00Z"])
    def test_unparsable(self, value):
        """Test unparsable values return None."""
        assert parse_timestamp(value) is None
