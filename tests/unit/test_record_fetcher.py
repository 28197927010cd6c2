"""Unit tests for two-tier record retrieval."""

from datetime import datetime
from unittest.mock import Mock

import pytest
import pytz

from app.core.exceptions import NocoDBError
from app.services.nocodb_service import FetchResult
from app.services.periods import DateRange
from app.services.record_fetcher import RecordFetcher, filter_by_range

START = datetime(2024, 1, 1, 0, 0, tzinfo=pytz.UTC)
END = datetime(2024, 1, 1, 23, 59, 59, tzinfo=pytz.UTC)
RANGE = DateRange(start=START, end=END, label="test")

ALL_RECORDS = [
    {"Id": 1, "CreatedAt1": "2023-12-31 23:59:59+0000"},
    {"Id": 2, "CreatedAt1": "2024-01-01 00:00:00+0000"},
    {"Id": 3, "CreatedAt1": "2024-01-01 12:00:00+0300"},
    {"Id": 4, "CreatedAt1": "2024-01-01 23:59:59"},
    {"Id": 5, "CreatedAt1": "2024-01-02 00:00:00+0000"},
    {"Id": 6, "CreatedAt1": "not a date"},
    {"Id": 7},
    "garbage",
]


class TestFilterByRange:
    """Test client-side range filtering."""

    def test_inclusive_bounds(self):
        """Test both bounds are inclusive and bad timestamps are dropped."""
        kept = filter_by_range(ALL_RECORDS, "CreatedAt1", START, END)
        assert [r["Id"] for r in kept] == [2, 3, 4]

    def test_empty(self):
        """Test filtering nothing."""
        assert filter_by_range([], "CreatedAt1", START, END) == []


class TestRecordFetcher:
    """Test RecordFetcher strategy selection."""

    def test_uses_filtered_fetch_when_it_succeeds(self):
        """Test the server-side filter result is returned as is."""
        client = Mock()
        client.fetch_filtered.return_value = FetchResult(records=[{"Id": 2}])

        records = RecordFetcher(client, "CreatedAt1").fetch_for_range(RANGE)

        assert records == [{"Id": 2}]
        client.fetch_all.assert_not_called()
        where = client.fetch_filtered.call_args[0][0]
        assert where.startswith("(CreatedAt1,ge,exactDate,2024-01-01 00:00)")

    def test_fallback_equals_client_side_filter(self):
        """Test a failed filtered fetch falls back to full fetch plus local filtering."""
        client = Mock()
        client.fetch_filtered.return_value = FetchResult(error="NocoDB error: 500")
        client.fetch_all.return_value = ALL_RECORDS

        records = RecordFetcher(client, "CreatedAt1").fetch_for_range(RANGE)

        assert records == filter_by_range(ALL_RECORDS, "CreatedAt1", START, END)
        client.fetch_all.assert_called_once()

    def test_fallback_failure_propagates(self):
        """Test errors of the unfiltered fetch are not swallowed."""
        client = Mock()
        client.fetch_filtered.return_value = FetchResult(error="timeout")
        client.fetch_all.side_effect = NocoDBError("down")

        with pytest.raises(NocoDBError):
            RecordFetcher(client, "CreatedAt1").fetch_for_range(RANGE)

    def test_fetch_lookup(self):
        """Test lookup delegates to the client."""
        client = Mock()
        client.fetch_club_names.return_value = {"c1": "ClubOne"}

        assert RecordFetcher(client, "CreatedAt1").fetch_lookup() == {"c1": "ClubOne"}
