"""Two-tier record retrieval: server-side filtering with a client-side fallback."""

from datetime import datetime
from typing import Any, Dict, List
import logging

from ..core.metrics import track_filter_fallback
from .nocodb_service import NocoDBClient, build_range_filter
from .periods import DateRange
from .record_fields import parse_timestamp

logger = logging.getLogger(__name__)


def filter_by_range(
    records: List[Any],
    time_field: str,
    start: datetime,
    end: datetime,
) -> List[Dict[str, Any]]:
    """Keep records whose ``time_field`` lies within ``[start, end]``.

    Records with a missing or unparsable timestamp are dropped.
    """
    kept = []
    for record in records:
        if not isinstance(record, dict):
            continue
        timestamp = parse_timestamp(record.get(time_field))
        if timestamp is not None and start <= timestamp <= end:
            kept.append(record)
    return kept


class RecordFetcher:
    """Fetch the records of a time window and the clubs lookup."""

    def __init__(self, client: NocoDBClient, time_field: str):
        self.client = client
        self.time_field = time_field

    def fetch_for_range(self, date_range: DateRange) -> List[Dict[str, Any]]:
        """Fetch records created within ``date_range``.

        Tries the server-side filter first; if that listing fails, fetches
        everything and filters locally. Errors of the unfiltered listing
        propagate.
        """
        where = build_range_filter(self.time_field, date_range.start, date_range.end)
        logger.info(f"Fetching records for period: {date_range.label} (filter: {where})")

        result = self.client.fetch_filtered(where)
        if result.ok:
            logger.info(f"Fetched {len(result.records)} records for period: {date_range.label}")
            return result.records

        logger.warning(
            f"Server-side filtering failed ({result.error}), "
            f"fetching all records and filtering locally"
        )
        track_filter_fallback()

        records = filter_by_range(
            self.client.fetch_all(), self.time_field, date_range.start, date_range.end
        )
        logger.info(f"Client-side filter kept {len(records)} records for period: {date_range.label}")
        return records

    def fetch_lookup(self) -> Dict[str, str]:
        return self.client.fetch_club_names()
