"""NocoDB REST client for the report pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

import pytz
import requests

from ..core.exceptions import NocoDBError
from ..core.metrics import track_nocodb_latency
from .record_fields import scalar_to_str

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
FILTER_TIME_FORMAT = "%Y-%m-%d %H:%M"


@dataclass
class FetchResult:
    """Outcome of a listing that is allowed to fail."""

    records: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_range_filter(time_field: str, start: datetime, end: datetime) -> str:
    """Build a NocoDB ``where`` expression for ``start <= field <= end``.

    Both instants are rendered in UTC with minute precision.
    """
    start_str = start.astimezone(pytz.UTC).strftime(FILTER_TIME_FORMAT)
    end_str = end.astimezone(pytz.UTC).strftime(FILTER_TIME_FORMAT)
    return (
        f"({time_field},ge,exactDate,{start_str})"
        f"~and({time_field},le,exactDate,{end_str})"
    )


def extract_rows(payload: Any) -> List[Any]:
    """Pull the record array out of a listing response.

    NocoDB returns it under ``list`` or ``data`` depending on the version.
    """
    if not isinstance(payload, dict):
        return []
    rows = payload.get("list")
    if rows is None:
        rows = payload.get("data")
    return rows if isinstance(rows, list) else []


class NocoDBClient:
    """Read-only client for the records table and the clubs lookup table.

    Uses static token authentication (``xc-token`` header).
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        table_id: str,
        clubs_table_id: str,
        timeout: int = 60,
        page_size: int = DEFAULT_PAGE_SIZE,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.table_id = table_id
        self.clubs_table_id = clubs_table_id
        self.timeout = timeout
        self.page_size = page_size

        self._session = session or requests.Session()
        self._session.headers.update({"xc-token": token})

    def _records_url(self, table_id: str) -> str:
        return f"{self.base_url}/api/v2/tables/{table_id}/records"

    def _get(self, table_id: str, params: Optional[Dict[str, Any]], operation: str) -> Any:
        """Perform a GET and return the decoded JSON body.

        Raises NocoDBError on transport errors, non-success status or an
        undecodable body.
        """
        url = self._records_url(table_id)
        logger.info(f"Requesting {url} params={params}")

        try:
            with track_nocodb_latency(operation):
                response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NocoDBError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            raise NocoDBError(
                f"{response.status_code} - {response.text[:500]}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise NocoDBError(f"Invalid JSON from {url}: {e}") from e

    def _list_pages(self, where: Optional[str] = None) -> List[Dict[str, Any]]:
        """List the records table page by page until a short page arrives."""
        all_records: List[Dict[str, Any]] = []
        offset = 0

        while True:
            params: Dict[str, Any] = {"limit": self.page_size, "offset": offset}
            if where:
                params["where"] = where

            rows = extract_rows(self._get(self.table_id, params, "list_records"))
            all_records.extend(rows)

            logger.info(
                f"Fetched {len(rows)} records at offset {offset}, "
                f"total so far: {len(all_records)}"
            )

            if len(rows) < self.page_size:
                break
            offset += self.page_size

        return all_records

    def fetch_all(self) -> List[Dict[str, Any]]:
        """Fetch every record of the records table."""
        logger.info(f"Fetching all records from NocoDB table: {self.table_id}")
        records = self._list_pages()
        logger.info(f"Fetched total {len(records)} records")
        return records

    def fetch_filtered(self, where: str) -> FetchResult:
        """Fetch records matching a ``where`` expression.

        Failures are reported through the result instead of raising.
        """
        logger.info(f"Fetching filtered records from NocoDB: {where}")
        try:
            records = self._list_pages(where)
        except NocoDBError as e:
            logger.warning(f"Filtered fetch failed: {e.message}")
            return FetchResult(error=e.message)

        logger.info(f"Fetched total {len(records)} filtered records")
        return FetchResult(records=records)

    def fetch_club_names(self) -> Dict[str, str]:
        """Fetch the club_id -> name mapping (single unpaginated request)."""
        logger.info(f"Fetching club names from clubs table: {self.clubs_table_id}")

        rows = extract_rows(self._get(self.clubs_table_id, None, "list_clubs"))

        club_names: Dict[str, str] = {}
        for row in rows:
            if not isinstance(row, dict):
                continue
            club_id = scalar_to_str(row.get("club_id"))
            name = row.get("name")
            if club_id and isinstance(name, str):
                club_names[club_id] = name

        logger.info(f"Loaded {len(club_names)} club names")
        return club_names
