"""Report generation service."""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import logging

from ..core.exceptions import NocoDBError, ReportGenerationError
from ..core.metrics import track_report_generation_time
from .aggregator import ReportStats, aggregate
from .chart_service import render_chart
from .csv_service import render_csv
from .nocodb_service import NocoDBClient
from .periods import DateRange, Period, civil_now, get_timezone, resolve
from .record_fetcher import RecordFetcher

logger = logging.getLogger(__name__)


class ReportService:
    """Resolve a period, fetch its records, aggregate and render them."""

    def __init__(
        self,
        nocodb_client: NocoDBClient,
        created_field: str = "CreatedAt1",
        updated_field: str = "UpdatedAt1",
        tz=None,
    ):
        self.nocodb = nocodb_client
        self.created_field = created_field
        self.updated_field = updated_field
        self.tz = get_timezone(tz)
        self.fetcher = RecordFetcher(nocodb_client, created_field)

    @classmethod
    def from_settings(cls, settings) -> "ReportService":
        client = NocoDBClient(
            base_url=settings.nocodb_url,
            token=settings.nocodb_token,
            table_id=settings.nocodb_table_id,
            clubs_table_id=settings.nocodb_clubs_table_id,
            timeout=settings.nocodb_timeout,
            page_size=settings.nocodb_page_size,
        )
        return cls(
            client,
            created_field=settings.nocodb_created_field,
            updated_field=settings.nocodb_updated_field,
            tz=settings.timezone,
        )

    def get_date_range(self, period: Period, now: Optional[datetime] = None) -> DateRange:
        return resolve(period, now=now, tz=self.tz)

    def generate_report(
        self,
        period: Period,
        output_dir: str,
        now: Optional[datetime] = None,
    ) -> Tuple[str, str, ReportStats]:
        """Generate full report (CSV + PDF) for a given period.

        Returns:
            (csv_path, pdf_path, stats)

        Raises:
            ReportGenerationError: naming the stage that failed
        """
        date_range = self.get_date_range(period, now)
        logger.info(f"Generating report for period: {date_range.label}")

        with track_report_generation_time(period.value):
            club_names = self._fetch_lookup()
            records = self._fetch_records(date_range)

            if not records:
                logger.info("No data found for the period")

            stats = aggregate(records, club_names, self.created_field, self.updated_field)

            base_path = self._base_path(output_dir, period, date_range, now)
            csv_path = self._write_csv(records, club_names, f"{base_path}.csv")
            pdf_path = self._write_pdf(records, f"{base_path}.pdf")

        logger.info(
            f"Report generated: csv={csv_path} pdf={pdf_path} "
            f"records={stats.total_records} unique_clients={stats.unique_clients}"
        )
        return csv_path, pdf_path, stats

    def generate_csv_report(self, period: Period, output_dir: str, now: Optional[datetime] = None) -> str:
        """Generate only the CSV report."""
        date_range = self.get_date_range(period, now)
        logger.info(f"Generating CSV report for period: {date_range.label}")

        club_names = self._fetch_lookup()
        records = self._fetch_records(date_range)
        base_path = self._base_path(output_dir, period, date_range, now)
        return self._write_csv(records, club_names, f"{base_path}.csv")

    def generate_pdf_report(self, period: Period, output_dir: str, now: Optional[datetime] = None) -> str:
        """Generate only the PDF report."""
        date_range = self.get_date_range(period, now)
        logger.info(f"Generating PDF report for period: {date_range.label}")

        records = self._fetch_records(date_range)
        base_path = self._base_path(output_dir, period, date_range, now)
        return self._write_pdf(records, f"{base_path}.pdf")

    def _fetch_lookup(self) -> Dict[str, str]:
        try:
            return self.fetcher.fetch_lookup()
        except NocoDBError as e:
            raise ReportGenerationError("lookup", e.message) from e

    def _fetch_records(self, date_range: DateRange) -> List[Any]:
        try:
            return self.fetcher.fetch_for_range(date_range)
        except NocoDBError as e:
            raise ReportGenerationError("fetch", e.message) from e

    def _write_csv(self, records: List[Any], club_names: Dict[str, str], path: str) -> str:
        try:
            csv_path = render_csv(records, club_names, path, tz=self.tz)
        except OSError as e:
            raise ReportGenerationError("csv", str(e)) from e
        logger.info(f"CSV report generated: {csv_path}")
        return csv_path

    def _write_pdf(self, records: List[Any], path: str) -> str:
        try:
            pdf_path = render_chart(records, path, time_field=self.created_field)
        except OSError as e:
            raise ReportGenerationError("pdf", str(e)) from e
        logger.info(f"PDF report generated: {pdf_path}")
        return pdf_path

    def _base_path(
        self,
        output_dir: str,
        period: Period,
        date_range: DateRange,
        now: Optional[datetime],
    ) -> str:
        """Output path without extension, unique per period, range start and generation time."""
        start_local = date_range.start.astimezone(self.tz)
        generated_at = civil_now(self.tz, now)
        name = (
            f"report_{period.value}_{start_local.strftime('%Y%m%d')}"
            f"_{generated_at.strftime('%H%M%S%f')}"
        )
        return str(Path(output_dir) / name)
