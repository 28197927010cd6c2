"""Report generation endpoints."""

from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, status
import pytz

from ...config import settings
from ...core.metrics import track_report_generation
from ...schemas.report import ReportRequest, ReportResponse, ReportStatsResponse
from ...services.periods import Period
from ...services.report_service import ReportService

router = APIRouter(prefix="/reports")


def get_report_service() -> ReportService:
    """Dependency for ReportService built from settings."""
    return ReportService.from_settings(settings)


@router.post("/generate", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def generate_report(
    request: ReportRequest,
    report_service: ReportService = Depends(get_report_service)
):
    """
    Generate an ad-hoc report for the requested period.

    Args:
        request: Report generation request
        report_service: ReportService instance

    Returns:
        ReportResponse with file paths and statistics

    Raises:
        InvalidPeriodError: unknown period keyword (400)
        ReportGenerationError: a pipeline stage failed (500)
    """
    period = Period.from_command(request.period)
    Path(settings.reports_dir).mkdir(parents=True, exist_ok=True)

    now = datetime.now(pytz.UTC)
    csv_path, pdf_path, stats = report_service.generate_report(period, settings.reports_dir, now=now)
    track_report_generation(period.value, "api")

    return ReportResponse(
        period=period.value,
        label=report_service.get_date_range(period, now).label,
        csv_path=csv_path,
        pdf_path=pdf_path,
        stats=ReportStatsResponse(**asdict(stats)),
        created_at=now.isoformat()
    )
