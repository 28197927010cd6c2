from .slack import SlackCommand
from .report import ReportRequest, ReportResponse, ReportStatsResponse, ClubStatsResponse

__all__ = [
    "SlackCommand",
    "ReportRequest",
    "ReportResponse",
    "ReportStatsResponse",
    "ClubStatsResponse",
]
