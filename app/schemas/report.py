from pydantic import BaseModel
from typing import List


class ReportRequest(BaseModel):
    period: str = "yesterday"  # today, yesterday, week, month, quarter, halfyear, year


class ClubStatsResponse(BaseModel):
    club_id: str
    club_name: str
    total_generations: int
    unique_clients: int
    percentage: float


class ReportStatsResponse(BaseModel):
    total_records: int
    unique_clients: int
    low_aura: int
    normal_aura: int
    high_aura: int
    club_stats: List[ClubStatsResponse]
    avg_generation_time: float
    done_count: int
    process_count: int
    done_percentage: float
    process_percentage: float


class ReportResponse(BaseModel):
    period: str
    label: str
    csv_path: str
    pdf_path: str
    stats: ReportStatsResponse
    created_at: str
