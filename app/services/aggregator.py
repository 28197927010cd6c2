"""Statistics over fetched generation records."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from .record_fields import (
    extract_aura_percent,
    extract_club_id,
    extract_phone,
    parse_timestamp,
)

LOW_AURA_THRESHOLD = 60.0
HIGH_AURA_THRESHOLD = 80.0

STATUS_DONE = "done"
STATUS_PROCESS = "process"


@dataclass
class ClubStats:
    club_id: str
    club_name: str
    total_generations: int = 0
    unique_clients: int = 0
    percentage: float = 0.0


@dataclass
class ReportStats:
    total_records: int = 0
    unique_clients: int = 0
    low_aura: int = 0
    normal_aura: int = 0
    high_aura: int = 0
    club_stats: List[ClubStats] = field(default_factory=list)
    avg_generation_time: float = 0.0
    done_count: int = 0
    process_count: int = 0
    done_percentage: float = 0.0
    process_percentage: float = 0.0


def aura_bucket(percent: float) -> str:
    """Return ``low`` (<60), ``normal`` (60..80 inclusive) or ``high`` (>80)."""
    if percent < LOW_AURA_THRESHOLD:
        return "low"
    if percent <= HIGH_AURA_THRESHOLD:
        return "normal"
    return "high"


def generation_seconds(
    record: Dict[str, Any], created_field: str, updated_field: str
) -> Optional[float]:
    """Seconds between creation and last update, or None if either is unusable."""
    created = parse_timestamp(record.get(created_field))
    updated = parse_timestamp(record.get(updated_field))
    if created is None or updated is None:
        return None
    return (updated - created).total_seconds()


def _share(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def aggregate(
    records: List[Any],
    lookup: Dict[str, str],
    created_field: str = "CreatedAt1",
    updated_field: str = "UpdatedAt1",
) -> ReportStats:
    """Compute report statistics.

    Only records whose ``club_id`` is present in ``lookup`` contribute to
    unique clients, aura buckets, club stats, statuses and generation time.
    ``total_records`` counts every fetched record.
    """
    stats = ReportStats(total_records=len(records))

    unique_phones: Set[str] = set()
    club_counts: Dict[str, int] = {}
    club_phones: Dict[str, Set[str]] = {}
    time_total = 0.0
    time_count = 0
    counted = 0

    for record in records:
        if not isinstance(record, dict):
            continue
        club_id = extract_club_id(record)
        if club_id is None or club_id not in lookup:
            continue
        counted += 1

        phone = extract_phone(record)
        if phone:
            unique_phones.add(phone)

        percent = extract_aura_percent(record)
        if percent is not None:
            bucket = aura_bucket(percent)
            if bucket == "low":
                stats.low_aura += 1
            elif bucket == "normal":
                stats.normal_aura += 1
            else:
                stats.high_aura += 1

        club_counts[club_id] = club_counts.get(club_id, 0) + 1
        phones = club_phones.setdefault(club_id, set())
        if phone:
            phones.add(phone)

        status = record.get("status")
        if isinstance(status, str):
            status = status.strip().lower()
            if status == STATUS_DONE:
                stats.done_count += 1
            elif status == STATUS_PROCESS:
                stats.process_count += 1

        seconds = generation_seconds(record, created_field, updated_field)
        if seconds is not None:
            time_total += seconds
            time_count += 1

    stats.unique_clients = len(unique_phones)
    stats.avg_generation_time = time_total / time_count if time_count else 0.0
    stats.done_percentage = _share(stats.done_count, counted)
    stats.process_percentage = _share(stats.process_count, counted)

    total_generations = sum(club_counts.values())
    club_stats = [
        ClubStats(
            club_id=club_id,
            club_name=lookup[club_id],
            total_generations=count,
            unique_clients=len(club_phones[club_id]),
            percentage=_share(count, total_generations),
        )
        for club_id, count in club_counts.items()
    ]
    # sorted() is stable: ties keep first-seen order
    stats.club_stats = sorted(club_stats, key=lambda c: c.total_generations, reverse=True)

    return stats
