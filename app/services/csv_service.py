"""CSV export of report records."""

import csv
from typing import Any, Dict, List
import logging

from .periods import get_timezone
from .record_fields import (
    extract_aura_percent,
    extract_club_id,
    format_percent,
    parse_offset_timestamp,
    scalar_to_str,
    text_field,
)

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Телефон",
    "Имя",
    "Дата визита",
    "Продолжительность",
    "Комплекс",
    "Аура",
    "Дата рождения",
    "Пол",
]
CSV_DELIMITER = ";"
# utf-8-sig writes the BOM Excel needs to detect the encoding
CSV_ENCODING = "utf-8-sig"
DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_civil_time(value: str, tz=None) -> str:
    """Convert an offset-qualified timestamp to civil display time.

    Unparsable values are returned unchanged.
    """
    parsed = parse_offset_timestamp(value)
    if parsed is None:
        return value
    return parsed.astimezone(get_timezone(tz)).strftime(DISPLAY_FORMAT)


def build_row(record: Dict[str, Any], lookup: Dict[str, str], tz=None) -> List[str]:
    club_id = extract_club_id(record) or ""
    percent = extract_aura_percent(record)
    date_visit = record.get("date_visit")

    return [
        scalar_to_str(record.get("phone")),
        text_field(record, "name"),
        to_civil_time(date_visit, tz) if isinstance(date_visit, str) else "",
        scalar_to_str(record.get("duration")),
        lookup.get(club_id, club_id),
        format_percent(percent) if percent is not None else "",
        text_field(record, "birth_date"),
        text_field(record, "sex"),
    ]


def render_csv(records: List[Any], lookup: Dict[str, str], path: str, tz=None) -> str:
    """Write records to ``path`` as a semicolon-separated CSV with BOM.

    Every dict record is written, including those whose club is missing
    from ``lookup`` (the raw club_id is shown instead).
    """
    logger.info(f"Generating CSV report to: {path}")

    written = 0
    with open(path, "w", encoding=CSV_ENCODING, newline="") as f:
        writer = csv.writer(f, delimiter=CSV_DELIMITER)
        writer.writerow(CSV_HEADERS)
        for record in records:
            if not isinstance(record, dict):
                continue
            writer.writerow(build_row(record, lookup, tz))
            written += 1

    logger.info(f"CSV report generated with {written} records")
    return path
