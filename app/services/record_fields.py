"""Extraction helpers for loosely-typed NocoDB record fields.

Records come back from NocoDB as plain dicts whose fields are stored
inconsistently (numbers as strings, JSON embedded in strings, several
timestamp layouts). Each helper is a short chain of attempts that returns
``None`` on failure instead of raising, so a malformed field never aborts
processing of the record.
"""

import json
import math
from datetime import datetime
from typing import Any, Dict, Optional

import pytz

# "2024-01-01 10:00:00+0000" (also accepts "+00:00")
OFFSET_FORMAT = "%Y-%m-%d %H:%M:%S%z"
# "2024-01-01 10:00:00", assumed to be UTC
NAIVE_FORMAT = "%Y-%m-%d %H:%M:%S"

AURA_FIELDS = ("text_aura", "aura")


def scalar_to_str(value: Any) -> str:
    """Stringify a string or number; everything else becomes ``""``."""
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def text_field(record: Dict[str, Any], field: str) -> str:
    """Return a string field, or ``""`` when absent or not a string."""
    value = record.get(field)
    return value if isinstance(value, str) else ""


def extract_phone(record: Dict[str, Any]) -> Optional[str]:
    phone = scalar_to_str(record.get("phone"))
    return phone or None


def extract_club_id(record: Dict[str, Any]) -> Optional[str]:
    club_id = scalar_to_str(record.get("club_id"))
    return club_id or None


def parse_percent(value: Any) -> Optional[float]:
    """Parse ``91``, ``91.5``, ``"91%"`` or ``" 91 % "`` into a float."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if not isinstance(value, str):
        return None

    cleaned = value.strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1].strip()
    try:
        parsed = float(cleaned)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def percent_from_container(value: Any) -> Optional[float]:
    """Extract a percent from an aura field value.

    Accepts an object with a ``percent`` key, a string holding such an
    object as JSON, or a bare percentage string.
    """
    if isinstance(value, dict):
        return parse_percent(value.get("percent"))

    if isinstance(value, str) and value.strip():
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            return parse_percent(parsed.get("percent"))
        return parse_percent(value)

    return None


def extract_aura_percent(record: Dict[str, Any]) -> Optional[float]:
    """Aura percent from ``text_aura``, falling back to ``aura``."""
    for field in AURA_FIELDS:
        percent = percent_from_container(record.get(field))
        if percent is not None:
            return percent
    return None


def format_percent(value: float) -> str:
    """Render ``91.0`` as ``91`` and ``91.5`` as ``91.5``."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def parse_offset_timestamp(value: Any) -> Optional[datetime]:
    """Parse an offset-qualified timestamp, keeping its original offset."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), OFFSET_FORMAT)
    except ValueError:
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a timestamp into an aware UTC datetime.

    Tries the offset-qualified format first, then the naive format taken
    as UTC.
    """
    parsed = parse_offset_timestamp(value)
    if parsed is not None:
        return parsed.astimezone(pytz.UTC)

    if not isinstance(value, str):
        return None
    try:
        return pytz.UTC.localize(datetime.strptime(value.strip(), NAIVE_FORMAT))
    except ValueError:
        return None
