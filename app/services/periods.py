"""Report periods and their resolution into concrete UTC time windows."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional

import pytz

from ..core.exceptions import InvalidPeriodError

DEFAULT_TIMEZONE = "Europe/Moscow"

LABEL_DATE_FORMAT = "%d.%m.%Y"
END_OF_DAY = time(23, 59, 59)


class Period(str, Enum):
    """Report period; the value doubles as the slash command keyword."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_7_DAYS = "week"
    LAST_30_DAYS = "month"
    LAST_90_DAYS = "quarter"
    LAST_180_DAYS = "halfyear"
    LAST_365_DAYS = "year"

    @classmethod
    def from_command(cls, text: str) -> "Period":
        """Parse a command keyword such as ``week`` or ``Today``."""
        keyword = (text or "").strip().lower()
        for period in cls:
            if period.value == keyword:
                return period
        raise InvalidPeriodError(text)


# Rolling windows ending today, length in civil days
ROLLING_DAYS = {
    Period.LAST_7_DAYS: 7,
    Period.LAST_30_DAYS: 30,
    Period.LAST_90_DAYS: 90,
    Period.LAST_180_DAYS: 180,
    Period.LAST_365_DAYS: 365,
}


@dataclass(frozen=True)
class DateRange:
    """Inclusive UTC instant range with a display label."""

    start: datetime
    end: datetime
    label: str


def get_timezone(tz=None):
    """Return a pytz timezone from a name, a tzinfo or the default."""
    if tz is None:
        return pytz.timezone(DEFAULT_TIMEZONE)
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def civil_now(tz=None, now: Optional[datetime] = None) -> datetime:
    """Current (or given) instant expressed in the civil timezone."""
    tz = get_timezone(tz)
    if now is None:
        now = datetime.now(pytz.UTC)
    elif now.tzinfo is None:
        now = pytz.UTC.localize(now)
    return now.astimezone(tz)


def _day_bounds(tz, first_day: date, last_day: date):
    start_local = tz.localize(datetime.combine(first_day, time(0, 0, 0)))
    end_local = tz.localize(datetime.combine(last_day, END_OF_DAY))
    return start_local.astimezone(pytz.UTC), end_local.astimezone(pytz.UTC)


def resolve(period: Period, now: Optional[datetime] = None, tz=None) -> DateRange:
    """Resolve a period into a ``DateRange`` anchored to the civil timezone.

    Week/Month/Quarter/HalfYear/Year are rolling windows of N civil days
    ending with today (today included).
    """
    tz = get_timezone(tz)
    today = civil_now(tz, now).date()

    if period == Period.TODAY:
        start, end = _day_bounds(tz, today, today)
        label = f"Сегодня ({today.strftime(LABEL_DATE_FORMAT)})"
    elif period == Period.YESTERDAY:
        yesterday = today - timedelta(days=1)
        start, end = _day_bounds(tz, yesterday, yesterday)
        label = f"Вчера ({yesterday.strftime(LABEL_DATE_FORMAT)})"
    else:
        days = ROLLING_DAYS[period]
        first_day = today - timedelta(days=days - 1)
        start, end = _day_bounds(tz, first_day, today)
        label = (
            f"Последние {days} дней "
            f"({first_day.strftime(LABEL_DATE_FORMAT)} - {today.strftime(LABEL_DATE_FORMAT)})"
        )

    return DateRange(start=start, end=end, label=label)
