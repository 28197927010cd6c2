"""Daily report schedule and its persisted "last sent" state."""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional
import logging

from .periods import civil_now, get_timezone

logger = logging.getLogger(__name__)

LAST_SENT_KEY = "auroscope:scheduler:last_sent_date"
DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class ScheduleState:
    """Civil date (YYYY-MM-DD) of the last successful scheduled delivery."""

    last_sent_date: Optional[str] = None


class DailySchedule:
    """Fires once per civil day, on the first tick at or after ``schedule_time`` (HH:MM).

    Late ticks still fire as long as nothing was sent that day.
    """

    def __init__(self, schedule_time: str, tz=None):
        self.schedule_time = schedule_time
        hour, minute = map(int, schedule_time.split(":"))
        self.fire_at = time(hour, minute)
        self.tz = get_timezone(tz)

    def is_due(self, now: datetime, state: ScheduleState) -> bool:
        local = civil_now(self.tz, now)
        if local.time().replace(second=0, microsecond=0) < self.fire_at:
            return False
        return state.last_sent_date != local.strftime(DATE_FORMAT)

    def mark_sent(self, now: datetime) -> ScheduleState:
        return ScheduleState(last_sent_date=civil_now(self.tz, now).strftime(DATE_FORMAT))


class ScheduleStateStore:
    """Keeps ``ScheduleState`` in Redis so it survives between beat ticks."""

    def __init__(self, redis_client, key: str = LAST_SENT_KEY):
        self.redis = redis_client
        self.key = key

    def load(self) -> ScheduleState:
        return ScheduleState(last_sent_date=self.redis.get(self.key))

    def save(self, state: ScheduleState) -> None:
        if state.last_sent_date is None:
            self.redis.delete(self.key)
        else:
            self.redis.set(self.key, state.last_sent_date)
        logger.debug(f"Schedule state saved: {state}")
