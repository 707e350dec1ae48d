import calendar
from datetime import datetime, timezone

from pydantic import BaseModel

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


class Countdown(BaseModel):
    days: int
    hours: int
    minutes: int
    seconds: int
    deadline: datetime


def _deadline_in_year(year: int, month: int, day: int, tzinfo) -> datetime:  # noqa: ANN001
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, min(day, last_day), 23, 59, 59, tzinfo=tzinfo)


def next_deadline(now: datetime, *, month: int, day: int) -> datetime:
    """End of the promotion day this year, or next year once it has passed."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    target = _deadline_in_year(now.year, month, day, now.tzinfo)
    if now > target:
        target = _deadline_in_year(now.year + 1, month, day, now.tzinfo)
    return target


def time_until(deadline: datetime, now: datetime) -> Countdown:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    remaining = max(0, int((deadline - now).total_seconds()))
    days, remaining = divmod(remaining, SECONDS_PER_DAY)
    hours, remaining = divmod(remaining, SECONDS_PER_HOUR)
    minutes, seconds = divmod(remaining, SECONDS_PER_MINUTE)
    return Countdown(days=days, hours=hours, minutes=minutes, seconds=seconds, deadline=deadline)
