import calendar
import math
from datetime import date, datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock for the orchestrators."""
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: int = 0, high: int = 100) -> int:
    """Round half-up and clamp into [low, high]."""
    return max(low, min(high, round_half_up(value)))


def months_ago(day: date, months: int) -> date:
    """Same day `months` calendar months earlier, clamped to the month's last day."""
    total = day.year * 12 + (day.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def month_label(day: date) -> str:
    """Short month label, e.g. `Mar 25`."""
    return day.strftime("%b %y")
