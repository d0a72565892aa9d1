"""
Calendar helpers: ISO date arithmetic, month enumeration and weekday labels.

Dates travel through the engine as ISO strings (YYYY-MM-DD) and times as
24h HH:MM strings, the same representation the storage layer persists.
"""
import calendar
from datetime import date, datetime, timedelta
from typing import List

from washplanner.models.customers import Weekday


# Indexed by date.weekday(): Monday == 0
_WEEKDAYS_BY_INDEX = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
)


def parse_iso_date(iso_date: str) -> date:
    """Parse YYYY-MM-DD into a date; raises ValueError on malformed input."""
    return datetime.strptime(iso_date, "%Y-%m-%d").date()


def to_iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def generate_month_dates(year: int, month: int) -> List[str]:
    """
    Every calendar day of a month, ascending.
    
    Args:
        year: Four-digit year
        month: Month number (1-12)
    
    Returns:
        ISO dates from the 1st to the last day of the month inclusive
    """
    days_in_month = calendar.monthrange(year, month)[1]
    return [to_iso_date(date(year, month, day)) for day in range(1, days_in_month + 1)]


def weekday_name(iso_date: str) -> Weekday:
    """Weekday label of an ISO date, in the customers' preferred-day vocabulary."""
    return _WEEKDAYS_BY_INDEX[parse_iso_date(iso_date).weekday()]


def add_days(iso_date: str, days: int) -> str:
    """Calendar-correct addition; crosses month and year boundaries."""
    return to_iso_date(parse_iso_date(iso_date) + timedelta(days=days))


def days_between(start: str, end: str) -> int:
    """Signed number of days from `start` to `end`."""
    return (parse_iso_date(end) - parse_iso_date(start)).days


def time_to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(total_minutes: int) -> str:
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def generate_time_slots(start: str, end: str, step_minutes: int, include_end: bool = False) -> List[str]:
    """
    Times from `start` up to `end`, every `step_minutes`. `end` itself is
    only included when `include_end` is set and it falls on a step.
    
    Example:
        generate_time_slots("07:00", "08:00", 30) -> ["07:00", "07:30"]
        generate_time_slots("07:00", "08:00", 30, include_end=True) -> ["07:00", "07:30", "08:00"]
    """
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")
    stop = time_to_minutes(end) + (1 if include_end else 0)
    return [minutes_to_time(m) for m in range(time_to_minutes(start), stop, step_minutes)]
