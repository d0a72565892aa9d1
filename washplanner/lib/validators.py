"""
Intake validation helpers for customer and appointment fields.
"""
import re
from typing import Iterable

from washplanner.lib.dates import parse_iso_date, time_to_minutes
from washplanner.models.customers import PreferredPeriod, Weekday


_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_24H_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")
_SA_MOBILE_RE = re.compile(r"^05\d{8}$")
_SA_MOBILE_INTL_RE = re.compile(r"^\+966\s?5\d{8}$")

PREFERRED_DAYS_REQUIRED = 3


def validate_preferred_days(days: Iterable[str]) -> bool:
    """Exactly three distinct, known weekday labels."""
    labels = [getattr(day, "value", day) for day in days]
    if len(labels) != PREFERRED_DAYS_REQUIRED:
        return False
    if len(set(labels)) != PREFERRED_DAYS_REQUIRED:
        return False
    valid = {day.value for day in Weekday}
    return all(label in valid for label in labels)


def validate_preferred_period(period: str) -> bool:
    return period in {p.value for p in PreferredPeriod}


def is_valid_iso_date(value: str) -> bool:
    """
    Basic YYYY-MM-DD check that also rejects impossible calendar dates.
    
    Example:
        is_valid_iso_date("2025-02-29") -> False
    """
    if not _ISO_DATE_RE.match(value):
        return False
    try:
        parse_iso_date(value)
    except ValueError:
        return False
    return True


def is_valid_time_24h(value: str) -> bool:
    return bool(_TIME_24H_RE.match(value))


def is_within_operating_hours(value: str) -> bool:
    """Inside 07:00-12:00 or 13:00-19:00, both ends inclusive."""
    if not is_valid_time_24h(value):
        return False
    minutes = time_to_minutes(value)
    morning = 7 * 60 <= minutes <= 12 * 60
    evening = 13 * 60 <= minutes <= 19 * 60
    return morning or evening


def is_valid_saudi_mobile(value: str) -> bool:
    """Local format: 10 digits starting with 05."""
    return bool(_SA_MOBILE_RE.match(value.strip()))


def is_valid_saudi_mobile_intl(value: str) -> bool:
    return bool(_SA_MOBILE_INTL_RE.match(value.strip()))


def normalize_saudi_mobile(value: str) -> str:
    """Convert +9665XXXXXXXX / 009665XXXXXXXX into the local 05XXXXXXXX form."""
    compact = re.sub(r"\s+", "", value)
    if re.match(r"^\+9665\d{8}$", compact):
        return "0" + compact[4:]
    if re.match(r"^009665\d{8}$", compact):
        return "0" + compact[6:]
    return compact


def is_valid_daily_capacity(morning: int, evening: int, daily_limit: int = 33) -> bool:
    return morning >= 0 and evening >= 0 and morning + evening <= daily_limit
