"""Time arithmetic for appointment scheduling.

Bookings carry 12-hour display times ("9:00 AM") while time-off periods are
stored with 24-hour clock strings ("13:00:00"). Both are converted to
minutes since midnight at the boundary and compared as integers.
"""
import re

MINUTES_PER_DAY = 24 * 60
DEFAULT_DURATION_MINUTES = 60

_DISPLAY_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
_CLOCK_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")
_DURATION_RE = re.compile(r"(\d+)\s*(min|hour|hr)", re.IGNORECASE)


class TimeFormatError(ValueError):
    """Raised when a time string or minute count is outside the supported format."""


def parse_time_to_minutes(time_str: str) -> int:
    """
    Parse a display time such as "9:00 AM" to minutes since midnight.

    12:xx AM maps to 0:xx and 12:xx PM stays at 12:xx.
    """
    match = _DISPLAY_TIME_RE.match(time_str or "")
    if not match:
        raise TimeFormatError(f"Invalid display time: {time_str!r}")

    hour, minute, period = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if not 1 <= hour <= 12 or minute > 59:
        raise TimeFormatError(f"Invalid display time: {time_str!r}")

    if period == "PM" and hour < 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0

    return hour * 60 + minute


def format_minutes_to_time_display(minutes: int) -> str:
    """Format minutes since midnight as a display time, e.g. 810 -> "1:30 PM"."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise TimeFormatError(f"Minutes out of range for a display time: {minutes}")

    hours, mins = divmod(minutes, 60)
    period = "PM" if hours >= 12 else "AM"

    if hours > 12:
        hours -= 12
    elif hours == 0:
        hours = 12

    return f"{hours}:{mins:02d} {period}"


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open overlap of [start_a, end_a) and [start_b, end_b); touching ends do not count."""
    return start_a < end_b and end_a > start_b


def is_time_overlapping(time1: str, duration1: int, time2: str, duration2: int) -> bool:
    """
    Check whether two appointments overlap.

    Args:
        time1: Start of the first appointment, e.g. "9:00 AM"
        duration1: Length of the first appointment in minutes
        time2: Start of the second appointment
        duration2: Length of the second appointment in minutes

    Returns:
        True if the appointments share any minute
    """
    start1 = parse_time_to_minutes(time1)
    start2 = parse_time_to_minutes(time2)
    return intervals_overlap(start1, start1 + duration1, start2, start2 + duration2)


def parse_duration_to_minutes(duration_str: str) -> int:
    """
    Extract a duration from text such as "60 min" or "2 hours".

    Unrecognised text falls back to DEFAULT_DURATION_MINUTES; service data
    is entered by hand and is not always consistent.
    """
    match = _DURATION_RE.search(duration_str or "")
    if not match:
        return DEFAULT_DURATION_MINUTES

    value = int(match.group(1))
    unit = match.group(2).lower()
    if unit in ("hour", "hr"):
        return value * 60
    return value


def parse_clock_to_seconds(time_str: str) -> int:
    """Parse a 24-hour "HH:MM" or "HH:MM:SS" string to seconds since midnight."""
    match = _CLOCK_TIME_RE.match(time_str or "")
    if not match:
        raise TimeFormatError(f"Invalid 24-hour time: {time_str!r}")

    hour, minute, second = int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise TimeFormatError(f"Invalid 24-hour time: {time_str!r}")
    return hour * 3600 + minute * 60 + second


def parse_clock_to_minutes(time_str: str) -> int:
    """Parse a 24-hour "HH:MM" or "HH:MM:SS" string to whole minutes since midnight."""
    return parse_clock_to_seconds(time_str) // 60


def format_minutes_to_clock(minutes: int) -> str:
    """
    Format minutes as "HH:MM:SS" for storage comparisons.

    Values past midnight are not wrapped ("24:30:00"), so an appointment
    running over the end of the day still compares after every stored bound.
    """
    if minutes < 0:
        raise TimeFormatError(f"Negative minute count: {minutes}")
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}:00"


def display_time_to_24h(time_str: str) -> str:
    """Convert "9:00 AM" to "09:00" and "12:30 AM" to "00:30"."""
    hours, mins = divmod(parse_time_to_minutes(time_str), 60)
    return f"{hours:02d}:{mins:02d}"
