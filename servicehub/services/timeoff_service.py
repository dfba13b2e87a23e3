from typing import Any, Dict, List, Optional
import logging

from servicehub.core.config import settings
from servicehub.core.errors import InvalidTimeError, TimeOffNotFoundError
from servicehub.schemas.time_off import TimeOffCreate, TimeOffUpdate
from servicehub.services.availability_service import normalize_date
from servicehub.utils.time_utils import (
    TimeFormatError,
    display_time_to_24h,
    format_minutes_to_clock,
    intervals_overlap,
    parse_clock_to_minutes,
    parse_clock_to_seconds,
)

logger = logging.getLogger(__name__)

BLOCKED_PERIOD_MESSAGE = "The selected time conflicts with a blocked period"

def normalize_start_time(value: Optional[str]) -> str:
    """Accept "14:00" or "2:00 PM" and return 24-hour "HH:MM"."""
    if not value or not value.strip():
        raise InvalidTimeError("Time parameter is required")
    value = value.strip()
    try:
        if value[-2:].upper() in ("AM", "PM"):
            return display_time_to_24h(value)
        hours, mins = divmod(parse_clock_to_minutes(value), 60)
        return f"{hours:02d}:{mins:02d}"
    except TimeFormatError:
        raise InvalidTimeError("Invalid time format. Use HH:MM or H:MM AM/PM")

def period_conflicts(period: Dict[str, Any], date: str, start_minutes: int, end_minutes: int) -> bool:
    """
    Whether a single time-off period blocks [start_minutes, end_minutes) on ``date``.

    Stored bounds are compared to the second, the same precision as the
    store's "HH:MM:SS" string predicate.
    """
    if not period["start_date"] <= date <= period["end_date"]:
        return False
    if period.get("is_all_day"):
        return True
    if period.get("start_time") and period.get("end_time"):
        return intervals_overlap(
            start_minutes * 60,
            end_minutes * 60,
            parse_clock_to_seconds(period["start_time"]),
            parse_clock_to_seconds(period["end_time"]),
        )
    return False

async def manual_time_off_conflict_check(store, date: str, start_minutes: int, end_minutes: int) -> bool:
    """Recompute the blackout predicate in process from the stored periods."""
    periods = await store.get_time_off_overlapping(date)
    return any(period_conflicts(period, date, start_minutes, end_minutes) for period in periods)

async def check_time_off_conflict(
    store,
    booking_date: str,
    start_time: str,
    duration_minutes: int,
    fail_open: Optional[bool] = None,
) -> bool:
    """
    Check whether a booking interval falls into any time-off period.

    The store's own predicate is tried first. If it raises, the periods for
    the date are fetched and checked here instead. If that fails too, the
    result is decided by ``fail_open`` (TIMEOFF_CHECK_FAIL_OPEN by default):
    fail-open reports no conflict, fail-closed reports a conflict.

    Args:
        store: Scheduling store
        booking_date: Date in YYYY-MM-DD format
        start_time: Start in 24-hour HH:MM format
        duration_minutes: Booking length in minutes

    Returns:
        True if the booking would overlap a blocked period
    """
    if fail_open is None:
        fail_open = settings.TIMEOFF_CHECK_FAIL_OPEN

    start_minutes = parse_clock_to_minutes(start_time)
    end_minutes = start_minutes + duration_minutes
    booking_start_time = format_minutes_to_clock(start_minutes)
    booking_end_time = format_minutes_to_clock(end_minutes)

    try:
        return bool(await store.check_conflict(booking_date, booking_start_time, booking_end_time))
    except Exception as e:
        logger.warning(f"Time off conflict predicate failed, falling back to manual check: {e}")

    try:
        return await manual_time_off_conflict_check(store, booking_date, start_minutes, end_minutes)
    except Exception as e:
        logger.error(
            f"Manual time off conflict check failed for {booking_date} {booking_start_time}: {e}; "
            f"treating as {'no conflict' if fail_open else 'conflict'}"
        )
        return not fail_open

async def list_time_off(store, from_date: Optional[str] = None, to_date: Optional[str] = None) -> List[Dict[str, Any]]:
    if from_date:
        from_date = normalize_date(from_date)
    if to_date:
        to_date = normalize_date(to_date)
    return await store.list_time_off(from_date, to_date)

async def create_time_off(store, time_off_in: TimeOffCreate, created_by: Optional[str]) -> Dict[str, Any]:
    return await store.create_time_off(time_off_in.to_document(), created_by)

async def update_time_off(store, time_off_id: str, time_off_update: TimeOffUpdate) -> Dict[str, Any]:
    """
    Apply a partial update to a time-off period.

    The merged period is validated as a whole so an update cannot leave a
    partial-day period without times or with an inverted range.
    """
    current = await store.get_time_off(time_off_id)
    if not current:
        raise TimeOffNotFoundError("Time off period not found")

    update_data = time_off_update.to_document()
    if not update_data:
        return current

    # Raises pydantic.ValidationError when the merged period is inconsistent
    merged = TimeOffCreate.model_validate({**current, **update_data})
    updated = await store.update_time_off(time_off_id, merged.to_document())
    if not updated:
        raise TimeOffNotFoundError("Time off period not found")
    return updated

async def delete_time_off(store, time_off_id: str) -> None:
    if not await store.delete_time_off(time_off_id):
        raise TimeOffNotFoundError("Time off period not found")
