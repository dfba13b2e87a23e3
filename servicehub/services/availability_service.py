from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from servicehub.core.config import settings
from servicehub.core.errors import BookingDataError, InvalidDateError
from servicehub.schemas.availability import AvailabilityResponse, SlotAvailability
from servicehub.utils.time_utils import (
    MINUTES_PER_DAY,
    TimeFormatError,
    format_minutes_to_time_display,
    intervals_overlap,
    parse_time_to_minutes,
)

logger = logging.getLogger(__name__)

def normalize_date(value: Optional[str]) -> str:
    """
    Validate a requested date and return it as YYYY-MM-DD.

    Accepts a plain date or an ISO datetime, in which case the date part is
    used.
    """
    if not value or not value.strip():
        raise InvalidDateError("Date parameter is required")

    value = value.strip()
    try:
        if "T" in value:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
        return datetime.strptime(value, "%Y-%m-%d").date().isoformat()
    except ValueError:
        raise InvalidDateError("Invalid date format. Use YYYY-MM-DD")

async def _booking_interval(store, booking: Dict[str, Any]) -> Dict[str, Any]:
    """Start/end minutes of a stored booking, using its own service duration."""
    try:
        start = parse_time_to_minutes(booking.get("appointment_time"))
    except TimeFormatError:
        logger.error(
            f"Booking {booking.get('id')} has an unreadable appointment_time "
            f"{booking.get('appointment_time')!r}; refusing to compute availability"
        )
        raise BookingDataError("Failed to check availability")

    duration = await store.get_duration_minutes(booking.get("service_id"))
    return {"booking": booking, "start": start, "end": start + duration}

def _conflict_reason(interval: Dict[str, Any]) -> str:
    booking = interval["booking"]
    # The end may run past midnight, which has no display form
    end = interval["end"]
    end_display = format_minutes_to_time_display(end) if end < MINUTES_PER_DAY else "end of day"
    return (
        f"Conflicts with {booking.get('service_name') or 'another booking'} "
        f"from {booking.get('appointment_time')} to {end_display}"
    )

async def evaluate_availability(
    store,
    date: Optional[str],
    service_id: Optional[str] = None,
    slots: Optional[List[str]] = None,
) -> AvailabilityResponse:
    """
    Work out which candidate start times are free on a date.

    Each slot is checked against every active booking on that date; a slot
    is unavailable as soon as one booking overlaps it, and that first
    booking (in storage order) is named in the reason.

    Args:
        store: Scheduling store used for bookings and service durations
        date: Requested date, YYYY-MM-DD or an ISO datetime
        service_id: Service being booked; unknown or missing uses the default duration
        slots: Candidate start times, defaults to the configured business hours

    Returns:
        AvailabilityResponse with one entry per slot in catalog order
    """
    formatted_date = normalize_date(date)
    slots = list(slots if slots is not None else settings.TIME_SLOTS)

    requested_duration = await store.get_duration_minutes(service_id)
    bookings = await store.get_active_bookings_for_date(formatted_date)
    intervals = [await _booking_interval(store, booking) for booking in bookings]

    availability: List[SlotAvailability] = []
    for slot in slots:
        slot_start = parse_time_to_minutes(slot)
        slot_end = slot_start + requested_duration

        conflict = next(
            (
                interval for interval in intervals
                if intervals_overlap(slot_start, slot_end, interval["start"], interval["end"])
            ),
            None,
        )
        if conflict:
            availability.append(SlotAvailability(time=slot, available=False, reason=_conflict_reason(conflict)))
        else:
            availability.append(SlotAvailability(time=slot, available=True))

    available_times = [slot.time for slot in availability if slot.available]
    logger.info(
        f"Availability for {formatted_date} (service={service_id or 'default'}, "
        f"{requested_duration} min): {len(available_times)}/{len(slots)} slots free"
    )

    return AvailabilityResponse(
        date=formatted_date,
        availability=availability,
        availableTimes=available_times,
    )
