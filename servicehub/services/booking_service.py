from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from servicehub.core.errors import (
    BookingAccessError,
    BookingNotFoundError,
    BookingStateError,
    InvalidTimeError,
    TimeOffConflictError,
)
from servicehub.schemas.booking import BookingStatus
from servicehub.services.availability_service import normalize_date
from servicehub.services.timeoff_service import BLOCKED_PERIOD_MESSAGE, check_time_off_conflict
from servicehub.utils.time_utils import (
    TimeFormatError,
    display_time_to_24h,
    format_minutes_to_time_display,
    parse_time_to_minutes,
)

logger = logging.getLogger(__name__)

CLOSED_STATUSES = [BookingStatus.CANCELLED.value, BookingStatus.COMPLETED.value]

async def _get_owned_booking(store, booking_id: str, user_id: Optional[str]) -> Dict[str, Any]:
    booking = await store.get_booking(booking_id)
    if not booking:
        raise BookingNotFoundError("Appointment not found")

    # Only enforced when the caller identifies the acting user
    if user_id and booking.get("user_id") != user_id:
        raise BookingAccessError("Not authorized to change this appointment")

    return booking

def _summary(booking: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": booking["id"],
        "serviceId": booking.get("service_id"),
        "serviceName": booking.get("service_name"),
        "date": booking["appointment_date"],
        "time": booking["appointment_time"],
        "status": booking["status"],
    }

async def reschedule_booking(
    store,
    booking_id: str,
    appointment_date: str,
    appointment_time: str,
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Move a booking to a new date and time.

    Args:
        store: Scheduling store
        booking_id: The ID of the booking to reschedule
        appointment_date: New date (YYYY-MM-DD)
        appointment_time: New start time (format: H:MM AM/PM)
        user_id: Acting user; when given they must own the booking

    Returns:
        Summary of the rescheduled appointment
    """
    new_date = normalize_date(appointment_date)
    try:
        # Round-trip through minutes so "09:00 am" is stored as "9:00 AM"
        new_time = format_minutes_to_time_display(parse_time_to_minutes(appointment_time))
    except TimeFormatError:
        raise InvalidTimeError("Invalid time format. Use H:MM AM/PM")

    booking = await _get_owned_booking(store, booking_id, user_id)

    # Can't reschedule cancelled or completed bookings
    if booking["status"] in CLOSED_STATUSES:
        raise BookingStateError(f"Cannot reschedule an appointment that is {booking['status']}")

    duration = await store.get_duration_minutes(booking.get("service_id"))
    if await check_time_off_conflict(store, new_date, display_time_to_24h(new_time), duration):
        logger.info(f"Reschedule of booking {booking_id} to {new_date} {new_time} blocked by time off")
        raise TimeOffConflictError(BLOCKED_PERIOD_MESSAGE)

    updated = await store.update_booking(
        booking_id,
        {"appointment_date": new_date, "appointment_time": new_time},
    )
    if not updated:
        raise BookingNotFoundError("Appointment not found")

    logger.info(
        f"Booking {booking_id} rescheduled from {booking['appointment_date']} {booking['appointment_time']} "
        f"to {new_date} {new_time}"
    )
    return _summary(updated)

async def cancel_booking(
    store,
    booking_id: str,
    user_id: Optional[str] = None,
    reason: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Cancel an active booking, freeing its slot.
    """
    booking = await _get_owned_booking(store, booking_id, user_id)

    if booking["status"] in CLOSED_STATUSES:
        raise BookingStateError(f"Cannot cancel an appointment that is {booking['status']}")

    update_data = {"status": BookingStatus.CANCELLED.value}
    if reason:
        update_data["cancellation_reason"] = reason

    updated = await store.update_booking(booking_id, update_data)
    if not updated:
        raise BookingNotFoundError("Appointment not found")

    logger.info(f"Booking {booking_id} cancelled")
    return _summary(updated)

async def list_all_bookings(store) -> List[Dict[str, Any]]:
    return await store.list_bookings()

async def get_customer_bookings(store, customer_id: str) -> List[Dict[str, Any]]:
    return await store.get_bookings_for_user(customer_id)

async def complete_past_bookings(store, today: Optional[str] = None) -> Dict[str, Any]:
    """
    Close out confirmed bookings whose date has passed.

    Args:
        store: Scheduling store
        today: Cut-off date (YYYY-MM-DD); defaults to the current UTC date.
            Bookings on this date are left confirmed.

    Returns:
        Count and id/service_name/appointment_date of each updated booking
    """
    if today is None:
        today = datetime.utcnow().date().isoformat()
    else:
        today = normalize_date(today)

    completed = await store.complete_past_bookings(today)
    updated_bookings = [
        {
            "id": booking["id"],
            "service_name": booking.get("service_name"),
            "appointment_date": booking["appointment_date"],
        }
        for booking in completed
    ]

    logger.info(f"Updated {len(updated_bookings)} past bookings to completed")
    return {
        "message": f"Updated {len(updated_bookings)} past bookings to completed",
        "updated": len(updated_bookings),
        "updatedBookings": updated_bookings,
    }
