from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Any, Dict, Optional
import logging

from servicehub.core.auth import ADMIN_ROLE, get_current_user
from servicehub.core.errors import SchedulingError, to_http_exception
from servicehub.db.mongodb import get_store
from servicehub.db.store import SchedulingStore
from servicehub.schemas.availability import AvailabilityResponse
from servicehub.schemas.booking import BookingCancel, BookingReschedule, AppointmentResponse
from servicehub.services.availability_service import evaluate_availability
from servicehub.services.booking_service import cancel_booking, reschedule_booking

logger = logging.getLogger(__name__)

router = APIRouter()

def _acting_user_id(current_user: Dict[str, Any], requested_user_id: Optional[str]) -> Optional[str]:
    """Admins may act on any booking (optionally on behalf of a user); customers only on their own."""
    if current_user.get("role") == ADMIN_ROLE:
        return requested_user_id
    return str(current_user["_id"])

@router.get("/availability", response_model=AvailabilityResponse, response_model_exclude_none=True)
async def get_availability(
    date: Optional[str] = Query(None, description="Date to check (YYYY-MM-DD or ISO datetime)"),
    serviceId: Optional[str] = Query(None, description="Service being booked, sets the slot length"),
    store: SchedulingStore = Depends(get_store),
):
    """
    Get availability of every bookable time slot on a date
    """
    try:
        return await evaluate_availability(store, date, serviceId)
    except SchedulingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error in availability check: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check availability"
        )

@router.post("/reschedule", response_model=AppointmentResponse)
async def reschedule_appointment(
    reschedule_in: BookingReschedule,
    current_user: dict = Depends(get_current_user),
    store: SchedulingStore = Depends(get_store),
):
    """
    Move an appointment to a new date and time, unless the new time falls in a blocked period
    """
    try:
        appointment = await reschedule_booking(
            store,
            reschedule_in.appointmentId,
            reschedule_in.appointmentDate,
            reschedule_in.appointmentTime,
            user_id=_acting_user_id(current_user, reschedule_in.userId),
        )
    except SchedulingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error in reschedule: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while rescheduling"
        )

    return {"message": "Appointment rescheduled successfully", "appointment": appointment}

@router.post("/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    cancel_in: BookingCancel,
    current_user: dict = Depends(get_current_user),
    store: SchedulingStore = Depends(get_store),
):
    """
    Cancel an appointment
    """
    try:
        appointment = await cancel_booking(
            store,
            cancel_in.appointmentId,
            user_id=_acting_user_id(current_user, cancel_in.userId),
            reason=cancel_in.reason,
        )
    except SchedulingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error in cancel: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while cancelling"
        )

    return {"message": "Appointment cancelled successfully", "appointment": appointment}
