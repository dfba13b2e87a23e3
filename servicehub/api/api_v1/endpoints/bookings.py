from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
import logging

from servicehub.core.auth import get_current_admin
from servicehub.core.errors import SchedulingError, to_http_exception
from servicehub.db.mongodb import get_store
from servicehub.db.store import SchedulingStore
from servicehub.schemas.booking import BookingResponse, CompletePastBookingsResponse
from servicehub.services.booking_service import (
    complete_past_bookings,
    get_customer_bookings,
    list_all_bookings,
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/all", response_model=List[BookingResponse])
async def get_all_bookings(
    current_user: dict = Depends(get_current_admin),
    store: SchedulingStore = Depends(get_store),
):
    """
    Get every booking, newest first (admin only)
    """
    try:
        return await list_all_bookings(store)
    except Exception as e:
        logger.error(f"Error fetching bookings: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch bookings"
        )

@router.get("/customer/{customer_id}", response_model=List[BookingResponse])
async def get_bookings_for_customer(
    customer_id: str,
    current_user: dict = Depends(get_current_admin),
    store: SchedulingStore = Depends(get_store),
):
    """
    Get one customer's bookings, newest first (admin only)
    """
    try:
        return await get_customer_bookings(store, customer_id)
    except Exception as e:
        logger.error(f"Error fetching bookings for customer {customer_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch customer bookings"
        )

@router.post("/update-past-completed", response_model=CompletePastBookingsResponse)
async def update_past_bookings_completed(
    today: Optional[str] = Query(None, description="Cut-off date (YYYY-MM-DD), defaults to today in UTC"),
    current_user: dict = Depends(get_current_admin),
    store: SchedulingStore = Depends(get_store),
):
    """
    Mark confirmed bookings before today as completed (admin only)
    """
    try:
        return await complete_past_bookings(store, today)
    except SchedulingError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error updating past bookings to completed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update past bookings"
        )
