from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
import logging

from servicehub.core.auth import get_current_admin, get_current_user
from servicehub.core.errors import SchedulingError, to_http_exception
from servicehub.db.mongodb import get_store
from servicehub.db.store import SchedulingStore
from servicehub.schemas.availability import TimeOffConflictResponse
from servicehub.schemas.time_off import TimeOffCreate, TimeOffResponse, TimeOffUpdate
from servicehub.services.availability_service import normalize_date
from servicehub.services.timeoff_service import (
    check_time_off_conflict,
    create_time_off,
    delete_time_off,
    list_time_off,
    normalize_start_time,
    update_time_off,
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[TimeOffResponse])
async def get_time_off_periods(
    fromDate: Optional[str] = Query(None, description="Only periods ending on or after this date (YYYY-MM-DD)"),
    toDate: Optional[str] = Query(None, description="Only periods starting on or before this date (YYYY-MM-DD)"),
    current_user: dict = Depends(get_current_user),
    store: SchedulingStore = Depends(get_store),
):
    """
    Get time off periods, optionally limited to those touching a date range
    """
    try:
        return await list_time_off(store, fromDate, toDate)
    except SchedulingError as e:
        raise to_http_exception(e)

@router.get("/conflict", response_model=TimeOffConflictResponse)
async def get_time_off_conflict(
    date: str = Query(..., description="Booking date (YYYY-MM-DD)"),
    time: str = Query(..., description="Booking start, HH:MM or H:MM AM/PM"),
    duration: int = Query(60, gt=0, description="Booking length in minutes"),
    store: SchedulingStore = Depends(get_store),
):
    """
    Check whether a booking interval falls into a blocked period
    """
    try:
        booking_date = normalize_date(date)
        start_time = normalize_start_time(time)
    except SchedulingError as e:
        raise to_http_exception(e)

    conflict = await check_time_off_conflict(store, booking_date, start_time, duration)
    return {"date": booking_date, "startTime": start_time, "duration": duration, "conflict": conflict}

@router.post("/", response_model=TimeOffResponse)
async def create_time_off_period(
    time_off_in: TimeOffCreate,
    current_user: dict = Depends(get_current_admin),
    store: SchedulingStore = Depends(get_store),
):
    """
    Create a new time off period (admin only)
    """
    try:
        return await create_time_off(store, time_off_in, str(current_user["_id"]))
    except Exception as e:
        logger.error(f"Error creating time off: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create time off period"
        )

@router.put("/{time_off_id}", response_model=TimeOffResponse)
async def update_time_off_period(
    time_off_id: str,
    time_off_update: TimeOffUpdate,
    current_user: dict = Depends(get_current_admin),
    store: SchedulingStore = Depends(get_store),
):
    """
    Update a time off period (admin only)
    """
    try:
        return await update_time_off(store, time_off_id, time_off_update)
    except SchedulingError as e:
        raise to_http_exception(e)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid time off period: {e.errors()[0]['msg']}"
        )

@router.delete("/{time_off_id}", response_model=Dict[str, Any])
async def delete_time_off_period(
    time_off_id: str,
    current_user: dict = Depends(get_current_admin),
    store: SchedulingStore = Depends(get_store),
):
    """
    Delete a time off period (admin only)
    """
    try:
        await delete_time_off(store, time_off_id)
    except SchedulingError as e:
        raise to_http_exception(e)

    return {"message": "Time off period deleted successfully"}
