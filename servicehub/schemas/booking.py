from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from enum import Enum

class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

# Bookings in these states occupy their time slot
ACTIVE_BOOKING_STATUSES = [BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value]

class BookingReschedule(BaseModel):
    appointmentId: str
    appointmentDate: str  # Format: "2025-06-01"
    appointmentTime: str  # Format: "2:00 PM"
    userId: Optional[str] = None

class BookingCancel(BaseModel):
    appointmentId: str
    userId: Optional[str] = None
    reason: Optional[str] = None

class AppointmentSummary(BaseModel):
    id: str
    serviceId: Optional[str] = None
    serviceName: Optional[str] = None
    date: str
    time: str
    status: BookingStatus

class AppointmentResponse(BaseModel):
    message: str
    appointment: AppointmentSummary

class BookingResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    service_id: Optional[str] = None
    service_name: Optional[str] = None
    appointment_date: str
    appointment_time: str
    status: BookingStatus
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        # Keep booking fields this service does not model (price, notes, ...)
        extra = "allow"

class CompletedBooking(BaseModel):
    id: str
    service_name: Optional[str] = None
    appointment_date: str

class CompletePastBookingsResponse(BaseModel):
    message: str
    updated: int
    updatedBookings: List[CompletedBooking]
