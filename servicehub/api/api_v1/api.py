from fastapi import APIRouter
from servicehub.api.api_v1.endpoints import appointments, bookings, timeoff

router = APIRouter()

# Include all routers
router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
router.include_router(timeoff.router, prefix="/timeoff", tags=["Time Off"])
router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
