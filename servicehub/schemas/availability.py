from pydantic import BaseModel
from typing import List, Optional

class SlotAvailability(BaseModel):
    time: str  # Format: "9:00 AM"
    available: bool
    reason: Optional[str] = None

class AvailabilityResponse(BaseModel):
    date: str  # Format: "2025-06-01"
    availability: List[SlotAvailability]
    availableTimes: List[str]

class TimeOffConflictResponse(BaseModel):
    date: str
    startTime: str  # Format: "14:00"
    duration: int
    conflict: bool
