from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import date, datetime, time
from enum import Enum

class TimeOffType(str, Enum):
    TIME_OFF = "time_off"
    HOLIDAY = "holiday"
    MAINTENANCE = "maintenance"
    PERSONAL = "personal"

class TimeOffCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_date: date
    end_date: date
    is_all_day: bool = True
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    type: TimeOffType = TimeOffType.TIME_OFF

    @model_validator(mode="after")
    def check_ranges(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if not self.is_all_day:
            if self.start_time is None or self.end_time is None:
                raise ValueError("start_time and end_time are required unless is_all_day is set")
            if self.start_time >= self.end_time:
                raise ValueError("start_time must be before end_time")
        return self

    def to_document(self) -> dict:
        """Serialise to the stored shape: ISO dates and "HH:MM:SS" times."""
        return {
            "title": self.title,
            "description": self.description,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "is_all_day": self.is_all_day,
            "start_time": None if self.is_all_day else self.start_time.strftime("%H:%M:%S"),
            "end_time": None if self.is_all_day else self.end_time.strftime("%H:%M:%S"),
            "type": self.type.value,
        }

class TimeOffUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_all_day: Optional[bool] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    type: Optional[TimeOffType] = None

    def to_document(self) -> dict:
        """Only the fields the caller set, in the stored shape."""
        update_data = self.model_dump(exclude_unset=True)
        for key in ("start_date", "end_date"):
            if update_data.get(key) is not None:
                update_data[key] = update_data[key].isoformat()
        for key in ("start_time", "end_time"):
            if update_data.get(key) is not None:
                update_data[key] = update_data[key].strftime("%H:%M:%S")
        if update_data.get("type") is not None:
            update_data["type"] = update_data["type"].value
        return update_data

class TimeOffResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    start_date: str
    end_date: str
    is_all_day: bool
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    type: TimeOffType
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
