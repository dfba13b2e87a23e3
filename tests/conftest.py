"""Shared test fixtures: an in-memory scheduling store and token helpers."""

import copy
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest
from jose import jwt

from servicehub.core.config import DEFAULT_DURATION_KEY, settings

ELECTRICAL_REPAIRS = "4a05b5fa-951f-4a05-a3f2-37b3c505eb45"

TEST_DURATIONS = {
    ELECTRICAL_REPAIRS: 100,
    "financial-planning": 120,
    DEFAULT_DURATION_KEY: 60,
}


class StoreUnavailable(Exception):
    pass


class InMemoryStore:
    """
    Stand-in for SchedulingStore holding plain dicts.

    ``fail_bookings``, ``fail_predicate`` and ``fail_lookup`` make the
    matching calls raise, to exercise the error paths.
    """

    def __init__(self, durations: Optional[Dict[str, int]] = None):
        self.durations = dict(durations or TEST_DURATIONS)
        self.bookings: List[Dict[str, Any]] = []
        self.time_off: List[Dict[str, Any]] = []
        self.services: Dict[str, Dict[str, Any]] = {}
        self.fail_bookings = False
        self.fail_predicate = False
        self.fail_lookup = False
        self.predicate_calls = 0
        self._next_id = 1

    def _new_id(self) -> str:
        new_id = f"{self._next_id:024x}"
        self._next_id += 1
        return new_id

    def add_booking(self, appointment_time: str, appointment_date: str = "2025-06-02",
                    service_id: Optional[str] = None, service_name: str = "Consultation",
                    status: str = "confirmed", user_id: str = "user-1",
                    created_at: Optional[datetime] = None) -> Dict[str, Any]:
        booking = {
            "id": self._new_id(),
            "service_id": service_id,
            "service_name": service_name,
            "user_id": user_id,
            "appointment_date": appointment_date,
            "appointment_time": appointment_time,
            "status": status,
            "created_at": created_at or datetime(2025, 5, 1, 9, 0) + timedelta(minutes=self._next_id),
        }
        self.bookings.append(booking)
        return booking

    def add_time_off(self, start_date: str, end_date: Optional[str] = None, is_all_day: bool = True,
                     start_time: Optional[str] = None, end_time: Optional[str] = None,
                     title: str = "Closed", type: str = "time_off") -> Dict[str, Any]:
        period = {
            "id": self._new_id(),
            "title": title,
            "description": None,
            "start_date": start_date,
            "end_date": end_date or start_date,
            "is_all_day": is_all_day,
            "start_time": start_time,
            "end_time": end_time,
            "type": type,
            "created_by": "admin-1",
            "created_at": datetime(2025, 5, 1, 9, 0),
            "updated_at": datetime(2025, 5, 1, 9, 0),
        }
        self.time_off.append(period)
        return period

    # SchedulingStore interface

    async def get_active_bookings_for_date(self, date: str) -> List[Dict[str, Any]]:
        if self.fail_bookings:
            raise StoreUnavailable("bookings collection unreachable")
        return [
            copy.deepcopy(b) for b in self.bookings
            if b["appointment_date"] == date and b["status"] in ("pending", "confirmed")
        ]

    async def get_booking(self, booking_id: str) -> Optional[Dict[str, Any]]:
        for booking in self.bookings:
            if booking["id"] == booking_id:
                return copy.deepcopy(booking)
        return None

    async def update_booking(self, booking_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for booking in self.bookings:
            if booking["id"] == booking_id:
                booking.update(update_data)
                booking["updated_at"] = datetime.utcnow()
                return copy.deepcopy(booking)
        return None

    async def list_bookings(self) -> List[Dict[str, Any]]:
        if self.fail_bookings:
            raise StoreUnavailable("bookings collection unreachable")
        ordered = sorted(self.bookings, key=lambda b: b["created_at"], reverse=True)
        return [copy.deepcopy(b) for b in ordered]

    async def get_bookings_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        return [b for b in await self.list_bookings() if b["user_id"] == user_id]

    async def complete_past_bookings(self, today: str) -> List[Dict[str, Any]]:
        if self.fail_bookings:
            raise StoreUnavailable("bookings collection unreachable")
        completed = []
        for booking in sorted(self.bookings, key=lambda b: b["appointment_date"]):
            if booking["status"] == "confirmed" and booking["appointment_date"] < today:
                booking["status"] = "completed"
                booking["updated_at"] = datetime.utcnow()
                completed.append({
                    "id": booking["id"],
                    "service_name": booking["service_name"],
                    "appointment_date": booking["appointment_date"],
                })
        return completed

    async def get_duration_minutes(self, service_id: Optional[str]) -> int:
        if service_id and service_id in self.durations:
            return self.durations[service_id]
        return self.durations[DEFAULT_DURATION_KEY]

    async def get_time_off_overlapping(self, date: str) -> List[Dict[str, Any]]:
        if self.fail_lookup:
            raise StoreUnavailable("time_off collection unreachable")
        return [copy.deepcopy(p) for p in self.time_off if p["start_date"] <= date <= p["end_date"]]

    async def check_conflict(self, date: str, start_time: str, end_time: str) -> bool:
        self.predicate_calls += 1
        if self.fail_predicate:
            raise StoreUnavailable("check_booking_time_off_conflict is not available")
        for period in self.time_off:
            if not (period["start_date"] <= date <= period["end_date"]):
                continue
            if period["is_all_day"]:
                return True
            if period["start_time"] and period["start_time"] < end_time and period["end_time"] > start_time:
                return True
        return False

    async def list_time_off(self, from_date: Optional[str] = None, to_date: Optional[str] = None):
        periods = self.time_off
        if from_date and to_date:
            periods = [p for p in periods if p["start_date"] <= to_date and p["end_date"] >= from_date]
        elif from_date:
            periods = [p for p in periods if p["end_date"] >= from_date]
        return [copy.deepcopy(p) for p in sorted(periods, key=lambda p: p["start_date"])]

    async def get_time_off(self, time_off_id: str) -> Optional[Dict[str, Any]]:
        for period in self.time_off:
            if period["id"] == time_off_id:
                return copy.deepcopy(period)
        return None

    async def create_time_off(self, time_off_data: Dict[str, Any], created_by: Optional[str]) -> Dict[str, Any]:
        now = datetime.utcnow()
        period = dict(time_off_data, id=self._new_id(), created_by=created_by, created_at=now, updated_at=now)
        self.time_off.append(period)
        return copy.deepcopy(period)

    async def update_time_off(self, time_off_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for period in self.time_off:
            if period["id"] == time_off_id:
                period.update(update_data)
                period["updated_at"] = datetime.utcnow()
                return copy.deepcopy(period)
        return None

    async def delete_time_off(self, time_off_id: str) -> bool:
        before = len(self.time_off)
        self.time_off = [p for p in self.time_off if p["id"] != time_off_id]
        return len(self.time_off) < before


@pytest.fixture
def store():
    return InMemoryStore()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token the way the identity provider does, for authenticated requests."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def auth_headers(user_id: str = "user-1", role: str = "customer") -> Dict[str, str]:
    token = create_access_token({"sub": user_id, "role": role})
    return {"Authorization": f"Bearer {token}"}
