from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from servicehub.core.config import DEFAULT_DURATION_KEY, DEFAULT_SERVICE_DURATION
from servicehub.schemas.booking import ACTIVE_BOOKING_STATUSES, BookingStatus
from servicehub.utils.time_utils import parse_duration_to_minutes

logger = logging.getLogger(__name__)


def _to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _with_string_id(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if document is not None:
        document["id"] = str(document.pop("_id"))
    return document


class SchedulingStore:
    """
    MongoDB access for bookings, services and time-off periods.

    One instance is built at startup and handed to request handlers through
    the ``get_store`` dependency. Every call reads current state; nothing is
    cached between requests.
    """

    def __init__(self, database, service_durations: Dict[str, int]):
        self.database = database
        self.service_durations = dict(service_durations)
        self.default_duration = self.service_durations.get(DEFAULT_DURATION_KEY, DEFAULT_SERVICE_DURATION)

    # Bookings

    async def get_active_bookings_for_date(self, date: str) -> List[Dict[str, Any]]:
        """Pending and confirmed bookings on ``date`` (YYYY-MM-DD), in insertion order."""
        cursor = self.database.bookings.find(
            {"appointment_date": date, "status": {"$in": ACTIVE_BOOKING_STATUSES}}
        ).sort("_id", ASCENDING)
        bookings = await cursor.to_list(length=None)
        return [_with_string_id(booking) for booking in bookings]

    async def get_booking(self, booking_id: str) -> Optional[Dict[str, Any]]:
        object_id = _to_object_id(booking_id)
        if object_id is None:
            return None
        booking = await self.database.bookings.find_one({"_id": object_id})
        return _with_string_id(booking)

    async def update_booking(self, booking_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        object_id = _to_object_id(booking_id)
        if object_id is None:
            return None
        update_data = dict(update_data)
        update_data["updated_at"] = datetime.utcnow()
        booking = await self.database.bookings.find_one_and_update(
            {"_id": object_id},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        return _with_string_id(booking)

    async def list_bookings(self) -> List[Dict[str, Any]]:
        """Every booking, newest first."""
        cursor = self.database.bookings.find({}).sort("created_at", DESCENDING)
        bookings = await cursor.to_list(length=None)
        return [_with_string_id(booking) for booking in bookings]

    async def get_bookings_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        cursor = self.database.bookings.find({"user_id": user_id}).sort("created_at", DESCENDING)
        bookings = await cursor.to_list(length=None)
        return [_with_string_id(booking) for booking in bookings]

    async def complete_past_bookings(self, today: str) -> List[Dict[str, Any]]:
        """
        Mark confirmed bookings dated before ``today`` (YYYY-MM-DD) as completed.

        Returns ``id``, ``service_name`` and ``appointment_date`` of each
        booking that was updated.
        """
        query = {"status": BookingStatus.CONFIRMED.value, "appointment_date": {"$lt": today}}
        cursor = self.database.bookings.find(
            query, {"service_name": 1, "appointment_date": 1}
        ).sort("appointment_date", ASCENDING)
        past = await cursor.to_list(length=None)
        if not past:
            return []

        ids = [booking["_id"] for booking in past]
        # Re-apply the filter so a booking cancelled in between is left alone
        result = await self.database.bookings.update_many(
            {"_id": {"$in": ids}, **query},
            {"$set": {"status": BookingStatus.COMPLETED.value, "updated_at": datetime.utcnow()}},
        )
        if result.modified_count != len(ids):
            cursor = self.database.bookings.find(
                {"_id": {"$in": ids}, "status": BookingStatus.COMPLETED.value},
                {"service_name": 1, "appointment_date": 1},
            ).sort("appointment_date", ASCENDING)
            past = await cursor.to_list(length=None)

        logger.info(f"Marked {len(past)} bookings before {today} as completed")
        return [_with_string_id(booking) for booking in past]

    # Services

    async def get_duration_minutes(self, service_id: Optional[str]) -> int:
        """
        Duration of a service in minutes.

        The configured catalog wins; otherwise the service document's free-form
        ``time`` text is parsed; otherwise the default applies.
        """
        if not service_id:
            return self.default_duration
        if service_id in self.service_durations:
            return self.service_durations[service_id]

        service = await self.database.services.find_one({"id": service_id}, {"time": 1})
        if service and service.get("time"):
            return parse_duration_to_minutes(str(service["time"]))
        return self.default_duration

    # Time off

    async def get_time_off_overlapping(self, date: str) -> List[Dict[str, Any]]:
        """Time-off periods whose date range contains ``date``."""
        cursor = self.database.time_off.find(
            {"start_date": {"$lte": date}, "end_date": {"$gte": date}}
        ).sort("start_time", ASCENDING)
        periods = await cursor.to_list(length=None)
        return [_with_string_id(period) for period in periods]

    async def check_conflict(self, date: str, start_time: str, end_time: str) -> bool:
        """
        Server-side blackout predicate.

        Times are zero-padded "HH:MM:SS" strings, so lexicographic comparison
        matches chronological order.
        """
        conflict = await self.database.time_off.find_one(
            {
                "start_date": {"$lte": date},
                "end_date": {"$gte": date},
                "$or": [
                    {"is_all_day": True},
                    {"start_time": {"$lt": end_time}, "end_time": {"$gt": start_time}},
                ],
            },
            {"_id": 1},
        )
        return conflict is not None

    async def list_time_off(self, from_date: Optional[str] = None, to_date: Optional[str] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if from_date and to_date:
            query = {"start_date": {"$lte": to_date}, "end_date": {"$gte": from_date}}
        elif from_date:
            query = {"end_date": {"$gte": from_date}}

        cursor = self.database.time_off.find(query).sort("start_date", ASCENDING)
        periods = await cursor.to_list(length=None)
        return [_with_string_id(period) for period in periods]

    async def get_time_off(self, time_off_id: str) -> Optional[Dict[str, Any]]:
        object_id = _to_object_id(time_off_id)
        if object_id is None:
            return None
        period = await self.database.time_off.find_one({"_id": object_id})
        return _with_string_id(period)

    async def create_time_off(self, time_off_data: Dict[str, Any], created_by: Optional[str]) -> Dict[str, Any]:
        now = datetime.utcnow()
        document = dict(time_off_data)
        document.update({"created_by": created_by, "created_at": now, "updated_at": now})

        result = await self.database.time_off.insert_one(document)
        created = await self.database.time_off.find_one({"_id": result.inserted_id})
        logger.info(f"Created time off {result.inserted_id} ({document['start_date']} to {document['end_date']})")
        return _with_string_id(created)

    async def update_time_off(self, time_off_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        object_id = _to_object_id(time_off_id)
        if object_id is None:
            return None
        update_data = dict(update_data)
        update_data["updated_at"] = datetime.utcnow()
        updated = await self.database.time_off.find_one_and_update(
            {"_id": object_id},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        return _with_string_id(updated)

    async def delete_time_off(self, time_off_id: str) -> bool:
        object_id = _to_object_id(time_off_id)
        if object_id is None:
            return False
        result = await self.database.time_off.delete_one({"_id": object_id})
        return result.deleted_count > 0
