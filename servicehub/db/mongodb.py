from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING
from servicehub.core.config import settings
from servicehub.db.store import SchedulingStore
import logging

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None
    db = None
    store: SchedulingStore = None

db = Database()

async def connect_to_mongo():
    """Connect to MongoDB and build the scheduling store."""
    try:
        logger.info("Connecting to MongoDB...")
        db.client = AsyncIOMotorClient(settings.MONGO_URI)
        db.db = db.client[settings.DB_NAME]
        db.store = SchedulingStore(db.db, settings.SERVICE_DURATIONS)
        logger.info("Connected to MongoDB.")

        # Create indexes for collections
        await create_indexes()

    except Exception as e:
        logger.error(f"Could not connect to MongoDB: {e}")
        raise e

async def close_mongo_connection():
    """Close MongoDB connection."""
    if db.client:
        logger.info("Closing MongoDB connection...")
        db.client.close()
        db.store = None
        logger.info("MongoDB connection closed.")

def get_store() -> SchedulingStore:
    """FastAPI dependency returning the process-wide scheduling store."""
    return db.store

async def create_indexes():
    """Create indexes for collections."""
    try:
        # Availability lookups filter bookings by date then status
        await db.db.bookings.create_index([("appointment_date", ASCENDING), ("status", ASCENDING)])
        await db.db.bookings.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
        await db.db.bookings.create_index([("created_at", DESCENDING)])

        # Time-off lookups are range scans on the date bounds
        await db.db.time_off.create_index([("start_date", ASCENDING), ("end_date", ASCENDING)])

        await db.db.services.create_index("id", unique=True)

        logger.info("MongoDB indexes created successfully.")
    except Exception as e:
        logger.error(f"Failed to create MongoDB indexes: {e}")
