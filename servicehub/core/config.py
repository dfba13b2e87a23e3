from pydantic_settings import BaseSettings
from typing import Dict, List
import os
from dotenv import load_dotenv
from servicehub.utils.time_utils import DEFAULT_DURATION_MINUTES

load_dotenv()

DEFAULT_DURATION_KEY = "default"
DEFAULT_SERVICE_DURATION = DEFAULT_DURATION_MINUTES

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = os.getenv("APP_NAME", "ServiceHub")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # MongoDB Settings
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "servicehub_db")

    # Bearer tokens are issued by the identity provider, we only verify them
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your_secret_key_here")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",  # Next.js frontend
    ]

    # Business hours: bookable start times, in display order
    TIME_SLOTS: List[str] = [
        "9:00 AM", "10:00 AM", "11:00 AM",
        "1:00 PM", "2:00 PM", "3:00 PM", "4:00 PM",
    ]

    # Service id -> duration in minutes. "default" applies to unknown services.
    SERVICE_DURATIONS: Dict[str, int] = {
        "4a05b5fa-951f-4a05-a3f2-37b3c505eb45": 100,  # Electrical Repairs
        "495fe372-ba26-4442-b583-6d7d187025a0": 120,  # Financial Planning
        DEFAULT_DURATION_KEY: DEFAULT_SERVICE_DURATION,
    }

    # When the blackout lookup itself fails: True lets the reschedule through,
    # False blocks it.
    TIMEOFF_CHECK_FAIL_OPEN: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
