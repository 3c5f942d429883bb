# core/config.py

import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "jk-cars")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
    if origin.strip()
]

SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

REFERENCE_PREFIX = os.getenv("REFERENCE_PREFIX", "TND")

# Card bookings are marked confirmed on creation although no payment is captured.
CONFIRM_CARD_PAYMENTS = _flag("CONFIRM_CARD_PAYMENTS", "true")
# Cancelled car reservations keep blocking their vehicle for availability.
CANCELLED_BLOCKS_AVAILABILITY = _flag("CANCELLED_BLOCKS_AVAILABILITY", "true")

ADMIN_REFRESH_SECONDS = int(os.getenv("ADMIN_REFRESH_SECONDS", "60"))
AVAILABILITY_HORIZON_DAYS = int(os.getenv("AVAILABILITY_HORIZON_DAYS", "30"))
# Longest date span accepted by availability queries, search and car rentals.
MAX_RANGE_DAYS = int(os.getenv("MAX_RANGE_DAYS", "365"))

BOOKING_SESSION_TTL_MINUTES = int(os.getenv("BOOKING_SESSION_TTL_MINUTES", "60"))
BOOKING_SESSION_LIMIT = int(os.getenv("BOOKING_SESSION_LIMIT", "5000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
