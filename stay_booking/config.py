import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

# Optional Postgres schema for all tables (unset on SQLite)
SCHEMA = os.getenv("DB_SCHEMA") or None

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Calendar dates (today, check-in midnight) are evaluated in this zone
LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", "UTC")

AUTO_CONFIRM_ENABLED = os.getenv("AUTO_CONFIRM_ENABLED", "true").lower() == "true"
AUTO_CONFIRM_AFTER_HOURS = int(os.getenv("AUTO_CONFIRM_AFTER_HOURS", "24"))
AUTO_CONFIRM_INTERVAL_SECONDS = int(os.getenv("AUTO_CONFIRM_INTERVAL_SECONDS", "3600"))

CANCELLATION_CUTOFF_HOURS = int(os.getenv("CANCELLATION_CUTOFF_HOURS", "24"))

NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL") or None
NOTIFICATION_TIMEOUT_SECONDS = int(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "10"))
