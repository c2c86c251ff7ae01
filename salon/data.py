# salon/data.py

import os

from dotenv import load_dotenv

from salon.core import BusinessHours

load_dotenv(".env", override=False)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("SALON_DATABASE_URL", "sqlite:///./salon.db")
SECRET_KEY = os.getenv("SALON_SECRET_KEY", "change-me-later")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("SALON_TOKEN_MINUTES", "30"))
LOG_LEVEL = os.getenv("SALON_LOG_LEVEL", "INFO")

SERVICE_CATEGORIES = {
    "haircuts": "Haircuts",
    "grooming": "Grooming",
    "color": "Hair Color",
    "styling": "Styling",
    "treatment": "Treatment",
}

shop_settings = {
    "open_hour": int(os.getenv("SALON_OPEN_HOUR", "9")),
    "close_hour": int(os.getenv("SALON_CLOSE_HOUR", "17")),
    "slot_minutes": int(os.getenv("SALON_SLOT_MINUTES", "15")),
    # reject slots whose end runs past close_hour:00
    "strict_closing": _env_bool("SALON_STRICT_CLOSING", False),
    # also require the slot to fit the staff member's own working hours
    "enforce_staff_schedule": _env_bool("SALON_ENFORCE_STAFF_SCHEDULE", False),
}


def business_hours() -> BusinessHours:
    return BusinessHours(shop_settings["open_hour"], shop_settings["close_hour"])
