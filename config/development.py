import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
}

ENGINE_CONFIG = {
    "duplicate_tolerance_minutes": int(os.getenv("DUPLICATE_TOLERANCE_MINUTES", "5")),
    "duplicate_policy": os.getenv("DUPLICATE_POLICY", "standard"),
    "holiday_country": os.getenv("HOLIDAY_COUNTRY", "PH"),
    "special_holidays": os.getenv("SPECIAL_HOLIDAYS", ""),
    "basic_daily_rate": float(os.getenv("BASIC_DAILY_RATE", "513.00")),
    "default_schedule_start": os.getenv("DEFAULT_SCHEDULE_START", "09:00"),
    "default_schedule_end": os.getenv("DEFAULT_SCHEDULE_END", "18:00"),
    "progress_retention_seconds": int(os.getenv("PROGRESS_RETENTION_SECONDS", "3600")),
    "progress_every": int(os.getenv("PROGRESS_EVERY", "10")),
}

DEBUG = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_JSON = bool(int(os.getenv("LOG_JSON", "0")))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
