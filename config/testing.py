import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_test"),
}

ENGINE_CONFIG = {
    "holiday_country": "PH",
    "progress_every": 1,
}

DEBUG = False
TESTING = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_JSON = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
