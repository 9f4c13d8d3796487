import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
    "connection_timeout": int(os.getenv("DB_CONNECTION_TIMEOUT", "10")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

REQUIRE_UUID_EMPLOYEE_IDS = bool(int(os.getenv("REQUIRE_UUID_EMPLOYEE_IDS", "0")))
IDEMPOTENCY_CACHE_SIZE = int(os.getenv("IDEMPOTENCY_CACHE_SIZE", "512"))
