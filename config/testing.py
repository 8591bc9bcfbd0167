import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance_test"),
}

SCAN_API_KEY = "test-scanner-key"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SESSION_IDLE_MINUTES = 30
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "/tmp/school_attendance_test_uploads")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
