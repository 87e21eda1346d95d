import os

from config.base import *  # noqa: F401,F403
from config.base import _flag

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "ams_portal_test"),
}

JWT_SECRET = os.getenv("JWT_SECRET", "test-jwt-secret")
EXCEL_LOG_PATH = os.getenv("EXCEL_LOG_PATH", "excel_logs/test_attendance_log.xlsx")

DEBUG = False
TESTING = True

AUTO_INIT_DB = _flag("AUTO_INIT_DB", "0")
