import os


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "ams_portal"),
}

# Access tokens: RS256 key pair, HS256 secret only as a fallback
JWT_PRIVATE_KEY_PATH = os.getenv("JWT_PRIVATE_KEY_PATH", "keys/private.pem")
JWT_PUBLIC_KEY_PATH = os.getenv("JWT_PUBLIC_KEY_PATH", "keys/public.pem")
JWT_KEY_ID = os.getenv("JWT_KEY_ID", "ams-key")
JWT_SECRET = os.getenv("JWT_SECRET") or None
JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "7"))

SSO_JWKS_URL = os.getenv("SSO_JWKS_URL") or None
SSO_ISSUER = os.getenv("SSO_ISSUER", "sso-portal")
SSO_AUDIENCE = os.getenv("SSO_AUDIENCE", "sso-apps")

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(5 * 1024 * 1024)))
EXCEL_LOG_PATH = os.getenv("EXCEL_LOG_PATH", "excel_logs/attendance_log.xlsx")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None

HALF_DAY_GRACE_MINUTES = int(os.getenv("HALF_DAY_GRACE_MINUTES", "30"))

CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "*")

# Bootstrap admin created on startup when AUTO_INIT_DB is on and both are set
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL") or None
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD") or None
