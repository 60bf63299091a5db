import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "progress_monitor"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

FACE_SERVICE_URL = os.getenv("FACE_SERVICE_URL", "")
FACE_SERVICE_API_KEY = os.getenv("FACE_SERVICE_API_KEY")
FACE_MATCH_MIN_SCORE = float(os.getenv("FACE_MATCH_MIN_SCORE", "90"))
# Never configurable here.
ALLOW_FAKE_FACE_MATCH = False

AUDIT_SERVICE_URL = os.getenv("AUDIT_SERVICE_URL", "")
AUDIT_SERVICE_API_KEY = os.getenv("AUDIT_SERVICE_API_KEY")

STORAGE_BASE_URL = os.getenv("STORAGE_BASE_URL", "")
STORAGE_PUBLIC_URL = os.getenv("STORAGE_PUBLIC_URL")

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

NEAR_PROJECT_MARGIN_METERS = float(os.getenv("NEAR_PROJECT_MARGIN_METERS", "50"))
RISK_POLICY = os.getenv("RISK_POLICY", "lenient")
