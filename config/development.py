import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "progress_monitor"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Collaborator services
FACE_SERVICE_URL = os.getenv("FACE_SERVICE_URL", "http://localhost:8081")
FACE_SERVICE_API_KEY = os.getenv("FACE_SERVICE_API_KEY")
FACE_MATCH_MIN_SCORE = float(os.getenv("FACE_MATCH_MIN_SCORE", "90"))
# Lets every face check pass. Logged loudly; refused in production.
ALLOW_FAKE_FACE_MATCH = bool(int(os.getenv("ALLOW_FAKE_FACE_MATCH", "0")))

AUDIT_SERVICE_URL = os.getenv("AUDIT_SERVICE_URL", "")
AUDIT_SERVICE_API_KEY = os.getenv("AUDIT_SERVICE_API_KEY")

STORAGE_BASE_URL = os.getenv("STORAGE_BASE_URL", "http://localhost:9000/progress-monitor")
STORAGE_PUBLIC_URL = os.getenv("STORAGE_PUBLIC_URL")

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

NEAR_PROJECT_MARGIN_METERS = float(os.getenv("NEAR_PROJECT_MARGIN_METERS", "50"))
RISK_POLICY = os.getenv("RISK_POLICY", "lenient")
