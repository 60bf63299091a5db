import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "progress_monitor_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

FACE_SERVICE_URL = "http://face.test"
FACE_SERVICE_API_KEY = None
FACE_MATCH_MIN_SCORE = 90.0
ALLOW_FAKE_FACE_MATCH = False

AUDIT_SERVICE_URL = ""
AUDIT_SERVICE_API_KEY = None

STORAGE_BASE_URL = "http://storage.test/bucket"
STORAGE_PUBLIC_URL = None

HTTP_TIMEOUT_SECONDS = 5.0

NEAR_PROJECT_MARGIN_METERS = 50.0
RISK_POLICY = "lenient"
