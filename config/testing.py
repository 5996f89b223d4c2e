import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_attendance_test"),
}

AI_GATEWAY_URL = "http://ai-gateway.test/v1/chat/completions"
AI_GATEWAY_API_KEY = "test-key"
AI_MODEL = "test-model"
AI_TIMEOUT_SECONDS = 5.0

FACE_MATCH_THRESHOLD = 0.7
MAX_PHOTO_BYTES = 1024 * 1024

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
