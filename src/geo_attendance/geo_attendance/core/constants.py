"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000.0

DEFAULT_GEOFENCE_RADIUS_METERS = 100.0
DEFAULT_HISTORY_LIMIT = 30
MAX_HISTORY_LIMIT = 366

FACE_MATCH_THRESHOLD = 0.7
ENROLLMENT_CONFIDENCE = 1.0

DEFAULT_AI_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_AI_MODEL = "google/gemini-2.5-flash"
DEFAULT_AI_TIMEOUT_SECONDS = 20.0

MAX_PHOTO_BYTES = 5 * 1024 * 1024
ALLOWED_PHOTO_TYPES = ("image/jpeg", "image/png", "image/webp")

MAX_COMPANY_NAME_LENGTH = 200
INVITE_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
INVITE_CODE_LENGTH = 8
INVITE_CODE_ATTEMPTS = 5
REQUEST_BODY_HEADROOM_BYTES = 64 * 1024
