"""Defaults and fixed tables shared across the library."""

from __future__ import annotations

# Hours
SENTINEL_24_7 = "24/7"
SENTINEL_UNKNOWN = "UNK"

# Rate limiting
COOLDOWN_SECONDS = 90.0

# Circuit breaker
DEFAULT_MAX_FAILURES = 5
DEFAULT_RESET_TIMEOUT = 60.0

# Retry
DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_RETRIES = 3
BACKOFF_BASE_SECONDS = 1.0
BACKOFF_CAP_SECONDS = 10.0
RETRYABLE_ERROR_CODES = frozenset({"network_request_failed", "deadline_exceeded"})

# Validation
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
FREE_TEXT_MAX_LENGTH = 500
COMMENT_MAX_LENGTH = 1000
REPORT_DETAILS_MAX_LENGTH = 500
MAX_TAGS = 10
TAG_MIN_LENGTH = 1
TAG_MAX_LENGTH = 30
MIN_RATING = 1
MAX_RATING = 5

BLOCKED_TERMS = (
    "viagra",
    "casino",
    "crypto giveaway",
    "click here",
    "free money",
)

REPORT_TYPES = (
    "CLOSED",
    "WRONG_HOURS",
    "WRONG_LOCATION",
    "ACCESS_CHANGED",
    "OTHER",
)

# Storage
STORAGE_NAMESPACE = "pyfacilitydirectory"
STORAGE_KEY_LENGTH = 32
CACHE_EXPIRY_SECONDS = 15 * 60

# HTTP backend
DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "pyfacilitydirectory",
}
TIMEOUT_STATUSES = frozenset({408, 504})
TRANSIENT_STATUSES = frozenset({429, 500, 502, 503})
