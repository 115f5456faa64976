"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

TOKEN_COOKIE = "token"
ROLE_COOKIE = "role"
DEFAULT_TOKEN_MAX_AGE_SECONDS = 86400
TOKEN_SALT = "hrm-portal-session"

DEFAULT_TOTAL_LEAVES = 14
MIN_PASSWORD_LENGTH = 6

DEFAULT_LOG_PAGE_LIMIT = 50
MAX_LOG_PAGE_LIMIT = 500
AUTO_CLOCKOUT_WORKERS = 8

MIN_LOAN_MONTHS = 1
MAX_LOAN_MONTHS = 60

PROFILE_UPLOAD_PREFIX = "/uploads/profiles"
