import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "hrm_portal")

# Session cookie/token lifetime (seconds)
TOKEN_MAX_AGE_SECONDS = int(os.getenv("TOKEN_MAX_AGE_SECONDS", "86400"))
COOKIE_SECURE = bool(int(os.getenv("COOKIE_SECURE", "0")))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app creates the unique indexes on startup (idempotent)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo accounts on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Empty means the auto clock-out endpoint does not check X-API-Key
AUTO_CLOCKOUT_API_KEY = os.getenv("AUTO_CLOCKOUT_API_KEY", "")

ACTIVITY_LOG_ENABLED = bool(int(os.getenv("ACTIVITY_LOG_ENABLED", "1")))
