import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "hrm_portal")

TOKEN_MAX_AGE_SECONDS = int(os.getenv("TOKEN_MAX_AGE_SECONDS", "86400"))
COOKIE_SECURE = bool(int(os.getenv("COOKIE_SECURE", "1")))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

AUTO_CLOCKOUT_API_KEY = os.getenv("AUTO_CLOCKOUT_API_KEY", "")

ACTIVITY_LOG_ENABLED = bool(int(os.getenv("ACTIVITY_LOG_ENABLED", "1")))
