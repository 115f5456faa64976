import os

SECRET_KEY = "test-secret"

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "hrm_portal_test")

TOKEN_MAX_AGE_SECONDS = 86400
COOKIE_SECURE = False

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

AUTO_CLOCKOUT_API_KEY = ""

ACTIVITY_LOG_ENABLED = True
