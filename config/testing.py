import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "performance_test_db"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

ORG_TIMEZONE = "UTC"

# Tests flush explicitly.
DRAFT_DEBOUNCE_SECONDS = 3600.0

LEADERBOARD_DEFAULT_DAYS = 30
LEADERBOARD_MAX_DAYS = 366
SELF_STATS_RECENT_LIMIT = 7
