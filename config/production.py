import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "performance_db"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "Asia/Kolkata")

DRAFT_DEBOUNCE_SECONDS = float(os.getenv("DRAFT_DEBOUNCE_SECONDS", "2.0"))

LEADERBOARD_DEFAULT_DAYS = int(os.getenv("LEADERBOARD_DEFAULT_DAYS", "30"))
LEADERBOARD_MAX_DAYS = int(os.getenv("LEADERBOARD_MAX_DAYS", "366"))
SELF_STATS_RECENT_LIMIT = int(os.getenv("SELF_STATS_RECENT_LIMIT", "7"))
