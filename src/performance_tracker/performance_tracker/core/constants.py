"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TAG_COLOR = "#6366f1"

# Scoring
SCREENSHARING_POINTS = 5
# (minimum hours, points), highest threshold first
HOURS_BONUS_TIERS = (
    (8, 10),
    (6, 7),
    (4, 4),
    (2, 2),
)
BONUS_PER_POINT = 10
MAX_DAILY_BONUS = 500

# Leaderboard / stats
DEFAULT_LEADERBOARD_DAYS = 30
MAX_LEADERBOARD_DAYS = 366
DEFAULT_RECENT_FORMS = 7

DEFAULT_DRAFT_DEBOUNCE_SECONDS = 2.0
