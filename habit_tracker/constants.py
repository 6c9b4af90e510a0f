"""
Application-wide constants.
Frequencies, badge milestones, category palette, limits and default paths.
"""

# Habit frequencies
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_CUSTOM = "custom"

# Weekday indices (0 = Sunday ... 6 = Saturday)
SUNDAY = 0
WEEKLY_DEFAULT_DAYS = [SUNDAY]
DAYS_IN_WEEK = 7

# Date format for log and freeze-day keys
DATE_FORMAT = "%Y-%m-%d"

# Snapshot format version
DATA_VERSION = 2

# Streak walk safety limit (iterations)
MAX_STREAK_ITERATIONS = 3650

# Freeze days allowed per calendar month (enforced by the caller layer)
MAX_FREEZE_DAYS_PER_MONTH = 2
DEFAULT_FREEZE_REASON = "Rest day"

# Badge types
BADGE_WEEK = "week"
BADGE_MONTH = "month"
BADGE_CENTURY = "century"
BADGE_YEAR = "year"

BADGE_MILESTONES = [
    {"type": BADGE_WEEK, "days": 7, "emoji": "🔥", "label": "First Week"},
    {"type": BADGE_MONTH, "days": 30, "emoji": "⭐", "label": "Monthly Master"},
    {"type": BADGE_CENTURY, "days": 100, "emoji": "💎", "label": "Century Club"},
    {"type": BADGE_YEAR, "days": 365, "emoji": "👑", "label": "Year Champion"},
]

# Category colors, assigned in order to new categories
CATEGORY_COLORS = [
    "#4CAF50",  # Green
    "#2196F3",  # Blue
    "#FF9800",  # Orange
    "#9C27B0",  # Purple
    "#F44336",  # Red
    "#00BCD4",  # Cyan
    "#E91E63",  # Pink
    "#795548",  # Brown
]

# Statistics windows (days)
DAY_OF_WEEK_WINDOW = 90
TREND_WINDOW = 30
SHORT_RATE_WINDOW = 7
LONG_RATE_WINDOW = 30

# Trend sentinel for frozen days
TREND_FROZEN = -1
TREND_COMPLETED = 100
TREND_MISSED = 0

# Daily note integration
DAILY_NOTE_PLACEHOLDER = "{{habits}}"
DEFAULT_DAILY_NOTE_FORMAT = "## Habits\n{{habits}}"

# Storage
DEFAULT_DATABASE_URL = "sqlite:///./habits.db"
DEFAULT_SNAPSHOT_KEY = "default"

# Backups
DEFAULT_BACKUP_DIRECTORY = "./backups"
DEFAULT_BACKUP_TIME = "03:00"
DEFAULT_BACKUP_KEEP_COUNT = 10
BACKUP_FILENAME_PREFIX = "habit-tracker-backup"
BACKUP_TYPE_AUTO = "auto"
BACKUP_TYPE_MANUAL = "manual"

# Scheduler
BADGE_SWEEP_TIME = "00:05"

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/habit-tracker"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
DEFAULT_LOG_FILE = "habit_tracker.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
