"""Global configuration for the reminders bot."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo
from dotenv import load_dotenv

load_dotenv()

# Discord
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")
REMINDERS_CHANNEL_ID = int(os.getenv("REMINDERS_CHANNEL_ID", 0))

# Local clock used for calendar-day boundaries and cron triggers
REMINDERS_TIMEZONE = os.getenv("REMINDERS_TIMEZONE", "Europe/London")
LOCAL_TZ = ZoneInfo(REMINDERS_TIMEZONE)

# Data directory
DATA_DIR = Path(os.getenv("LOCALAPPDATA", ".")) / "reminders"
DATA_DIR.mkdir(parents=True, exist_ok=True)

# Reminder blob store (SQLite key-value table)
REMINDER_STORE_DB = os.getenv("REMINDER_STORE_DB", str(DATA_DIR / "reminders.db"))
REMINDER_STORE_KEY = "@reminders"

# Overdue nudges
OVERDUE_REPEAT_INTERVAL_MINUTES = int(os.getenv("OVERDUE_REPEAT_INTERVAL_MINUTES", 1))
OVERDUE_WINDOW_HOURS = int(os.getenv("OVERDUE_WINDOW_HOURS", 24))

# Custom (every N days) recurrences are planned as individual triggers up to this far ahead
CUSTOM_RECURRENCE_HORIZON_DAYS = int(os.getenv("CUSTOM_RECURRENCE_HORIZON_DAYS", 60))
CUSTOM_RECURRENCE_REFRESH_HOURS = int(os.getenv("CUSTOM_RECURRENCE_REFRESH_HOURS", 24))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = DATA_DIR / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
