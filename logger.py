"""Logging for the reminders bot.

Everything goes to ``LOG_DIR/reminders-YYYY-MM-DD.log``. APScheduler's own
warnings (missed and skipped runs) land in the same file so a silent
notification can be traced from one place.
"""

import logging
import sys
from datetime import datetime

from config import LOG_DIR, LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def log_file_for(day: datetime) -> str:
    return str(LOG_DIR / f"reminders-{day.strftime('%Y-%m-%d')}.log")


def setup_logging() -> logging.Logger:
    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)

    file_handler = logging.FileHandler(log_file_for(datetime.now()), encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    handlers = [file_handler]
    if sys.stdout is not None and sys.stdout.isatty():
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%H:%M:%S"
        ))
        handlers.append(console_handler)

    logger = logging.getLogger("reminders")
    logger.setLevel(level)
    logger.handlers = list(handlers)

    scheduler_logger = logging.getLogger("apscheduler")
    scheduler_logger.setLevel(logging.WARNING)
    scheduler_logger.handlers = list(handlers)

    return logger


# Global logger instance
logger = setup_logging()
