"""Tests for logging setup."""

import logging
import os
from datetime import datetime

from logger import log_file_for, logger


class TestLogging:
    """Test log file naming and handler wiring."""

    def test_log_file_is_dated_and_prefixed(self):
        path = log_file_for(datetime(2024, 3, 1, 12, 0))
        assert os.path.basename(path) == "reminders-2024-03-01.log"

    def test_reminders_logger_writes_to_todays_file(self):
        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert os.path.basename(file_handlers[0].baseFilename).startswith("reminders-")

    def test_scheduler_warnings_share_the_file(self):
        scheduler_logger = logging.getLogger("apscheduler")
        assert scheduler_logger.level == logging.WARNING
        assert any(h in scheduler_logger.handlers for h in logger.handlers)
