"""Pytest configuration and fixtures."""

import os
import sys
from datetime import datetime
from unittest.mock import AsyncMock, Mock
from zoneinfo import ZoneInfo

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import config

LONDON = ZoneInfo("Europe/London")


@pytest.fixture(autouse=True)
def local_clock(monkeypatch):
    """Pin the local timezone and notification settings for every test."""
    monkeypatch.setattr(config, "LOCAL_TZ", LONDON)
    monkeypatch.setattr(config, "OVERDUE_REPEAT_INTERVAL_MINUTES", 1)
    monkeypatch.setattr(config, "OVERDUE_WINDOW_HOURS", 24)
    monkeypatch.setattr(config, "CUSTOM_RECURRENCE_HORIZON_DAYS", 60)
    return LONDON


@pytest.fixture
def now():
    """Fixed 'current time' passed to planning functions."""
    return datetime(2024, 1, 1, 8, 0, tzinfo=LONDON)


@pytest.fixture
def delivered():
    """Calls received by the delivery callback."""
    return []


@pytest.fixture
def notifications(delivered):
    """Notification scheduler over a real, unstarted APScheduler."""
    from domains.reminders.scheduler import NotificationScheduler

    async def deliver(reminder_id, title, body):
        delivered.append((reminder_id, title, body))

    return NotificationScheduler(AsyncIOScheduler(timezone=LONDON), deliver)


@pytest.fixture
def store(tmp_path):
    """Reminder store backed by a fresh temp database."""
    from domains.reminders.store import ReminderStore

    reminder_store = ReminderStore(db_path=str(tmp_path / "reminders_test.db"))
    yield reminder_store
    reminder_store.close()


@pytest.fixture
def mock_discord_bot():
    """Create a mock Discord bot."""
    bot = Mock()
    bot.get_channel = Mock(return_value=Mock(send=AsyncMock()))
    bot.fetch_channel = AsyncMock()
    bot.user = Mock(name="TestBot#1234")
    return bot
