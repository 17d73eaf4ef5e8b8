"""Tests for notification delivery to Discord."""

from unittest.mock import AsyncMock, Mock

import pytest

import config
from domains.reminders.executor import check_notification_permission, execute_notification


@pytest.fixture(autouse=True)
def reminders_channel(monkeypatch):
    monkeypatch.setattr(config, "REMINDERS_CHANNEL_ID", 4242)


class TestExecuteNotification:
    """Test delivery of fired triggers."""

    @pytest.mark.asyncio
    async def test_posts_to_reminders_channel(self, mock_discord_bot):
        await execute_notification("remind_1", "Reminder: Pay rent", "This task is due!", mock_discord_bot)

        mock_discord_bot.get_channel.assert_called_once_with(4242)
        channel = mock_discord_bot.get_channel.return_value
        channel.send.assert_called_once()
        message = channel.send.call_args[0][0]
        assert "**Reminder: Pay rent**" in message
        assert "This task is due!" in message
        assert "remind_1" in message

    @pytest.mark.asyncio
    async def test_fetches_uncached_channel(self, mock_discord_bot):
        mock_discord_bot.get_channel.return_value = None
        fetched = Mock(send=AsyncMock())
        mock_discord_bot.fetch_channel.return_value = fetched

        await execute_notification("remind_1", "Overdue: Pay rent", "Please complete it.", mock_discord_bot)

        fetched.send.assert_called_once()

    @pytest.mark.asyncio
    async def test_send_failure_is_swallowed(self, mock_discord_bot):
        channel = mock_discord_bot.get_channel.return_value
        channel.send.side_effect = RuntimeError("Missing Access")

        # Should not raise
        await execute_notification("remind_1", "Reminder: x", "y", mock_discord_bot)


class TestPermissionCheck:
    """Test the startup permission check."""

    @pytest.mark.asyncio
    async def test_reachable_channel(self, mock_discord_bot):
        assert await check_notification_permission(mock_discord_bot) is True

    @pytest.mark.asyncio
    async def test_unset_channel(self, mock_discord_bot, monkeypatch):
        monkeypatch.setattr(config, "REMINDERS_CHANNEL_ID", 0)
        assert await check_notification_permission(mock_discord_bot) is False

    @pytest.mark.asyncio
    async def test_unreachable_channel_is_not_fatal(self, mock_discord_bot):
        mock_discord_bot.get_channel.return_value = None
        mock_discord_bot.fetch_channel.side_effect = RuntimeError("Forbidden")

        assert await check_notification_permission(mock_discord_bot) is False
