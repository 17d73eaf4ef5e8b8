"""Deliver fired notifications to Discord."""

import discord

import config
from logger import logger


async def execute_notification(
    reminder_id: str,
    title: str,
    body: str,
    bot: discord.Client
):
    """Post a notification to the reminders channel.

    This function is called by APScheduler when a trigger fires.
    Delivery is best-effort: failures are logged, never raised.

    Args:
        reminder_id: The reminder that owns the trigger
        title: Notification title
        body: Notification body
        bot: Discord bot instance
    """
    try:
        channel = bot.get_channel(config.REMINDERS_CHANNEL_ID)
        if not channel:
            channel = await bot.fetch_channel(config.REMINDERS_CHANNEL_ID)

        await channel.send(f"**{title}**\n> {body}\n`{reminder_id}`")
        logger.info(f"Fired notification for {reminder_id}: {title}")

    except Exception as e:
        logger.error(f"Failed to deliver notification for {reminder_id}: {e}")


async def check_notification_permission(bot: discord.Client) -> bool:
    """Check once that notifications can be delivered.

    A missing or unreachable channel is not fatal: reminders are still stored
    and scheduled, they just won't be seen.

    Returns:
        True if the reminders channel is reachable
    """
    if not config.REMINDERS_CHANNEL_ID:
        logger.warning("REMINDERS_CHANNEL_ID not set, notifications will not be delivered")
        return False

    try:
        channel = bot.get_channel(config.REMINDERS_CHANNEL_ID)
        if not channel:
            channel = await bot.fetch_channel(config.REMINDERS_CHANNEL_ID)
        return channel is not None
    except Exception as e:
        logger.warning(f"Reminders channel {config.REMINDERS_CHANNEL_ID} unavailable: {e}")
        return False
