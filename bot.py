"""Reminders Bot - Main entrypoint.

Stores reminders locally, schedules their notifications with APScheduler
and delivers them to a Discord channel.
"""

from datetime import datetime

import discord
from discord import app_commands
from discord.ext import commands
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from dateutil.parser import parse as parse_dt

from logger import logger
from config import CUSTOM_RECURRENCE_REFRESH_HOURS, DISCORD_TOKEN, LOCAL_TZ
from domains.reminders import (
    NotificationScheduler,
    Recurrence,
    RecurrenceType,
    ReminderStore,
    StorageError,
    UNCHANGED,
    check_notification_permission,
    create_reminder,
    delete_reminder,
    edit_reminder,
    execute_notification,
    is_completed_on_date,
    refresh_custom_plans,
    reload_reminders_on_startup,
    reminders_for_date,
    toggle_reminder_completion,
)
from domains.reminders.recurrence import to_local

# Initialize bot
intents = discord.Intents.default()
bot = commands.Bot(command_prefix="/", intents=intents)

# Initialize scheduler and store
scheduler = AsyncIOScheduler(timezone=LOCAL_TZ)
store = ReminderStore()


async def deliver(reminder_id: str, title: str, body: str):
    await execute_notification(reminder_id, title, body, bot)


notifications = NotificationScheduler(scheduler, deliver)


async def refresh_plans():
    await refresh_custom_plans(store, notifications)


@bot.event
async def on_ready():
    """Called when bot is connected and ready."""
    logger.info(f"Logged in as {bot.user}")

    # Sync slash commands with Discord
    try:
        synced = await bot.tree.sync()
        logger.info(f"Synced {len(synced)} slash commands")
    except Exception as e:
        logger.error(f"Failed to sync slash commands: {e}")

    if not scheduler.running:
        scheduler.start()

    # Custom recurrences are planned a fixed horizon ahead; keep it rolling
    scheduler.add_job(
        refresh_plans,
        trigger=IntervalTrigger(hours=CUSTOM_RECURRENCE_REFRESH_HOURS),
        id="reminder_plan_refresh",
        name="Refresh custom recurrence plans",
        replace_existing=True
    )

    await check_notification_permission(bot)

    # Scheduler holds nothing across restarts: rebuild from the store
    try:
        trigger_count = await reload_reminders_on_startup(store, notifications)
        logger.info(f"Scheduler started with {trigger_count} notification triggers")
    except Exception as e:
        logger.error(f"Failed to reload reminders: {e}")


def _parse_when(text: str) -> datetime | None:
    """Parse a user-supplied time, interpreting it in the local timezone."""
    try:
        parsed = parse_dt(text, default=datetime.now(LOCAL_TZ).replace(second=0, microsecond=0))
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=LOCAL_TZ)
    return parsed


REPEAT_CHOICES = [
    app_commands.Choice(name="Daily", value="daily"),
    app_commands.Choice(name="Weekly", value="weekly"),
    app_commands.Choice(name="Monthly", value="monthly"),
    app_commands.Choice(name="Every N days", value="custom"),
]


@bot.tree.command(name="remind", description="Create a reminder")
@app_commands.describe(
    title="What to remind you about",
    when="When it is due (e.g., '2024-06-01 09:00', 'friday 8:30am')",
    repeat="How it repeats",
    every_days="Interval in days for a custom repeat"
)
@app_commands.choices(repeat=REPEAT_CHOICES)
async def cmd_remind(
    interaction: discord.Interaction,
    title: str,
    when: str,
    repeat: app_commands.Choice[str] = None,
    every_days: int = None
):
    """Create a reminder."""
    due_date = _parse_when(when)
    if not due_date:
        await interaction.response.send_message(f"Couldn't parse time '{when}'.", ephemeral=True)
        return

    recurrence = None
    if repeat:
        recurrence = Recurrence(type=RecurrenceType(repeat.value), custom_days=every_days)

    try:
        reminder = await create_reminder(store, notifications, title, due_date, recurrence=recurrence)
    except ValueError as e:
        await interaction.response.send_message(str(e), ephemeral=True)
        return
    except StorageError as e:
        logger.error(f"Failed to save reminder: {e}")
        await interaction.response.send_message("Failed to save reminder. Please try again.", ephemeral=True)
        return

    repeat_text = f" (repeats {repeat.name.lower()})" if repeat else ""
    await interaction.response.send_message(
        f"**Reminder set for {to_local(reminder.due_date).strftime('%a %d %b %H:%M')}**{repeat_text}\n\n"
        f"> {reminder.title}\n`{reminder.id}`"
    )


@bot.tree.command(name="reminders", description="List reminders due on a day")
@app_commands.describe(day="Day to show (defaults to today)")
async def cmd_reminders(interaction: discord.Interaction, day: str = None):
    """List reminders due on a day."""
    date = _parse_when(day) if day else datetime.now(LOCAL_TZ)
    if not date:
        await interaction.response.send_message(f"Couldn't parse day '{day}'.", ephemeral=True)
        return

    entries = await reminders_for_date(store, date)
    if not entries:
        await interaction.response.send_message("No reminders due.", ephemeral=True)
        return

    lines = [f"**Reminders for {to_local(date).strftime('%a %d %b')}:**\n"]
    for reminder, completed in entries:
        mark = "[x]" if completed else "[ ]"
        lines.append(f"{mark} {to_local(reminder.due_date).strftime('%H:%M')} - {reminder.title}")
        lines.append(f"  `{reminder.id}`")

    await interaction.response.send_message("\n".join(lines))


@bot.tree.command(name="done", description="Toggle completion of a reminder")
@app_commands.describe(reminder_id="The reminder ID", day="Occurrence day (defaults to today)")
async def cmd_done(interaction: discord.Interaction, reminder_id: str, day: str = None):
    """Toggle completion of a reminder occurrence."""
    date = _parse_when(day) if day else datetime.now(LOCAL_TZ)
    if not date:
        await interaction.response.send_message(f"Couldn't parse day '{day}'.", ephemeral=True)
        return

    try:
        toggled = await toggle_reminder_completion(store, notifications, reminder_id, date)
    except StorageError as e:
        logger.error(f"Failed to toggle reminder: {e}")
        await interaction.response.send_message("Failed to update reminder.", ephemeral=True)
        return

    if not toggled:
        await interaction.response.send_message(
            "Reminder not found. Use `/reminders` to see your reminders.", ephemeral=True
        )
        return

    state = "completed" if is_completed_on_date(toggled, date) else "not completed"
    await interaction.response.send_message(f"Marked {state}: {toggled.title}")


@bot.tree.command(name="edit-reminder", description="Change a reminder's title, time or repeat")
@app_commands.describe(
    reminder_id="The reminder ID",
    title="New title",
    when="New due time",
    repeat="New repeat rule",
    every_days="Interval in days for a custom repeat"
)
@app_commands.choices(repeat=REPEAT_CHOICES + [app_commands.Choice(name="Once", value="once")])
async def cmd_edit_reminder(
    interaction: discord.Interaction,
    reminder_id: str,
    title: str = None,
    when: str = None,
    repeat: app_commands.Choice[str] = None,
    every_days: int = None
):
    """Edit an existing reminder."""
    due_date = None
    if when:
        due_date = _parse_when(when)
        if not due_date:
            await interaction.response.send_message(f"Couldn't parse time '{when}'.", ephemeral=True)
            return

    recurrence = UNCHANGED
    if repeat:
        recurrence = None if repeat.value == "once" else Recurrence(
            type=RecurrenceType(repeat.value), custom_days=every_days
        )

    try:
        edited = await edit_reminder(
            store, notifications, reminder_id, title=title, due_date=due_date, recurrence=recurrence
        )
    except ValueError as e:
        await interaction.response.send_message(str(e), ephemeral=True)
        return
    except StorageError as e:
        logger.error(f"Failed to edit reminder: {e}")
        await interaction.response.send_message("Failed to update reminder.", ephemeral=True)
        return

    if not edited:
        await interaction.response.send_message(
            "Reminder not found. Use `/reminders` to see your reminders.", ephemeral=True
        )
        return

    repeat_text = f" (repeats {edited.recurrence.type.value})" if edited.recurrence else ""
    await interaction.response.send_message(
        f"**Updated: {to_local(edited.due_date).strftime('%a %d %b %H:%M')}**{repeat_text}\n\n"
        f"> {edited.title}\n`{edited.id}`"
    )


@bot.tree.command(name="delete-reminder", description="Delete a reminder")
@app_commands.describe(reminder_id="The reminder ID")
async def cmd_delete_reminder(interaction: discord.Interaction, reminder_id: str):
    """Delete a reminder and its notifications."""
    try:
        deleted = await delete_reminder(store, notifications, reminder_id)
    except StorageError as e:
        logger.error(f"Failed to delete reminder: {e}")
        await interaction.response.send_message("Failed to delete reminder.", ephemeral=True)
        return

    if deleted:
        await interaction.response.send_message(f"Deleted reminder `{reminder_id}`")
    else:
        await interaction.response.send_message("Reminder not found.", ephemeral=True)


@bot.event
async def on_error(event, *args, **kwargs):
    """Handle errors."""
    logger.error(f"Bot error in {event}: {args}")


def main():
    """Entry point."""
    if not DISCORD_TOKEN:
        logger.error("DISCORD_TOKEN not set")
        return

    logger.info("Starting Reminders Bot...")
    bot.run(DISCORD_TOKEN)


if __name__ == "__main__":
    main()
