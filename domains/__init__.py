"""Domain modules for the reminders bot."""
