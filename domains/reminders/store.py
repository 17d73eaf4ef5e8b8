"""Local SQLite persistence for reminders.

The whole reminder list is stored as a single JSON blob under one key:
every mutation loads the full set and writes the full set back.
"""

import asyncio
import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import config
from logger import logger
from .models import Reminder


class StorageError(Exception):
    """Reminders could not be written to the store."""


class ReminderStore:
    """Key-value blob store holding the full reminder list."""

    def __init__(self, db_path: Optional[str] = None, key: Optional[str] = None):
        self.db_path = db_path or config.REMINDER_STORE_DB
        self.key = key or config.REMINDER_STORE_KEY
        self._connection: Optional[sqlite3.Connection] = None

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection with WAL mode."""
        if self._connection is not None:
            return self._connection

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = sqlite3.connect(
            self.db_path,
            check_same_thread=False,  # Calls run in worker threads
            timeout=10.0
        )
        self._connection.execute("PRAGMA journal_mode=WAL")
        self._connection.execute("PRAGMA busy_timeout=5000")
        self._connection.executescript("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
        """)
        self._connection.commit()

        logger.info(f"Reminder store initialized: {self.db_path}")
        return self._connection

    @contextmanager
    def _transaction(self):
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    # --- Blob access ---

    def get_item(self) -> Optional[str]:
        row = self._get_connection().execute(
            "SELECT value FROM kv_store WHERE key = ?", (self.key,)
        ).fetchone()
        return row[0] if row else None

    def set_item(self, value: str) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO kv_store (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (self.key, value)
            )

    # --- Reminder list ---

    def _read_records(self) -> list:
        raw = self.get_item()
        records = json.loads(raw) if raw else []
        if not isinstance(records, list):
            raise ValueError(f"Reminder blob is not a list ({type(records).__name__})")
        return records

    async def load(self) -> list[Reminder]:
        """Load every reminder for display.

        Read failures are logged and return an empty list. Malformed records
        are skipped individually.
        """
        try:
            records = await asyncio.to_thread(self._read_records)
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Failed to load reminders: {e}")
            return []

        reminders, _ = _parse_records(records)
        return reminders

    async def load_for_update(self) -> tuple[list[Reminder], list]:
        """Load every reminder ahead of a write.

        Returns:
            (reminders, unreadable) where ``unreadable`` holds the raw records
            that could not be parsed; pass them back to ``save_all`` so they
            are not lost

        Raises:
            StorageError: If the stored list could not be read
        """
        try:
            records = await asyncio.to_thread(self._read_records)
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Failed to load reminders for update: {e}")
            raise StorageError(str(e)) from e
        return _parse_records(records)

    async def save_all(self, reminders: list[Reminder], unreadable: list = ()) -> None:
        """Replace the stored list with ``reminders``.

        Args:
            reminders: Full reminder list
            unreadable: Raw records from ``load_for_update`` to write back unchanged

        Raises:
            StorageError: If the list could not be serialized or written
        """
        try:
            payload = json.dumps(list(unreadable) + [r.to_dict() for r in reminders])
            await asyncio.to_thread(self.set_item, payload)
        except (sqlite3.Error, TypeError, ValueError) as e:
            logger.error(f"Failed to save reminders: {e}")
            raise StorageError(str(e)) from e


def _parse_records(records: list) -> tuple[list[Reminder], list]:
    reminders, unreadable = [], []
    for record in records:
        try:
            reminders.append(Reminder.from_dict(record))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping malformed reminder record {record!r}: {e}")
            unreadable.append(record)
    return reminders, unreadable
