"""
Repository for the durable key-value slot.

All SQL for the slot is encapsulated here. Callers see text in and text out:

    get(key) -> text or None when the slot is absent
    set(key, text) -> replaces any prior value

sqlite3 errors are wrapped in PersistenceReadError / PersistenceWriteError.
"""
import sqlite3
import logging
from typing import Optional

from nutricare.core.exceptions import PersistenceReadError, PersistenceWriteError
from nutricare.repositories.base import Database
from nutricare.core.datetime_utils import utc_now, format_iso

logger = logging.getLogger(__name__)


class KeyValueRepository:
    """
    Repository for named text slots.

    It should be instantiated via nutricare.core.dependencies.get_key_value_repository().
    """

    def __init__(self, db: Database):
        """
        Initialize the key-value repository.

        Args:
            db: Database instance for data access.
        """
        self._db = db

    def get(self, key: str) -> Optional[str]:
        """
        Read the text stored under a key.

        Args:
            key: Slot name.

        Returns:
            Optional[str]: The stored text, or None if the slot is absent.

        Raises:
            PersistenceReadError: If the database cannot be read.
        """
        try:
            conn = self._db.get_connection()
        except sqlite3.Error as e:
            raise PersistenceReadError(key=key, reason=str(e)) from e

        try:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM key_value WHERE key = ?", (key,))
            row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.warning(f"Failed to read slot '{key}': {e}")
            raise PersistenceReadError(key=key, reason=str(e)) from e
        finally:
            conn.close()

        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """
        Store text under a key, replacing any prior value.

        The write happens in a single transaction.

        Args:
            key: Slot name.
            value: Text to store.

        Raises:
            PersistenceWriteError: If the write fails.
        """
        try:
            conn = self._db.get_connection()
        except sqlite3.Error as e:
            raise PersistenceWriteError(key=key, reason=str(e)) from e

        try:
            with conn:
                conn.execute("""
                    INSERT INTO key_value (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                """, (key, value, format_iso(utc_now())))
        except sqlite3.Error as e:
            logger.warning(f"Failed to write slot '{key}': {e}")
            raise PersistenceWriteError(key=key, reason=str(e)) from e
        finally:
            conn.close()

        logger.debug(f"Slot '{key}' written ({len(value)} chars)")
