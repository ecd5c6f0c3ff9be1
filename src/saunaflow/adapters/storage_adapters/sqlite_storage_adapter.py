import os
import sqlite3
import threading
from typing import Optional

from saunaflow.core.ports.storage_port import StoragePort
from saunaflow.utils import custom_exception as ce
from saunaflow.utils.logging_handler import setup_logger


class SqliteStorageAdapter(StoragePort):
    """Key/value storage in a single sqlite table."""

    def __init__(self, db_path: str = ":memory:"):
        self.logger = setup_logger(__name__)
        if db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        # one connection shared by the web worker threads, serialized by the lock
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.cur = self.conn.cursor()
        self._lock = threading.Lock()
        self._initialize_tables()

    def _initialize_tables(self):
        """Private method to ensure schema exists."""
        self.cur.execute("""
        CREATE TABLE IF NOT EXISTS KeyValue(
            Key TEXT PRIMARY KEY,
            Value TEXT NOT NULL,
            UpdatedOn TEXT
        );""")
        self.conn.commit()

    def close(self):
        self.conn.close()

    def __del__(self):
        try:
            self.conn.close()
        except Exception:
            pass

    def get(self, key: str) -> Optional[str]:
        try:
            with self._lock:
                self.cur.execute("SELECT Value FROM KeyValue WHERE Key = ?", (key,))
                row = self.cur.fetchone()
            return row[0] if row else None
        except sqlite3.Error as e:
            self.logger.exception(f"Database error in get: {e}")
            raise ce.StorageError(f"Could not read '{key}'.") from e

    def set(self, key: str, value: str) -> None:
        try:
            with self._lock:
                self.cur.execute("""
                    INSERT INTO KeyValue (Key, Value, UpdatedOn) VALUES (?, ?, DATETIME('now'))
                    ON CONFLICT(Key) DO UPDATE SET Value = excluded.Value, UpdatedOn = excluded.UpdatedOn
                """, (key, value))
                self.conn.commit()
        except sqlite3.Error as e:
            self.logger.exception(f"Database error in set: {e}")
            raise ce.StorageError(f"Could not write '{key}'.") from e

    def remove(self, key: str) -> None:
        try:
            with self._lock:
                self.cur.execute("DELETE FROM KeyValue WHERE Key = ?", (key,))
                self.conn.commit()
        except sqlite3.Error as e:
            self.logger.exception(f"Database error in remove: {e}")
            raise ce.StorageError(f"Could not remove '{key}'.") from e

    def clear(self) -> None:
        try:
            with self._lock:
                self.cur.execute("DELETE FROM KeyValue")
                self.conn.commit()
            self.logger.info("Storage cleared.")
        except sqlite3.Error as e:
            self.logger.exception(f"Database error in clear: {e}")
            raise ce.StorageError("Could not clear storage.") from e
