"""
Database manager for the bank ledger.

This module stores whole-state snapshots in SQLite, one row per storage key.
"""

import json
import sqlite3
import logging
from datetime import datetime
from typing import Optional


class DatabaseManager:
    """Manages snapshot storage for the ledger."""

    def __init__(self, db_path: str = "bank.db"):
        """Initialize database manager."""
        self.db_path = db_path
        self.logger = logging.getLogger(__name__)
        self._init_database()

    def _init_database(self):
        """Initialize database tables."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS snapshots (
                    storage_key TEXT PRIMARY KEY,
                    payload TEXT NOT NULL,
                    saved_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.commit()

    def save_snapshot(self, storage_key: str, payload: dict) -> bool:
        """Overwrite the snapshot stored under a key."""
        try:
            encoded = json.dumps(payload, default=str)
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT OR REPLACE INTO snapshots (storage_key, payload, saved_at)
                    VALUES (?, ?, ?)
                """, (storage_key, encoded, datetime.now().isoformat()))
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            self.logger.error(f"Error saving snapshot: {e}")
            return False

    def load_snapshot(self, storage_key: str) -> Optional[dict]:
        """Load the snapshot stored under a key, or None if there is none."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    SELECT payload FROM snapshots WHERE storage_key = ?
                """, (storage_key,))

                row = cursor.fetchone()
                if row:
                    return json.loads(row[0])
                return None
        except sqlite3.Error as e:
            self.logger.error(f"Error loading snapshot: {e}")
            return None
        except json.JSONDecodeError as e:
            self.logger.error(f"Corrupt snapshot under {storage_key}: {e}")
            return None

    def delete_snapshot(self, storage_key: str) -> bool:
        """Delete the snapshot stored under a key."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    DELETE FROM snapshots WHERE storage_key = ?
                """, (storage_key,))
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            self.logger.error(f"Error deleting snapshot: {e}")
            return False
