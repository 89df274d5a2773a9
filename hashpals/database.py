import json
import logging
import sqlite3
import time

from hashpals.game_utils import now_ms
from hashpals.models import GameState

logger = logging.getLogger(__name__)

STATE_ROW_ID = 1


class DatabaseManager:
    """Handles SQL persistence to keep the pet 'alive' on disk.

    The whole game state is stored as one JSON blob in a single row, so a
    load or save is always the complete record.
    """
    def __init__(self, db_path):
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path)
        self.create_tables()

    def create_tables(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS game_state (
                id INTEGER PRIMARY KEY,
                blob TEXT NOT NULL,
                saved_at REAL
            )
        """)
        self.conn.commit()

    def _write(self, state):
        self.conn.execute(
            "INSERT OR REPLACE INTO game_state (id, blob, saved_at) VALUES (?, ?, ?)",
            (STATE_ROW_ID, json.dumps(state.to_dict()), time.time()),
        )
        self.conn.commit()

    def load(self, now=None):
        """Returns the saved GameState, or None when nothing usable is stored."""
        try:
            row = self.conn.execute("SELECT blob FROM game_state WHERE id = ?", (STATE_ROW_ID,)).fetchone()
        except sqlite3.Error as e:
            logger.warning("Error loading game state: %s. Starting fresh.", e)
            return None
        if row is None:
            return None
        try:
            data = json.loads(row[0])
            return GameState.from_dict(data, now=now_ms() if now is None else now)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Saved game state is unreadable (%s). Starting fresh.", e)
            return None

    def save(self, state):
        """Best effort: a failed write is logged and reported, never raised."""
        try:
            self._write(state)
            return True
        except sqlite3.Error as e:
            logger.warning("Error saving game state: %s", e)
            return False

    def clear(self):
        try:
            self.conn.execute("DELETE FROM game_state WHERE id = ?", (STATE_ROW_ID,))
            self.conn.commit()
            return True
        except sqlite3.Error as e:
            logger.warning("Error clearing game state: %s", e)
            return False

    def close(self):
        self.conn.close()


class MemoryStore:
    """Same load/save contract as DatabaseManager, kept in memory."""
    def __init__(self, blob=None):
        self.blob = blob
        self.saves = 0

    def load(self, now=None):
        if self.blob is None:
            return None
        return GameState.from_dict(json.loads(self.blob), now=now_ms() if now is None else now)

    def save(self, state):
        self.blob = json.dumps(state.to_dict())
        self.saves += 1
        return True

    def clear(self):
        self.blob = None
        return True
