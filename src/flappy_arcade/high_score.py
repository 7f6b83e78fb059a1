"""
high_score.py: Local persistence for the player's best score and the last
display name used, so a returning player is not asked again.
"""

import logging
import sqlite3
from typing import Optional

from .constants import HIGH_SCORE_KEY, LAST_PLAYER_KEY, LOCAL_DB_FILE

logger = logging.getLogger("flappy.high_score")


class HighScoreStore:
    """A single integer kept under a fixed key in a small SQLite key/value table."""

    def __init__(self, db_file: str = LOCAL_DB_FILE, key: str = HIGH_SCORE_KEY):
        self.key = key
        self.conn = sqlite3.connect(db_file, check_same_thread=False)
        self.setup()

    def setup(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS Settings (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)
        self.conn.commit()

    def _get(self, key: str) -> Optional[str]:
        row = self.conn.execute(
            "SELECT value FROM Settings WHERE key=?", (key,)).fetchone()
        return row[0] if row else None

    def _set(self, key: str, value: str):
        self.conn.execute(
            "INSERT INTO Settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
            (key, value))
        self.conn.commit()

    def load(self) -> int:
        """Reads the stored high score; anything missing or unparsable counts as 0."""
        value = self._get(self.key)
        if value is None:
            return 0
        try:
            return max(int(value), 0)
        except (TypeError, ValueError):
            logger.warning("Ignoring unreadable high score %r", value)
            return 0

    def save(self, score: int):
        self._set(self.key, str(int(score)))
        logger.debug("Saved high score %d", score)

    # -------- Remembered player --------

    def last_player(self) -> Optional[str]:
        name = (self._get(LAST_PLAYER_KEY) or "").strip()
        return name or None

    def remember_player(self, display_name: str):
        self._set(LAST_PLAYER_KEY, display_name)

    def forget_player(self):
        self.conn.execute("DELETE FROM Settings WHERE key=?", (LAST_PLAYER_KEY,))
        self.conn.commit()

    def close(self):
        self.conn.close()
