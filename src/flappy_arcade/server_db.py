"""
server_db.py: Database layer for users and score persistence.
"""

import hashlib
import hmac
import os
import sqlite3
import threading
from datetime import datetime
from typing import List, Optional

from .constants import SERVER_DB_FILE
from .data_models import LeaderboardEntry, ScoreRecord, User, utc_now

PBKDF2_ROUNDS = 100_000


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    salt = salt or os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ROUNDS)
    return f"{salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: Optional[str]) -> bool:
    if not stored or "$" not in stored:
        return False
    salt_hex, _ = stored.split("$", 1)
    return hmac.compare_digest(hash_password(password, bytes.fromhex(salt_hex)), stored)


class DuplicateUserError(Exception):
    """Username or display name is already taken."""


class PasswordRequiredError(Exception):
    """The display name belongs to an account that logs in with a password."""


class Database:
    """Handles all interaction with the SQLite database."""

    def __init__(self, db_file: str = SERVER_DB_FILE):
        # Request handlers run on a thread pool; the lock serialises access.
        self.conn = sqlite3.connect(db_file, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self.lock = threading.Lock()
        self.setup()

    def setup(self):
        """Creates tables if they don't exist."""
        with self.lock:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS Users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT UNIQUE,
                    display_name TEXT NOT NULL UNIQUE,
                    password_hash TEXT,
                    created_at TEXT NOT NULL
                )
            """)
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS Scores (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    score INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(user_id) REFERENCES Users(id)
                )
            """)
            self.conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_scores_score ON Scores(score DESC)")
            self.conn.commit()

    def close(self):
        with self.lock:
            self.conn.close()

    # -------- Row mapping --------

    @staticmethod
    def _user(row) -> User:
        return User(
            id=row["id"],
            display_name=row["display_name"],
            username=row["username"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    @staticmethod
    def _score(row) -> ScoreRecord:
        return ScoreRecord(
            id=row["id"],
            user_id=row["user_id"],
            score=row["score"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _fetch_user(self, column: str, value) -> Optional[User]:
        with self.lock:
            row = self.conn.execute(
                f"SELECT id, username, display_name, created_at FROM Users WHERE {column}=?",
                (value,)).fetchone()
        return self._user(row) if row else None

    # -------- Users --------

    def get_user(self, user_id: int) -> Optional[User]:
        return self._fetch_user("id", user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self._fetch_user("username", username)

    def get_user_by_display_name(self, display_name: str) -> Optional[User]:
        return self._fetch_user("display_name", display_name)

    def create_user(self, display_name: str, username: Optional[str] = None,
                    password: Optional[str] = None) -> User:
        """Inserts a user; raises DuplicateUserError when a unique column clashes."""
        created = utc_now()
        password_hash = hash_password(password) if password else None
        try:
            with self.lock:
                cur = self.conn.execute(
                    "INSERT INTO Users (username, display_name, password_hash, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (username, display_name, password_hash, created.isoformat()))
                self.conn.commit()
        except sqlite3.IntegrityError as e:
            raise DuplicateUserError(str(e)) from e
        return User(id=cur.lastrowid, display_name=display_name,
                    username=username, created_at=created)

    def _has_password(self, user_id: int) -> bool:
        with self.lock:
            row = self.conn.execute(
                "SELECT password_hash FROM Users WHERE id=?", (user_id,)).fetchone()
        return row is not None and row["password_hash"] is not None

    def get_or_create_user(self, display_name: str) -> User:
        """
        Name-only login. Accounts registered with a password are never
        handed out this way; PasswordRequiredError is raised instead.
        """
        user = self.get_user_by_display_name(display_name)
        if user is not None:
            if self._has_password(user.id):
                raise PasswordRequiredError(display_name)
            return user
        try:
            return self.create_user(display_name)
        except DuplicateUserError:
            # Lost a race with another request creating the same name.
            return self.get_or_create_user(display_name)

    def check_credentials(self, username: str, password: str) -> Optional[User]:
        with self.lock:
            row = self.conn.execute(
                "SELECT id, username, display_name, password_hash, created_at "
                "FROM Users WHERE username=?", (username,)).fetchone()
        if row is None or not verify_password(password, row["password_hash"]):
            return None
        return self._user(row)

    # -------- Scores --------

    def add_score(self, user_id: int, score: int) -> ScoreRecord:
        created = utc_now()
        with self.lock:
            cur = self.conn.execute(
                "INSERT INTO Scores (user_id, score, created_at) VALUES (?, ?, ?)",
                (user_id, score, created.isoformat()))
            self.conn.commit()
        return ScoreRecord(id=cur.lastrowid, user_id=user_id, score=score, created_at=created)

    def get_user_scores(self, user_id: int) -> List[ScoreRecord]:
        """All scores of one user, best first."""
        with self.lock:
            rows = self.conn.execute(
                "SELECT id, user_id, score, created_at FROM Scores "
                "WHERE user_id=? ORDER BY score DESC, id ASC", (user_id,)).fetchall()
        return [self._score(row) for row in rows]

    def get_top_scores(self, limit: int = 10) -> List[LeaderboardEntry]:
        """Fetches the top score rows joined with their owners."""
        with self.lock:
            rows = self.conn.execute("""
                SELECT S.id, S.user_id, S.score, S.created_at,
                       U.username, U.display_name, U.created_at AS user_created_at
                FROM Scores S
                JOIN Users U ON S.user_id = U.id
                ORDER BY S.score DESC, S.id ASC
                LIMIT ?
            """, (limit,)).fetchall()
        return [
            LeaderboardEntry(
                score=self._score(row),
                user=User(
                    id=row["user_id"],
                    display_name=row["display_name"],
                    username=row["username"],
                    created_at=datetime.fromisoformat(row["user_created_at"]),
                ),
            )
            for row in rows
        ]
