from __future__ import annotations

import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

log = logging.getLogger(__name__)

TOP_N = 10


@dataclass(frozen=True)
class ScoreRecord:
    name: str
    time: int  # seconds; fewer is better
    errors: int
    level: str

    def to_json(self) -> dict:
        return {'name': self.name, 'time': self.time, 'errors': self.errors, 'level': self.level}


def _ensure_db_dir(db_path: str) -> None:
    """Ensures the directory for the SQLite DB exists before connecting."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _ensure_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS scores (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            time INTEGER NOT NULL,
            errors INTEGER NOT NULL DEFAULT 0,
            level TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


class ScoreService:
    """Local scoreboard: appends finished games and lists the fastest ones."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        _ensure_db_dir(self.db_path)
        conn = sqlite3.connect(self.db_path)
        _ensure_db(conn)
        return conn

    def save_score(self, name: str, time_seconds: int, level: str, errors: int = 0) -> bool:
        """Stores one record. Returns False (after logging) when the write fails."""
        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as e:
            log.warning('score save error: %s', e)
            return False
        try:
            conn.execute(
                'INSERT INTO scores (name, time, errors, level, created_at) VALUES (?, ?, ?, ?, ?)',
                (
                    name or 'Player',
                    int(time_seconds),
                    int(errors),
                    level,
                    datetime.now(timezone.utc).isoformat(timespec='seconds'),
                ),
            )
            conn.commit()
            return True
        except sqlite3.Error as e:
            log.warning('score save error: %s', e)
            return False
        finally:
            conn.close()

    def load_top_scores(self, limit: int = TOP_N) -> List[ScoreRecord]:
        """Top records by ascending time; ties keep insertion order. Empty on read failure."""
        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as e:
            log.warning('score load error: %s', e)
            return []
        try:
            cur = conn.execute(
                'SELECT name, time, errors, level FROM scores ORDER BY time ASC, id ASC LIMIT ?',
                (int(limit),),
            )
            return [ScoreRecord(name=n, time=int(t), errors=int(e), level=lv) for n, t, e, lv in cur.fetchall()]
        except sqlite3.Error as e:
            log.warning('score load error: %s', e)
            return []
        finally:
            conn.close()
