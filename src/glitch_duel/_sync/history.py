# Area: Sync
"""
glitch_duel._sync.history — Match history persistence
=====================================================

SQLite-backed stores for finished matches:

- ``GameHistoryRepository``: the local per-session summaries
  (``GameRecord``), loaded once at session start and appended to at
  every match end.
- ``MatchLedgerRepository``: the append-only per-player multiplayer
  ledger (``MultiplayerGameRecord``), keyed by player id.

An unreadable or corrupt database never ends a session: reads return an
empty list and writes are logged and skipped.
"""

import logging
import sqlite3
from typing import List, Optional

from ..records import (
    GameRecord,
    LastGameSummary,
    MultiplayerGameRecord,
    get_last_game,
)

logger = logging.getLogger("glitch_duel.sync.history")

SCHEMA = """
CREATE TABLE IF NOT EXISTS game_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    avatar TEXT NOT NULL,
    date TEXT NOT NULL,
    duration INTEGER NOT NULL,
    correct INTEGER NOT NULL,
    total INTEGER NOT NULL,
    percent INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS match_ledger (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    player_id TEXT NOT NULL,
    finished_at INTEGER NOT NULL,
    opponent TEXT NOT NULL,
    opponent_avatar TEXT NOT NULL,
    opponent_id TEXT NOT NULL,
    score INTEGER NOT NULL,
    opponent_score INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_match_ledger_player ON match_ledger(player_id);
"""


def get_connection(db_path: str = "glitch_duel.db") -> sqlite3.Connection:
    """
    Get a database connection.

    Args:
        db_path: Path to the SQLite database file

    Returns:
        SQLite connection with row factory set
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_database(db_path: str = "glitch_duel.db") -> bool:
    """
    Create the history tables if they do not exist.

    Returns:
        False if the database could not be opened or is corrupt
    """
    try:
        conn = get_connection(db_path)
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as exc:
        logger.warning("History database unavailable at %s: %s", db_path, exc)
        return False
    logger.info("History database ready at %s", db_path)
    return True


class BaseRepository:
    """
    Base class for history repositories.

    Every query opens its own short-lived connection.
    """

    def __init__(self, db_path: str = "glitch_duel.db"):
        self.db_path = db_path
        self.available = init_database(db_path)

    def _get_conn(self) -> sqlite3.Connection:
        return get_connection(self.db_path)

    def _execute(
        self, query: str, params: tuple = (), fetch: bool = False
    ) -> Optional[list]:
        """
        Execute a query.

        Args:
            query: SQL query string
            params: Query parameters
            fetch: If True, fetch and return results

        Returns:
            Query results if fetch=True, else None
        """
        conn = self._get_conn()
        try:
            cursor = conn.execute(query, params)
            if fetch:
                return [dict(row) for row in cursor.fetchall()]
            conn.commit()
            return None
        finally:
            conn.close()

    def _read(self, query: str, params: tuple = ()) -> list:
        """Fetch rows; a storage failure reads as no rows."""
        try:
            return self._execute(query, params, fetch=True) or []
        except sqlite3.Error as exc:
            logger.warning("History read failed (%s): %s", self.db_path, exc)
            return []

    def _write(self, query: str, params: tuple = ()) -> bool:
        try:
            self._execute(query, params)
        except sqlite3.Error as exc:
            logger.warning("History write failed (%s): %s", self.db_path, exc)
            return False
        return True


class GameHistoryRepository(BaseRepository):
    """Local summaries of finished matches, oldest first."""

    def save(self, record: GameRecord) -> bool:
        """Append one summary."""
        query = """
            INSERT INTO game_history
            (name, avatar, date, duration, correct, total, percent)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        return self._write(query, (
            record.name, record.avatar, record.date, record.duration,
            record.correct, record.total, record.percent,
        ))

    def load_all(self) -> List[GameRecord]:
        rows = self._read(
            "SELECT name, avatar, date, duration, correct, total, percent "
            "FROM game_history ORDER BY id"
        )
        return [GameRecord.from_dict(row) for row in rows]

    def clear(self) -> bool:
        return self._write("DELETE FROM game_history")


class MatchLedgerRepository(BaseRepository):
    """
    Append-only per-player ledger of multiplayer matches.

    Each player only ever reads and appends their own entries.
    """

    def save(self, player_id: str, record: MultiplayerGameRecord) -> bool:
        """
        Append a finished match to a player's ledger.

        Args:
            player_id: Owner of the ledger
            record: Finished match entry
        """
        query = """
            INSERT INTO match_ledger
            (player_id, finished_at, opponent, opponent_avatar,
             opponent_id, score, opponent_score)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        return self._write(query, (
            player_id, record.finished_at, record.opponent,
            record.opponent_avatar, record.opponent_id,
            record.score, record.opponent_score,
        ))

    def load_all(self, player_id: str) -> List[MultiplayerGameRecord]:
        """
        Get a player's ledger, oldest first.

        Args:
            player_id: Owner of the ledger

        Returns:
            List of ledger entries, empty if none or unreadable
        """
        rows = self._read(
            "SELECT finished_at, opponent, opponent_avatar, opponent_id, "
            "score, opponent_score FROM match_ledger "
            "WHERE player_id = ? ORDER BY finished_at, id",
            (player_id,),
        )
        return [MultiplayerGameRecord(**row) for row in rows]

    def last_game(self, player_id: str) -> Optional[LastGameSummary]:
        """Summary of the player's most recent match, or None."""
        return get_last_game(self.load_all(player_id))
