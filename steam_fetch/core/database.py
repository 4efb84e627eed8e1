# ===== IMPORTS & DEPENDENCIES =====
import logging
import os
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from steam_fetch.models.game import GameRow

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ===== CORE BUSINESS LOGIC =====
class GamesDatabase:
    """Handles all operations on the local `games` table."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        directory = os.path.dirname(db_path)
        if directory and db_path != ":memory:":
            os.makedirs(directory, exist_ok=True)
        self._create_tables()
        logger.info(f"[{self.__class__.__name__}] Database initialized at: {self.db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """Returns a new database connection."""
        return sqlite3.connect(self.db_path)

    def _create_tables(self):
        """Creates the games table and its indexes if they don't exist."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS games (
                    appid INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    last_fetched_at TEXT
                )
            """)
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_games_name ON games (name)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_games_last_fetched_at ON games (last_fetched_at)")
            conn.commit()
            logger.info(f"[{self.__class__.__name__}] Database tables verified/created.")

    @staticmethod
    def _to_row(row: Tuple[Any, ...]) -> GameRow:
        appid, name, last_fetched_at = row
        return GameRow(
            appid=appid,
            name=name,
            last_fetched_at=datetime.fromisoformat(last_fetched_at) if last_fetched_at else None,
        )

    def upsert_game(self, appid: int, name: str) -> GameRow:
        """Inserts a game, or renames it if the appid exists; stamps last_fetched_at."""
        fetched_at = _utcnow()
        with self._get_connection() as conn:
            conn.execute(
                "INSERT INTO games (appid, name, last_fetched_at) VALUES (?, ?, ?) "
                "ON CONFLICT(appid) DO UPDATE SET name = excluded.name, last_fetched_at = excluded.last_fetched_at",
                (appid, name, fetched_at.isoformat())
            )
            conn.commit()
        logger.info(f"[{self.__class__.__name__}] Upserted game {appid}: '{name}'")
        return GameRow(appid=appid, name=name, last_fetched_at=fetched_at)

    def upsert_games(self, rows: Iterable[Dict[str, Any]]) -> Tuple[List[GameRow], List[Dict[str, Any]]]:
        """Upserts each row independently; a failing row is reported, not raised."""
        saved, errors = [], []
        for row in rows:
            try:
                saved.append(self.upsert_game(row["appid"], row["name"]))
            except (sqlite3.Error, KeyError) as e:
                logger.error(f"[{self.__class__.__name__}] Error upserting game {row.get('appid')}: {e}", exc_info=True)
                errors.append({"appid": row.get("appid"), "error": str(e)})
        return saved, errors

    def insert_games_ignore_existing(self, rows: Iterable[Dict[str, Any]], fetched_at: Optional[datetime] = None) -> int:
        """Bulk insert used by the app-list sync; existing appids are left untouched."""
        stamp = (fetched_at or _utcnow()).isoformat()
        values = [(row["appid"], row["name"], stamp) for row in rows]
        with self._get_connection() as conn:
            cursor = conn.executemany(
                "INSERT OR IGNORE INTO games (appid, name, last_fetched_at) VALUES (?, ?, ?)",
                values
            )
            conn.commit()
            return cursor.rowcount

    def update_game_name(self, appid: int, name: str) -> Optional[GameRow]:
        """Renames an existing game. Returns None when the appid is unknown."""
        fetched_at = _utcnow()
        with self._get_connection() as conn:
            cursor = conn.execute(
                "UPDATE games SET name = ?, last_fetched_at = ? WHERE appid = ?",
                (name, fetched_at.isoformat(), appid)
            )
            conn.commit()
            if cursor.rowcount == 0:
                logger.warning(f"[{self.__class__.__name__}] No game found to update for appid={appid}")
                return None
        return GameRow(appid=appid, name=name, last_fetched_at=fetched_at)

    def get_game(self, appid: int) -> Optional[GameRow]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT appid, name, last_fetched_at FROM games WHERE appid = ?", (appid,))
            row = cursor.fetchone()
        return self._to_row(row) if row else None

    def query_games(self, appid: Optional[int] = None, name: Optional[str] = None, limit: int = 20) -> List[GameRow]:
        """Exact appid match wins over a name substring match."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            if appid:
                cursor.execute(
                    "SELECT appid, name, last_fetched_at FROM games WHERE appid = ? LIMIT ?",
                    (appid, limit)
                )
            elif name:
                cursor.execute(
                    "SELECT appid, name, last_fetched_at FROM games WHERE name LIKE ? LIMIT ?",
                    (f"%{name}%", limit)
                )
            else:
                cursor.execute("SELECT appid, name, last_fetched_at FROM games LIMIT ?", (limit,))
            return [self._to_row(row) for row in cursor.fetchall()]

    def list_games(self, limit: int = 20, offset: int = 0) -> List[GameRow]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT appid, name, last_fetched_at FROM games ORDER BY last_fetched_at LIMIT ? OFFSET ?",
                (limit, offset)
            )
            return [self._to_row(row) for row in cursor.fetchall()]
