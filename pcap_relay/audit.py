"""SQLite audit log of bot command invocations.

One append-only table, command_logs. Writes come from the bot; the query
helpers back usage reporting.
"""

from __future__ import annotations

import sqlite3
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_DATABASE_URL = "sqlite:./bot.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS command_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    command_name TEXT NOT NULL,
    user_id TEXT NOT NULL,
    user_name TEXT NOT NULL,
    channel_id TEXT NOT NULL,
    guild_id TEXT,
    timestamp INTEGER NOT NULL DEFAULT (CAST(strftime('%s', 'now') AS INTEGER)),
    message_id TEXT NOT NULL,
    success BOOLEAN NOT NULL DEFAULT 1,
    error_message TEXT
);
CREATE INDEX IF NOT EXISTS idx_command_logs_command_name ON command_logs(command_name);
CREATE INDEX IF NOT EXISTS idx_command_logs_user_id ON command_logs(user_id);
CREATE INDEX IF NOT EXISTS idx_command_logs_timestamp ON command_logs(timestamp DESC);
"""


@dataclass(frozen=True)
class CommandLog:
    command_name: str
    user_id: str
    user_name: str
    channel_id: str
    message_id: str
    guild_id: Optional[str] = None
    success: bool = True
    error_message: Optional[str] = None


@dataclass(frozen=True)
class RecentLog:
    command_name: str
    user_name: str
    timestamp: int
    success: bool


@dataclass(frozen=True)
class UserStats:
    user_id: str
    total_count: int
    command_breakdown: list[tuple[str, int]] = field(default_factory=list)
    first_use: Optional[int] = None
    last_use: Optional[int] = None


@dataclass(frozen=True)
class DailyUsage:
    date: str  # YYYY-MM-DD, UTC
    count: int


def database_path(database_url: str) -> str:
    """Strip the optional "sqlite:" scheme from a DATABASE_URL value.

    "sqlite:./bot.db" -> "./bot.db", "sqlite:///data/bot.db" -> "/data/bot.db"
    """
    if database_url.startswith("sqlite://"):
        return database_url[len("sqlite://"):]
    if database_url.startswith("sqlite:"):
        return database_url[len("sqlite:"):]
    return database_url


class AuditLog:
    """Thin SQLite wrapper; each call opens its own connection."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = str(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the command_logs table and its indexes if missing."""
        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    def log_command(self, log: CommandLog) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO command_logs
                    (command_name, user_id, user_name, channel_id, guild_id,
                     message_id, success, error_message)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    log.command_name,
                    log.user_id,
                    log.user_name,
                    log.channel_id,
                    log.guild_id,
                    log.message_id,
                    log.success,
                    log.error_message,
                ),
            )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def command_stats(self) -> list[tuple[str, int]]:
        """Successful invocations per command, most used first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT command_name, COUNT(*) AS count
                FROM command_logs
                WHERE success = 1
                GROUP BY command_name
                ORDER BY count DESC
                """
            ).fetchall()
        return [(row["command_name"], row["count"]) for row in rows]

    def recent_logs(self, limit: int) -> list[RecentLog]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT command_name, user_name, timestamp, success
                FROM command_logs
                ORDER BY timestamp DESC, id DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [
            RecentLog(
                command_name=row["command_name"],
                user_name=row["user_name"],
                timestamp=row["timestamp"],
                success=bool(row["success"]),
            )
            for row in rows
        ]

    def total_uses(self) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM command_logs WHERE success = 1"
            ).fetchone()
        return int(row[0])

    def user_command_count(self, user_id: str) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM command_logs WHERE user_id = ? AND success = 1",
                (user_id,),
            ).fetchone()
        return int(row[0])

    def user_stats(self, user_id: str) -> UserStats:
        """Totals, per-command breakdown and first/last use for one user.

        First/last use count failed invocations too; the totals do not.
        """
        total = self.user_command_count(user_id)
        with self._connect() as conn:
            breakdown = conn.execute(
                """
                SELECT command_name, COUNT(*) AS count
                FROM command_logs
                WHERE user_id = ? AND success = 1
                GROUP BY command_name
                ORDER BY count DESC
                """,
                (user_id,),
            ).fetchall()
            span = conn.execute(
                """
                SELECT MIN(timestamp) AS first_use, MAX(timestamp) AS last_use
                FROM command_logs
                WHERE user_id = ?
                """,
                (user_id,),
            ).fetchone()
        return UserStats(
            user_id=user_id,
            total_count=total,
            command_breakdown=[(row["command_name"], row["count"]) for row in breakdown],
            first_use=span["first_use"],
            last_use=span["last_use"],
        )

    def usage_over_time(self, days: int, now: Optional[int] = None) -> list[DailyUsage]:
        """Daily successful-invocation counts for the last `days` days."""
        cutoff = (now if now is not None else int(time.time())) - days * 86400
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT date(timestamp, 'unixepoch') AS date, COUNT(*) AS count
                FROM command_logs
                WHERE success = 1 AND timestamp >= ?
                GROUP BY date(timestamp, 'unixepoch')
                ORDER BY date DESC
                """,
                (cutoff,),
            ).fetchall()
        return [DailyUsage(date=row["date"], count=row["count"]) for row in rows]
