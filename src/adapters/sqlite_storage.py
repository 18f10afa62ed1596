"""SQLite storage adapter.

Implements the core SubscriptionStore port using a simple SQLite database.
"""

from __future__ import annotations

import os
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional

from core.models import SubscriptionRecord


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the SubscriptionStore contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - subscriptions: one row per (chat_id, channel) with its filters
        """

        directory = os.path.dirname(self._db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with self._connect() as conn:
            # Fields:
            # - chat_id: Telegram chat id of the subscriber, kept as text
            # - channel: normalized Twitch channel login
            # - filters: comma-joined lowercase keywords
            # - created_at: when the current filter set was saved
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS subscriptions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    chat_id TEXT NOT NULL,
                    channel TEXT NOT NULL,
                    filters TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL
                )
                """
            )
            # One filter set per chat and channel; saving again replaces it.
            conn.execute(
                """
                CREATE UNIQUE INDEX IF NOT EXISTS subscriptions_chat_channel
                ON subscriptions (chat_id, channel)
                """
            )

    def save_subscription(self, record: SubscriptionRecord) -> None:
        """Upsert the filters for a (chat_id, channel) pair."""

        created_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO subscriptions (chat_id, channel, filters, created_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(chat_id, channel) DO UPDATE SET
                    filters = excluded.filters,
                    created_at = excluded.created_at
                """,
                (record.key, record.channel, ",".join(record.filters), created_at.isoformat()),
            )

    def delete_subscription(self, key: str, channel: str) -> bool:
        """Delete a subscription and return whether a row was removed."""

        with self._connect() as conn:
            cur = conn.execute(
                "DELETE FROM subscriptions WHERE chat_id = ? AND channel = ?",
                (key, channel),
            )
            return cur.rowcount > 0

    def list_subscriptions(self, key: Optional[str] = None) -> List[SubscriptionRecord]:
        """Return stored subscriptions, optionally for a single chat, oldest first."""

        with self._connect() as conn:
            if key is None:
                rows = conn.execute(
                    "SELECT chat_id, channel, filters FROM subscriptions ORDER BY id"
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT chat_id, channel, filters FROM subscriptions WHERE chat_id = ? ORDER BY id",
                    (key,),
                ).fetchall()
        return [
            SubscriptionRecord(
                key=row["chat_id"],
                channel=row["channel"],
                filters=tuple(f for f in row["filters"].split(",") if f),
            )
            for row in rows
        ]
