"""Message idempotency registry for deduplication using SQLite."""
import hashlib
import sqlite3
from dataclasses import dataclass
from datetime import datetime

from expensly.sms.models import RawMessage


@dataclass
class SeenRecord:
    message_key: str
    sender: str
    timestamp_ms: int


class MessageRegistry:
    """Keeps the idempotency keys of messages already turned into transactions.

    The table lives in an in-memory SQLite database, so nothing survives a
    restart. Keys are pruned once the message timestamp falls outside the
    retention window.
    """

    def __init__(self, retention_hours: int = 48, db_path: str = ":memory:"):
        self.retention_ms = retention_hours * 60 * 60 * 1000
        self.db_path = db_path
        self.conn = sqlite3.connect(self.db_path)
        self._init_db()

    def _init_db(self):
        with self.conn:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS seen_messages (
                    message_key TEXT PRIMARY KEY,
                    sender TEXT,
                    timestamp_ms INTEGER,
                    seen_at TEXT
                )
            """)
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_timestamp ON seen_messages(timestamp_ms)")

    def is_seen(self, message_key: str) -> bool:
        """Return True if this key has already been recorded."""
        cursor = self.conn.execute(
            "SELECT 1 FROM seen_messages WHERE message_key = ?",
            (message_key,)
        )
        return cursor.fetchone() is not None

    def mark_seen(self, record: SeenRecord):
        with self.conn:
            self.conn.execute("""
                INSERT OR REPLACE INTO seen_messages
                (message_key, sender, timestamp_ms, seen_at)
                VALUES (?, ?, ?, ?)
            """, (
                record.message_key,
                record.sender,
                record.timestamp_ms,
                datetime.now().isoformat()
            ))

    def mark_message(self, message: RawMessage) -> None:
        self.mark_seen(SeenRecord(
            message_key=self.calculate_key(message),
            sender=message.sender,
            timestamp_ms=message.timestamp_ms
        ))

    def prune(self, now_ms: int) -> int:
        """Drop keys of messages older than the retention window."""
        cutoff = now_ms - self.retention_ms
        with self.conn:
            cursor = self.conn.execute(
                "DELETE FROM seen_messages WHERE timestamp_ms < ?", (cutoff,)
            )
            return cursor.rowcount

    def clear(self) -> int:
        with self.conn:
            cursor = self.conn.execute("DELETE FROM seen_messages")
            return cursor.rowcount

    def close(self) -> None:
        self.conn.close()

    @staticmethod
    def calculate_key(message: RawMessage) -> str:
        """Calculate SHA256 idempotency key from sender, timestamp and body."""
        sha256 = hashlib.sha256()
        for part in (message.sender, str(message.timestamp_ms), message.body):
            sha256.update(part.encode("utf-8"))
            sha256.update(b"\x1f")
        return sha256.hexdigest()
