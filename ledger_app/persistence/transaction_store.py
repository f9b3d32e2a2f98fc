"""Transaction journal: append-only history of ownership changes."""

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..errors import PersistenceError
from ..logging.config import get_store_logger
from ..utils.time import format_wall_time, utc_now


@dataclass
class StoredTransaction:
    """Journal row with metadata."""
    id: int
    item_id: str
    version: int
    kind: str
    seller: Optional[str]
    buyer: str
    price: Optional[float]
    currency: Optional[str]
    settlement_ref: Optional[str]
    occurred_at: str
    recorded_at: str


class TransactionStore:
    """SQLite-based transaction journal.

    Rows are unique on ``(item_id, version)`` so re-delivered events do not
    duplicate history.
    """

    def __init__(self, db_path: str = "transactions.db", timeout_seconds: float = 5.0):
        self.db_path = Path(db_path)
        self.timeout_seconds = timeout_seconds
        self.logger = get_store_logger("ledger.store.journal")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    item_id TEXT NOT NULL,
                    version INTEGER NOT NULL,
                    kind TEXT NOT NULL,
                    seller TEXT,
                    buyer TEXT NOT NULL,
                    price REAL,
                    currency TEXT,
                    settlement_ref TEXT,
                    occurred_at TEXT NOT NULL,
                    recorded_at TEXT NOT NULL,
                    UNIQUE(item_id, version)
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_transactions_item ON transactions(item_id)
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_transactions_buyer ON transactions(buyer)
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_transactions_seller ON transactions(seller)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout_seconds)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Journal database error", error=str(e))
            raise PersistenceError(
                f"Transaction journal failure: {e}",
                operation="journal",
                target=str(self.db_path),
            ) from e
        finally:
            if conn:
                conn.close()

    def record(self, transfer: dict[str, Any]) -> Optional[int]:
        """
        Append a transfer record.

        Args:
            transfer: Transfer dictionary (``TransferRecord.to_dict()``)

        Returns:
            Row ID if a new row was written, None if it was already recorded
        """
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute("""
                    INSERT OR IGNORE INTO transactions (
                        item_id, version, kind, seller, buyer, price,
                        currency, settlement_ref, occurred_at, recorded_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    transfer["item_id"],
                    transfer["version"],
                    transfer["kind"],
                    transfer.get("seller"),
                    transfer["buyer"],
                    transfer.get("price"),
                    transfer.get("currency"),
                    transfer.get("settlement_ref"),
                    transfer["occurred_at"],
                    format_wall_time(utc_now()),
                ))
                conn.commit()

                if cursor.rowcount == 0:
                    return None

                self.logger.info(
                    "Transaction recorded",
                    item_id=transfer["item_id"],
                    kind=transfer["kind"],
                    version=transfer["version"],
                )
                return cursor.lastrowid

    def history(self, item_id: str) -> list[StoredTransaction]:
        """All transfers of one item, oldest first."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM transactions WHERE item_id = ? ORDER BY version
            """, (item_id,)).fetchall()

        return [self._row_to_transaction(row) for row in rows]

    def by_account(self, account: str, limit: int = 100) -> list[StoredTransaction]:
        """Transfers where ``account`` was buyer or seller, newest first."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM transactions
                WHERE buyer = ? OR seller = ?
                ORDER BY occurred_at DESC, id DESC LIMIT ?
            """, (account, account, limit)).fetchall()

        return [self._row_to_transaction(row) for row in rows]

    def get_stats(self) -> dict[str, Any]:
        """Get journal statistics."""
        with self._get_connection() as conn:
            total_count = conn.execute("SELECT COUNT(*) FROM transactions").fetchone()[0]

            kind_counts = {}
            for row in conn.execute("""
                SELECT kind, COUNT(*) as count FROM transactions GROUP BY kind
            """):
                kind_counts[row[0]] = row[1]

        return {
            "total_transactions": total_count,
            "transactions_by_kind": kind_counts,
        }

    def _row_to_transaction(self, row: sqlite3.Row) -> StoredTransaction:
        """Convert database row to StoredTransaction object."""
        return StoredTransaction(
            id=row["id"],
            item_id=row["item_id"],
            version=row["version"],
            kind=row["kind"],
            seller=row["seller"],
            buyer=row["buyer"],
            price=row["price"],
            currency=row["currency"],
            settlement_ref=row["settlement_ref"],
            occurred_at=row["occurred_at"],
            recorded_at=row["recorded_at"],
        )
