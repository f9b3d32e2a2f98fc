"""SQLite-backed durable item record store."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from ..errors import DuplicateIdError, DurableStoreError, VersionConflictError
from ..logging.config import get_store_logger
from ..state.models import Item
from ..utils.time import format_wall_time
from .base import ItemStore
from .codec import decode_item, encode_item


class SqliteItemStore(ItemStore):
    """Durable item store on SQLite.

    Every call opens its own connection bounded by ``timeout_seconds``, so a
    locked or unreachable database surfaces as ``DurableStoreError`` instead
    of blocking the caller.
    """

    def __init__(self, db_path: str = "ledger.db", timeout_seconds: float = 2.0):
        self.db_path = Path(db_path)
        self.timeout_seconds = timeout_seconds
        self.logger = get_store_logger("ledger.store.sqlite")

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS items (
                    id TEXT PRIMARY KEY,
                    owner TEXT NOT NULL,
                    creator TEXT NOT NULL,
                    listing_kind TEXT NOT NULL,
                    version INTEGER NOT NULL,
                    payload TEXT NOT NULL,
                    updated_at TEXT
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_items_owner ON items(owner)
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_items_creator ON items(creator)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Get a database connection, mapping driver failures to DurableStoreError."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout_seconds)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.IntegrityError:
            if conn:
                conn.rollback()
            raise
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", operation=operation, error=str(e))
            raise DurableStoreError(
                f"SQLite {operation} failed: {e}",
                operation=operation,
                target=str(self.db_path),
            ) from e
        finally:
            if conn:
                conn.close()

    def get(self, item_id: str) -> Optional[Item]:
        with self._get_connection("get") as conn:
            row = conn.execute(
                "SELECT payload FROM items WHERE id = ?", (item_id,)
            ).fetchone()

        if row is None:
            return None
        return decode_item(row["payload"])

    def put(self, item: Item, expected_version: Optional[int]) -> Item:
        stored = item.as_clean()
        values = (
            stored.owner,
            stored.creator,
            stored.listing_kind.value,
            stored.version,
            encode_item(stored),
            format_wall_time(stored.updated_at),
        )

        if expected_version is None:
            try:
                with self._get_connection("insert") as conn:
                    conn.execute("""
                        INSERT INTO items (
                            owner, creator, listing_kind, version, payload, updated_at, id
                        ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """, values + (stored.id,))
                    conn.commit()
            except sqlite3.IntegrityError as e:
                raise DuplicateIdError(
                    f"Item {stored.id} already exists",
                    item_id=stored.id,
                ) from e
            return stored

        with self._get_connection("update") as conn:
            cursor = conn.execute("""
                UPDATE items SET
                    owner = ?,
                    creator = ?,
                    listing_kind = ?,
                    version = ?,
                    payload = ?,
                    updated_at = ?
                WHERE id = ? AND version = ?
            """, values + (stored.id, expected_version))
            conn.commit()

            if cursor.rowcount == 0:
                row = conn.execute(
                    "SELECT version FROM items WHERE id = ?", (stored.id,)
                ).fetchone()
                actual = row["version"] if row else None
                raise VersionConflictError(
                    f"Item {stored.id} is at version {actual}, expected {expected_version}",
                    item_id=stored.id,
                    expected_version=expected_version,
                    actual_version=actual,
                )

        return stored

    def scan_by_owner(self, owner: str) -> list[Item]:
        with self._get_connection("scan_by_owner") as conn:
            rows = conn.execute(
                "SELECT payload FROM items WHERE owner = ? ORDER BY id", (owner,)
            ).fetchall()
        return [decode_item(row["payload"]) for row in rows]

    def scan_by_creator(self, creator: str) -> list[Item]:
        with self._get_connection("scan_by_creator") as conn:
            rows = conn.execute(
                "SELECT payload FROM items WHERE creator = ? ORDER BY id", (creator,)
            ).fetchall()
        return [decode_item(row["payload"]) for row in rows]

    def ping(self) -> bool:
        try:
            with self._get_connection("ping") as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except DurableStoreError:
            return False
