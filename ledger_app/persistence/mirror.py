"""In-memory fallback mirror of the durable item store."""

import threading
from typing import Optional

from ..errors import DuplicateIdError, VersionConflictError
from ..logging.config import get_store_logger
from ..state.models import Item


class FallbackMirror:
    """
    Non-authoritative in-memory copy of item records.

    While the durable store is healthy the mirror holds clean copies of every
    record read or written through it. During an outage writes land here
    with ``dirty=True`` until reconciliation replays them. Records are
    immutable and replaced whole, so readers never see a partial write.
    """

    def __init__(self) -> None:
        self.logger = get_store_logger("ledger.store.mirror")
        self._records: dict[str, Item] = {}
        self._lock = threading.Lock()

    def get(self, item_id: str) -> Optional[Item]:
        return self._records.get(item_id)

    def is_dirty(self, item_id: str) -> bool:
        record = self._records.get(item_id)
        return record is not None and record.dirty

    def put(self, item: Item, expected_version: Optional[int]) -> Item:
        """
        Write a record that only exists here, marking it dirty.

        Uses the same compare-and-set semantics as the durable store.
        """
        stored = item.as_dirty()

        with self._lock:
            current = self._records.get(item.id)

            if expected_version is None:
                if current is not None:
                    raise DuplicateIdError(
                        f"Item {item.id} already exists in mirror",
                        item_id=item.id,
                    )
            elif current is None or current.version != expected_version:
                actual = current.version if current else None
                raise VersionConflictError(
                    f"Mirror holds item {item.id} at version {actual}, expected {expected_version}",
                    item_id=item.id,
                    expected_version=expected_version,
                    actual_version=actual,
                )

            self._records[item.id] = stored

        self.logger.info(
            "Record written to fallback mirror",
            item_id=item.id,
            version=stored.version,
        )
        return stored

    def cache(self, item: Item) -> None:
        """
        Remember a clean copy confirmed by the durable store.

        A dirty record at the same or a higher version is never replaced
        by a cache refresh; only reconciliation clears it.
        """
        with self._lock:
            current = self._records.get(item.id)
            if current is not None and current.dirty and current.version >= item.version:
                return
            self._records[item.id] = item.as_clean()

    def mark_clean(self, item_id: str, version: int) -> bool:
        """Clear the dirty flag if the record is still at ``version``."""
        with self._lock:
            current = self._records.get(item_id)
            if current is None or current.version != version:
                return False
            self._records[item_id] = current.as_clean()
            return True

    def replace(self, item: Item) -> None:
        """Overwrite the record with a clean durable copy, discarding local changes."""
        with self._lock:
            self._records[item.id] = item.as_clean()

    def dirty_ids(self) -> list[str]:
        return [item_id for item_id, record in list(self._records.items()) if record.dirty]

    def scan_by_owner(self, owner: str) -> list[Item]:
        return sorted(
            (record for record in list(self._records.values()) if record.owner == owner),
            key=lambda record: record.id,
        )

    def scan_by_creator(self, creator: str) -> list[Item]:
        return sorted(
            (record for record in list(self._records.values()) if record.creator == creator),
            key=lambda record: record.id,
        )

    def __len__(self) -> int:
        return len(self._records)
