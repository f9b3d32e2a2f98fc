"""
Mirror-to-durable reconciliation.

Once the durable store is reachable again every dirty mirror record is
compared with its durable copy and the higher version wins:

- mirror newer (or no durable copy): the mirror record is written to the
  durable store and its dirty flag cleared
- durable newer or equal: another writer committed while this node was
  degraded, so the mirror copy is discarded in favour of the durable one

Discarding is expected behaviour, not an error. It trades the degraded
write for never resurrecting stale state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..errors import DuplicateIdError, DurableStoreError, VersionConflictError
from ..logging.config import get_store_logger
from ..state.locks import KeyedLocks
from .base import ItemStore
from .mirror import FallbackMirror

MAX_PROMOTION_ATTEMPTS = 3


class ReconcileOutcome(str, Enum):
    """Result of reconciling one record."""
    PROMOTED = "promoted"
    DISCARDED = "discarded"
    SKIPPED = "skipped"


@dataclass
class ReconciliationReport:
    """Summary of a reconciliation pass."""
    promoted: list[str] = field(default_factory=list)
    discarded: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def complete(self) -> bool:
        return not self.pending and self.error is None


class Reconciler:
    """Replays dirty mirror records into the durable store."""

    def __init__(self, durable: ItemStore, mirror: FallbackMirror, locks: KeyedLocks):
        self.durable = durable
        self.mirror = mirror
        self.locks = locks
        self.logger = get_store_logger("ledger.store.reconciler")

    def reconcile_item(self, item_id: str) -> ReconcileOutcome:
        """
        Reconcile one record under its item lock.

        Raises:
            DurableStoreError: If the durable store fails mid-way; the
                record stays dirty
        """
        with self.locks.hold(item_id):
            for _ in range(MAX_PROMOTION_ATTEMPTS):
                local = self.mirror.get(item_id)
                if local is None or not local.dirty:
                    return ReconcileOutcome.SKIPPED

                remote = self.durable.get(item_id)

                if remote is not None and remote.version >= local.version:
                    self.mirror.replace(remote)
                    self.logger.warning(
                        "Discarded stale mirror record",
                        item_id=item_id,
                        mirror_version=local.version,
                        durable_version=remote.version,
                    )
                    return ReconcileOutcome.DISCARDED

                expected = remote.version if remote is not None else None
                try:
                    self.durable.put(local, expected_version=expected)
                except (VersionConflictError, DuplicateIdError):
                    # Durable copy moved between read and write; compare again.
                    continue

                self.mirror.mark_clean(item_id, local.version)
                self.logger.info(
                    "Promoted mirror record to durable store",
                    item_id=item_id,
                    version=local.version,
                    replaced_version=expected,
                )
                return ReconcileOutcome.PROMOTED

        raise VersionConflictError(
            f"Item {item_id} kept changing during reconciliation",
            item_id=item_id,
        )

    def reconcile_all(self) -> ReconciliationReport:
        """
        Reconcile every dirty record, one id at a time.

        Stops at the first durable failure and reports the ids still dirty.
        """
        report = ReconciliationReport()
        dirty = self.mirror.dirty_ids()

        for index, item_id in enumerate(dirty):
            try:
                outcome = self.reconcile_item(item_id)
            except DurableStoreError as e:
                report.error = str(e)
                report.pending.extend(dirty[index:])
                self.logger.error(
                    "Reconciliation interrupted by durable store failure",
                    item_id=item_id,
                    pending=len(report.pending),
                    error=str(e),
                )
                break
            except VersionConflictError:
                report.pending.append(item_id)
                continue

            if outcome == ReconcileOutcome.PROMOTED:
                report.promoted.append(item_id)
            elif outcome == ReconcileOutcome.DISCARDED:
                report.discarded.append(item_id)

        if dirty:
            self.logger.info(
                "Reconciliation pass finished",
                promoted=len(report.promoted),
                discarded=len(report.discarded),
                pending=len(report.pending),
            )
        return report
