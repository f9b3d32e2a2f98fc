"""
Durable store / fallback mirror selection.

Every record access goes through ``StoreSelector``. While the durable store
is reachable it is authoritative and the mirror keeps clean copies. A
durable failure flips the selector into mirror mode for a cool-down window;
the first access after the window probes the durable store and, once it
answers, switches back and reconciles dirty records before they are mixed
with durable reads.
"""

import threading
import time
from collections.abc import Callable
from typing import Optional

from ..errors import DurableStoreError, StoreUnavailableError
from ..logging.config import get_store_logger, log_store_failover
from ..state.models import Item
from .base import ItemStore
from .mirror import FallbackMirror
from .reconciler import Reconciler, ReconciliationReport


class StoreSelector:
    """Routes get/put/scan calls to the durable store or the fallback mirror."""

    def __init__(
        self,
        durable: ItemStore,
        mirror: FallbackMirror,
        reconciler: Reconciler,
        cooldown_seconds: float = 5.0,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.durable = durable
        self.mirror = mirror
        self.reconciler = reconciler
        self.cooldown_seconds = cooldown_seconds
        self.logger = get_store_logger("ledger.store.selector")

        self._monotonic = monotonic
        self._state_lock = threading.Lock()
        self._reachable = True
        self._retry_at = 0.0
        self._reconcile_pending = False
        self._probing = False
        self._reconcile_guard = threading.Lock()

    @property
    def reachable(self) -> bool:
        return self._reachable

    @property
    def reconcile_pending(self) -> bool:
        return self._reconcile_pending

    def mark_unreachable(self, reason: Optional[str] = None) -> None:
        """Stop using the durable store until the cool-down window elapses."""
        with self._state_lock:
            was_reachable = self._reachable
            self._reachable = False
            self._retry_at = self._monotonic() + self.cooldown_seconds

        if was_reachable:
            self.logger.warning(
                "Durable store marked unreachable",
                reason=reason,
                cooldown_seconds=self.cooldown_seconds,
            )

    def _durable_available(self) -> bool:
        """
        Whether to try the durable store on this access.

        Probes the store once the cool-down has elapsed. The first access
        after a successful probe replays every dirty mirror record before
        the durable store is used again.
        """
        if not self._reachable and not self._probe_durable():
            return False
        if self._reconcile_pending:
            return self._reconcile_after_recovery()
        return True

    def _probe_durable(self) -> bool:
        """Ping the durable store if the cool-down is over. One probe at a time."""
        with self._state_lock:
            if self._reachable:
                return True
            if self._probing or self._monotonic() < self._retry_at:
                return False
            self._probing = True

        healthy = False
        try:
            healthy = self.durable.ping()
        finally:
            with self._state_lock:
                self._probing = False
                if healthy:
                    self._reachable = True
                    self._reconcile_pending = bool(self.mirror.dirty_ids())
                else:
                    self._retry_at = self._monotonic() + self.cooldown_seconds

        if not healthy:
            self.logger.debug("Durable store probe failed")
            return False

        self.logger.info(
            "Durable store reachable again",
            dirty_records=len(self.mirror.dirty_ids()),
        )
        return True

    def _reconcile_after_recovery(self) -> bool:
        """Run the post-recovery reconciliation pass; False if the store failed again."""
        if not self._reconcile_guard.acquire(blocking=False):
            # Another thread is replaying; dirty ids are still reconciled per access.
            return True
        try:
            if not self._reconcile_pending:
                return True
            report = self.reconciler.reconcile_all()
        finally:
            self._reconcile_guard.release()

        if report.error is not None:
            self.mark_unreachable(reason=report.error)
            return False
        if report.complete:
            self._reconcile_pending = False
        return True

    def _fail_over(self, operation: str, item_id: Optional[str], error: DurableStoreError) -> None:
        log_store_failover(self.logger, operation, item_id, error, self.cooldown_seconds)
        self.mark_unreachable(reason=str(error))

    def get(self, item_id: str) -> Optional[Item]:
        """
        Fetch the current record for ``item_id``.

        Returns the higher-versioned of the durable and mirror copies.

        Raises:
            StoreUnavailableError: Durable store down and no mirror copy
        """
        if self._durable_available():
            try:
                if self.mirror.is_dirty(item_id):
                    self.reconciler.reconcile_item(item_id)
                remote = self.durable.get(item_id)
            except DurableStoreError as e:
                self._fail_over("get", item_id, e)
            else:
                local = self.mirror.get(item_id)
                if local is not None and (remote is None or local.version > remote.version):
                    return local
                if remote is not None:
                    self.mirror.cache(remote)
                return remote

        local = self.mirror.get(item_id)
        if local is None:
            raise StoreUnavailableError(
                f"Durable store unreachable and item {item_id} is not mirrored",
                item_id=item_id,
            )
        return local

    def put(self, item: Item, expected_version: Optional[int]) -> Item:
        """
        Write a record with compare-and-set on ``expected_version``.

        Falls back to a dirty mirror write if the durable store fails. A
        timeout is treated as a failure even though the durable write may
        have landed; reconciliation settles that case by version.
        """
        if self._durable_available():
            try:
                stored = self.durable.put(item, expected_version)
            except DurableStoreError as e:
                self._fail_over("put", item.id, e)
            else:
                self.mirror.cache(stored)
                return stored

        return self.mirror.put(item, expected_version)

    def scan_by_owner(self, owner: str) -> list[Item]:
        return self._scan("scan_by_owner", owner, lambda record: record.owner == owner)

    def scan_by_creator(self, creator: str) -> list[Item]:
        return self._scan("scan_by_creator", creator, lambda record: record.creator == creator)

    def _scan(self, operation: str, key: str, matches: Callable[[Item], bool]) -> list[Item]:
        if self._durable_available():
            try:
                if self.mirror.dirty_ids():
                    self.reconcile()
                remote = getattr(self.durable, operation)(key)
            except DurableStoreError as e:
                self._fail_over(operation, None, e)
            else:
                merged = {record.id: record for record in remote}
                for record in remote:
                    self.mirror.cache(record)
                # Records reconciliation could not settle still win by version.
                for item_id in self.mirror.dirty_ids():
                    local = self.mirror.get(item_id)
                    current = merged.get(item_id)
                    if local is None or (current is not None and current.version >= local.version):
                        continue
                    if matches(local):
                        merged[item_id] = local
                    else:
                        merged.pop(item_id, None)
                return sorted(merged.values(), key=lambda record: record.id)

        return getattr(self.mirror, operation)(key)

    def reconcile(self) -> ReconciliationReport:
        """
        Reconcile all dirty records if the durable store is reachable.

        Raises:
            StoreUnavailableError: Durable store still unreachable
        """
        if not self._reachable and not self._probe_durable():
            raise StoreUnavailableError("Durable store unreachable; reconciliation deferred")

        report = self.reconciler.reconcile_all()
        if report.error is not None:
            self.mark_unreachable(reason=report.error)
        elif report.complete:
            self._reconcile_pending = False
        return report
