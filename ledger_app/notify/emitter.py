"""
Notification fan-out.

The emitter hands every committed ledger change to the configured sinks.
Delivery is best-effort: it runs on a small thread pool so a slow sink never
holds up the ledger, and sink failures are logged and counted but never
reach the caller whose write already succeeded.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Optional

from ..logging.config import get_logger
from .base import BaseEventSink, DeliveryStatus
from .events import LedgerEvent

logger = get_logger(__name__)


class NotificationEmitter:
    """Fire-and-forget event fan-out to sinks."""

    def __init__(
        self,
        sinks: Optional[list[BaseEventSink]] = None,
        max_workers: int = 2,
        enabled: bool = True,
    ):
        self.logger = logger
        self.sinks: list[BaseEventSink] = list(sinks or [])
        self.enabled = enabled
        self._executor = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ledger-notify")
            if max_workers > 0 else None
        )
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()
        self._emitted = 0
        self._dropped = 0

    def add_sink(self, sink: BaseEventSink) -> None:
        self.sinks.append(sink)

    def emit(self, event: LedgerEvent) -> None:
        """Queue an event for delivery. Never raises."""
        if not self.enabled or not self.sinks:
            return

        self._emitted += 1

        if self._executor is None:
            self._dispatch(event)
            return

        try:
            future = self._executor.submit(self._dispatch, event)
        except RuntimeError as e:
            # Executor already shut down.
            self._dropped += 1
            self.logger.error(
                "Dropped ledger event",
                item_id=event.item_id,
                version=event.version,
                error=str(e),
            )
            return

        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _dispatch(self, event: LedgerEvent) -> None:
        for sink in self.sinks:
            results = sink.deliver_safely([event])
            failed = [r for r in results if r.status == DeliveryStatus.FAILED]
            if failed:
                self.logger.warning(
                    "Ledger event delivery failed",
                    sink=sink.name,
                    item_id=event.item_id,
                    action=event.action.value,
                    version=event.version,
                    message=failed[0].message,
                )

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait for queued deliveries to finish."""
        with self._pending_lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def close(self) -> None:
        """Deliver what is queued and stop the worker pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    def get_stats(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "emitted": self._emitted,
            "dropped": self._dropped,
            "pending": len(self._pending),
            "sinks": [sink.get_stats() for sink in self.sinks],
        }
