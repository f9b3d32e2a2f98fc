"""Event sink that keeps the transaction journal."""

from ..persistence.transaction_store import TransactionStore
from .base import BaseEventSink, DeliveryResult, DeliveryStatus
from .events import LedgerEvent


class JournalEventSink(BaseEventSink):
    """Writes ownership changes carried by events into a TransactionStore."""

    def __init__(self, store: TransactionStore, name: str = "journal"):
        super().__init__(name)
        self.store = store

    def deliver(self, events: list[LedgerEvent]) -> list[DeliveryResult]:
        results = []

        for event in events:
            if event.transfer is None:
                results.append(DeliveryResult(
                    status=DeliveryStatus.SKIPPED,
                    message="No ownership change"
                ))
                continue

            row_id = self.store.record(event.transfer.to_dict())
            results.append(DeliveryResult(
                status=DeliveryStatus.SUCCESS,
                message="Recorded" if row_id is not None else "Already recorded"
            ))

        return results

    def health_check(self) -> bool:
        return self.store.db_path.parent.exists()
