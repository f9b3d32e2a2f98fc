"""In-process subscriber sink."""

from collections.abc import Callable

from .base import BaseEventSink, DeliveryResult, DeliveryStatus
from .events import LedgerEvent


class CallbackEventSink(BaseEventSink):
    """Hands each event to a callable, e.g. a UI refresh or feed publisher."""

    def __init__(self, callback: Callable[[LedgerEvent], None], name: str = "callback"):
        super().__init__(name)
        self.callback = callback

    def deliver(self, events: list[LedgerEvent]) -> list[DeliveryResult]:
        for event in events:
            self.callback(event)
        return [DeliveryResult(status=DeliveryStatus.SUCCESS) for _ in events]

    def health_check(self) -> bool:
        return True
