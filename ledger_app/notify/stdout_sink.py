"""Standard output event sink."""

import sys

import orjson

from .base import BaseEventSink, DeliveryResult, DeliveryStatus
from .events import LedgerEvent


class StdoutEventSink(BaseEventSink):
    """Prints events to stdout as JSON or a one-line summary."""

    def __init__(self, name: str = "stdout", format: str = "json"):
        super().__init__(name)
        self.format = format

    def deliver(self, events: list[LedgerEvent]) -> list[DeliveryResult]:
        results = []

        for event in events:
            print(self._format_event(event), file=sys.stdout, flush=True)
            results.append(DeliveryResult(
                status=DeliveryStatus.SUCCESS,
                message="Printed to stdout"
            ))

        return results

    def _format_event(self, event: LedgerEvent) -> str:
        if self.format == "pretty":
            listing = event.new_state["listing"]["kind"]
            output = (
                f"[{event.timestamp.isoformat()}] {event.action.value}: "
                f"{event.item_id} v{event.version} -> {listing}"
            )
            if event.transfer:
                output += f" ({event.transfer.seller} -> {event.transfer.buyer})"
            return output
        return orjson.dumps(event.to_dict()).decode()

    def health_check(self) -> bool:
        try:
            return sys.stdout.writable()
        except (OSError, ValueError):
            return False
