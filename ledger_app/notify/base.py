"""Base classes for ledger event sinks."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..logging.config import get_logger
from .events import LedgerEvent


class DeliveryStatus(Enum):
    """Event delivery status."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class DeliveryResult:
    """Result of an event delivery attempt."""
    status: DeliveryStatus
    message: Optional[str] = None
    error: Optional[Exception] = None


class EventDeliveryError(Exception):
    """Sink could not be set up or written to."""
    pass


class BaseEventSink(ABC):
    """Base class for event sinks."""

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(f"ledger.notify.{name}")
        self._delivery_count = 0
        self._error_count = 0

    @abstractmethod
    def deliver(self, events: list[LedgerEvent]) -> list[DeliveryResult]:
        """
        Deliver events to the sink's destination.

        Args:
            events: Ledger events in commit order

        Returns:
            List of delivery results for each event
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the sink is able to accept events."""
        pass

    def deliver_safely(self, events: list[LedgerEvent]) -> list[DeliveryResult]:
        """Deliver events, converting any exception into FAILED results."""
        try:
            results = self.deliver(events)
        except Exception as e:
            self.logger.error(
                "Event sink raised during delivery",
                sink=self.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            results = [DeliveryResult(
                status=DeliveryStatus.FAILED,
                message=f"Sink error: {e}",
                error=e,
            ) for _ in events]

        for result in results:
            if result.status == DeliveryStatus.FAILED:
                self._error_count += 1
            elif result.status == DeliveryStatus.SUCCESS:
                self._delivery_count += 1

        return results

    def get_stats(self) -> dict[str, Any]:
        """Get delivery statistics."""
        return {
            "name": self.name,
            "delivery_count": self._delivery_count,
            "error_count": self._error_count,
            "success_rate": (
                self._delivery_count / (self._delivery_count + self._error_count)
                if (self._delivery_count + self._error_count) > 0 else 0.0
            )
        }

    def reset_stats(self) -> None:
        """Reset delivery statistics."""
        self._delivery_count = 0
        self._error_count = 0
