"""JSON-lines file event sink."""

import fcntl
from pathlib import Path

import orjson

from .base import BaseEventSink, DeliveryResult, DeliveryStatus
from .events import LedgerEvent


class FileEventSink(BaseEventSink):
    """Appends one JSON document per event to a file."""

    def __init__(self, output_path: str, name: str = "file", create_dirs: bool = True):
        super().__init__(name)
        self.output_path = Path(output_path)

        if create_dirs:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def deliver(self, events: list[LedgerEvent]) -> list[DeliveryResult]:
        try:
            with open(self.output_path, "ab") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    for event in events:
                        f.write(orjson.dumps(event.to_dict(), option=orjson.OPT_APPEND_NEWLINE))
                    f.flush()
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            self.logger.warning(
                "Event file write failed",
                sink=self.name,
                output_path=str(self.output_path),
                error=str(e)
            )
            return [DeliveryResult(
                status=DeliveryStatus.FAILED,
                message=f"File system error: {e}",
                error=e
            ) for _ in events]

        return [DeliveryResult(
            status=DeliveryStatus.SUCCESS,
            message=f"Written to {self.output_path}"
        ) for _ in events]

    def health_check(self) -> bool:
        parent = self.output_path.parent
        return parent.exists() and parent.is_dir()
