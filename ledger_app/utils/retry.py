"""Retry helper for optimistic-concurrency conflicts."""

import time
from collections.abc import Callable
from typing import TypeVar

from ..errors import VersionConflictError
from ..logging.config import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


def run_with_retry(
    func: Callable[[], T],
    *,
    attempts: int = 3,
    backoff_base: float = 0.01,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Execute a read-validate-write operation, retrying on version conflicts.

    Each retry re-runs ``func`` from scratch so it re-reads current state.
    The last conflict is re-raised once ``attempts`` are used up.
    """
    for attempt in range(attempts):
        try:
            return func()
        except VersionConflictError as exc:
            exc.retry_count = attempt + 1
            exc.max_retries = attempts
            if attempt >= attempts - 1:
                raise
            logger.warning(
                "Version conflict, retrying",
                item_id=exc.item_id,
                expected_version=exc.expected_version,
                actual_version=exc.actual_version,
                attempt=attempt + 1,
            )
            sleep(backoff_base * (2 ** attempt))
    raise ValueError("attempts must be at least 1")
