"""
Recovery strategy classifications for error handling.

These mixins help categorize errors by their recovery characteristics
and guide the error handling strategy.
"""

from typing import Any, Optional


class RecoverableError(Exception):
    """Mixin for errors that can be recovered from automatically."""

    def __init__(self, message: str, retry_count: int = 0,
                 max_retries: int = 3, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.retry_count = retry_count
        self.max_retries = max_retries
        self.context = context or {}
        self.recoverable = True


class VersionConflictError(RecoverableError):
    """Optimistic-concurrency loss: the stored version moved under the writer.

    Callers re-read the record and reapply the operation.
    """

    def __init__(self, message: str, item_id: Optional[str] = None,
                 expected_version: Optional[int] = None,
                 actual_version: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.item_id = item_id
        self.expected_version = expected_version
        self.actual_version = actual_version
