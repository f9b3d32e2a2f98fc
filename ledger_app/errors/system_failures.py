"""
System failure error classifications.

These exceptions represent infrastructure-level failures rather than
business-rule violations.
"""

from typing import Any, Optional


class SystemFailureError(Exception):
    """Base class for infrastructure failures."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PersistenceError(SystemFailureError):
    """Database or file system persistence failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class DurableStoreError(PersistenceError):
    """Durable store timed out or could not be reached.

    Raised by durable store implementations; the store selector reacts by
    failing over to the fallback mirror.
    """


class StoreUnavailableError(SystemFailureError):
    """Neither the durable store nor the fallback mirror could serve a call."""

    def __init__(self, message: str, item_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.item_id = item_id


class ConfigurationError(SystemFailureError):
    """Configuration failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
