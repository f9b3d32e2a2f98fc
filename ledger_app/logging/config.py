"""
Centralized logging configuration for the ledger.

This module provides standardized logging configuration using structlog
for all components. All logging throughout the ledger should use this
configuration to ensure consistent formatting and structured logging.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_ledger_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for ledger state changes.

    Binds the ledger subsystem and marks entries as part of the audit trail.
    """
    return get_logger(name).bind(
        subsystem="ledger",
        audit_trail=True
    )


def get_store_logger(name: str) -> FilteringBoundLogger:
    """Get a logger for persistence routing and reconciliation."""
    return get_logger(name).bind(subsystem="persistence")


def log_listing_transition(
    logger: FilteringBoundLogger,
    item_id: str,
    action: str,
    from_listing: str,
    to_listing: str,
    version: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a listing-state transition with standardized format.

    Args:
        logger: Structlog logger instance
        item_id: Item the transition applies to
        action: Ledger operation that caused it
        from_listing: Listing kind before the change
        to_listing: Listing kind after the change
        version: Version of the new record
        context: Additional context data
    """
    bound_logger = logger.bind(
        item_id=item_id,
        action=action,
        from_listing=from_listing,
        to_listing=to_listing,
        version=version,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Listing transition")


def log_store_failover(
    logger: FilteringBoundLogger,
    operation: str,
    item_id: Optional[str],
    error: Exception,
    cooldown_seconds: float
) -> None:
    """Log a durable-store failure that moved traffic onto the mirror."""
    logger.warning(
        "Durable store unreachable, serving from fallback mirror",
        operation=operation,
        item_id=item_id,
        error=str(error),
        error_type=type(error).__name__,
        cooldown_seconds=cooldown_seconds,
    )
