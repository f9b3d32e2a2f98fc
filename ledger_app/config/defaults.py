"""Default configuration parameters for the ownership and listing ledger."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StoreParams:
    """Durable store and fail-over parameters."""
    db_path: str = "ledger.db"                       # SQLite database for item records
    timeout_seconds: float = 2.0                     # Bound on every durable call
    cooldown_seconds: float = 5.0                    # Mirror-only window after a failure


@dataclass(frozen=True)
class AuctionParams:
    """Auction behaviour parameters."""
    auto_settle_on_read: bool = True                 # Settle expired auctions lazily on get
    max_duration_seconds: Optional[float] = None     # Upper bound on auction length


@dataclass(frozen=True)
class ConcurrencyParams:
    """Optimistic-concurrency retry parameters."""
    max_retries: int = 3                             # Attempts before surfacing a conflict
    backoff_base_seconds: float = 0.01               # Exponential backoff base


@dataclass(frozen=True)
class NotificationParams:
    """Notification fan-out parameters."""
    enabled: bool = True
    max_workers: int = 2                             # 0 delivers inline on the caller thread
    stdout: bool = False
    file_path: Optional[str] = None                  # JSON lines event log
    journal_path: Optional[str] = None               # SQLite transfer journal


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class LedgerConfig:
    """Complete ledger configuration."""
    store: StoreParams
    auction: AuctionParams
    concurrency: ConcurrencyParams
    notifications: NotificationParams
    logging: LoggingParams
    default_currency: str = "ETH"


def get_default_config() -> LedgerConfig:
    """Get the default configuration instance."""
    return LedgerConfig(
        store=StoreParams(),
        auction=AuctionParams(),
        concurrency=ConcurrencyParams(),
        notifications=NotificationParams(),
        logging=LoggingParams(),
    )
