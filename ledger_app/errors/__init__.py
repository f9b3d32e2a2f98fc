"""
Error classification for the ownership and listing ledger.

Business-rule violations, recoverable concurrency conflicts and
infrastructure failures each have their own branch of the hierarchy.
"""

from .business_rules import (
    LedgerRuleError,
    ItemNotFoundError,
    DuplicateIdError,
    NotOwnerError,
    InvalidPriceError,
    InvalidDurationError,
    AlreadyListedError,
    NotForSaleError,
    SelfPurchaseError,
    AuctionNotActiveError,
    AuctionExpiredError,
    AuctionStillActiveError,
    SelfBidError,
    BidTooLowError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    DurableStoreError,
    StoreUnavailableError,
    ConfigurationError,
)
from .recovery import (
    RecoverableError,
    VersionConflictError,
)

__all__ = [
    # Business Rules
    "LedgerRuleError",
    "ItemNotFoundError",
    "DuplicateIdError",
    "NotOwnerError",
    "InvalidPriceError",
    "InvalidDurationError",
    "AlreadyListedError",
    "NotForSaleError",
    "SelfPurchaseError",
    "AuctionNotActiveError",
    "AuctionExpiredError",
    "AuctionStillActiveError",
    "SelfBidError",
    "BidTooLowError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "DurableStoreError",
    "StoreUnavailableError",
    "ConfigurationError",
    # Recovery Categories
    "RecoverableError",
    "VersionConflictError",
]
