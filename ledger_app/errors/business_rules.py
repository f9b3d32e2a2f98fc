"""
Business-rule error classifications for ledger operations.

These exceptions describe requests the ledger refused because they would
violate an ownership, listing or bidding invariant. They are surfaced to
the end user unchanged and are never retried automatically.
"""

from typing import Any, Optional


class LedgerRuleError(Exception):
    """Base class for business-rule violations."""

    def __init__(self, message: str, item_id: Optional[str] = None,
                 context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.item_id = item_id
        self.context = context or {}
        self.recoverable = False


class ItemNotFoundError(LedgerRuleError):
    """Unknown item id."""


class DuplicateIdError(LedgerRuleError):
    """An item with the allocated id already exists."""


class NotOwnerError(LedgerRuleError):
    """Owner-only verb requested by somebody else."""

    def __init__(self, message: str, requester: Optional[str] = None,
                 owner: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.requester = requester
        self.owner = owner


class InvalidPriceError(LedgerRuleError):
    """Price is not a positive number."""

    def __init__(self, message: str, price: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.price = price


class InvalidDurationError(LedgerRuleError):
    """Auction duration is not positive."""

    def __init__(self, message: str, duration: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.duration = duration


class AlreadyListedError(LedgerRuleError):
    """Item already carries a listing that excludes the requested one."""

    def __init__(self, message: str, listing_kind: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.listing_kind = listing_kind


class NotForSaleError(LedgerRuleError):
    """Purchase attempted on an item without a fixed-price listing."""


class SelfPurchaseError(LedgerRuleError):
    """Owner attempted to buy their own item."""


class AuctionNotActiveError(LedgerRuleError):
    """Auction verb used on an item that is not under auction."""


class AuctionExpiredError(LedgerRuleError):
    """Bid arrived at or after the auction end time."""

    def __init__(self, message: str, ends_at: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.ends_at = ends_at


class AuctionStillActiveError(LedgerRuleError):
    """Settlement requested before the auction end time."""

    def __init__(self, message: str, ends_at: Optional[Any] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.ends_at = ends_at


class SelfBidError(LedgerRuleError):
    """Owner attempted to bid on their own auction."""


class BidTooLowError(LedgerRuleError):
    """Bid does not exceed the current minimum.

    ``minimum_acceptable`` is the amount a retry must strictly exceed.
    """

    def __init__(self, message: str, minimum_acceptable: Optional[float] = None,
                 amount: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.minimum_acceptable = minimum_acceptable
        self.amount = amount
