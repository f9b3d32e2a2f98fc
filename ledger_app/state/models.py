"""
Ledger data models for item ownership and listing state.

This module defines immutable data structures for items, their listing
state (a tagged union of unlisted, fixed-price and auction variants) and
the auction bookkeeping carried by the auction variant.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Union


class ListingKind(str, Enum):
    """Listing variants an item can be in."""
    UNLISTED = "unlisted"
    FIXED_PRICE = "fixed_price"
    AUCTION = "auction"


class LedgerAction(str, Enum):
    """Mutating ledger operations, used for events and logs."""
    CREATE = "create"
    LIST_FIXED_PRICE = "list_fixed_price"
    DELIST = "delist"
    START_AUCTION = "start_auction"
    PLACE_BID = "place_bid"
    SETTLE_AUCTION = "settle_auction"
    BUY_FIXED_PRICE = "buy_fixed_price"
    TRANSFER_OWNERSHIP = "transfer_ownership"


@dataclass(frozen=True)
class Unlisted:
    """Item is not offered."""
    kind: ClassVar[ListingKind] = ListingKind.UNLISTED


@dataclass(frozen=True)
class FixedPrice:
    """Item is offered at a fixed price."""
    price: float
    kind: ClassVar[ListingKind] = ListingKind.FIXED_PRICE


@dataclass(frozen=True)
class AuctionState:
    """Bid progression for a running auction."""

    starting_price: float
    ends_at: datetime
    current_highest_bid: Optional[float] = None
    current_highest_bidder: Optional[str] = None

    @property
    def minimum_acceptable(self) -> float:
        """Amount the next bid must strictly exceed."""
        if self.current_highest_bid is None:
            return self.starting_price
        return max(self.current_highest_bid, self.starting_price)

    @property
    def has_bids(self) -> bool:
        return self.current_highest_bidder is not None

    def with_bid(self, bidder: str, amount: float) -> "AuctionState":
        """Record a new highest bid."""
        return replace(self, current_highest_bid=amount, current_highest_bidder=bidder)


@dataclass(frozen=True)
class Auction:
    """Item is under auction."""
    state: AuctionState
    kind: ClassVar[ListingKind] = ListingKind.AUCTION


ListingState = Union[Unlisted, FixedPrice, Auction]

UNLISTED = Unlisted()


@dataclass(frozen=True)
class Item:
    """One sellable unit tracked by the ledger.

    ``version`` and ``dirty`` are lifecycle metadata maintained by the
    ledger and persistence layers only.
    """

    id: str
    owner: str
    creator: str
    listing: ListingState = field(default=UNLISTED)
    version: int = 0
    dirty: bool = False
    metadata_ref: Optional[str] = None
    currency: str = "ETH"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def listing_kind(self) -> ListingKind:
        return self.listing.kind

    @property
    def auction(self) -> Optional[AuctionState]:
        """Auction bookkeeping if the item is under auction."""
        if isinstance(self.listing, Auction):
            return self.listing.state
        return None

    def with_listing(self, listing: ListingState, timestamp: datetime) -> "Item":
        """Create the next version with a new listing state."""
        return replace(
            self,
            listing=listing,
            version=self.version + 1,
            updated_at=timestamp,
        )

    def with_owner(self, owner: str, timestamp: datetime) -> "Item":
        """Create the next version owned by ``owner`` and unlisted."""
        return replace(
            self,
            owner=owner,
            listing=UNLISTED,
            version=self.version + 1,
            updated_at=timestamp,
        )

    def as_dirty(self) -> "Item":
        return replace(self, dirty=True)

    def as_clean(self) -> "Item":
        return replace(self, dirty=False)
