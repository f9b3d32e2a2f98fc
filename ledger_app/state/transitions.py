"""
Listing state machine rules.

Each function takes the current record, validates the requested change
against the ownership, listing and bidding invariants, and returns the next
record. Nothing here touches storage; the ledger service supplies the
current record and persists the result.

Allowed listing transitions::

    Unlisted -> FixedPrice -> Unlisted   (buy, delist, transfer)
    Unlisted -> Auction    -> Unlisted   (settle)

FixedPrice and Auction never move directly into each other.
"""

import math
from datetime import datetime
from typing import Any, Optional

from ..errors import (
    AlreadyListedError,
    AuctionExpiredError,
    AuctionNotActiveError,
    AuctionStillActiveError,
    BidTooLowError,
    InvalidDurationError,
    InvalidPriceError,
    LedgerRuleError,
    NotForSaleError,
    NotOwnerError,
    SelfBidError,
    SelfPurchaseError,
)
from ..logging.config import get_ledger_logger
from ..utils.time import Duration, auction_end_time, is_auction_expired, to_duration
from .models import UNLISTED, Auction, AuctionState, FixedPrice, Item, Unlisted

rules_logger = get_ledger_logger(__name__)


def _reject(error: LedgerRuleError, rule: str) -> None:
    rules_logger.warning(
        "Ledger rule rejected request",
        rule=rule,
        item_id=error.item_id,
        error_type=type(error).__name__,
        reason=str(error),
    )
    raise error


def validate_price(price: Any, item_id: Optional[str] = None) -> float:
    """Return ``price`` if it is a finite positive number."""
    if (
        isinstance(price, bool)
        or not isinstance(price, (int, float))
        or not math.isfinite(price)
        or price <= 0
    ):
        _reject(InvalidPriceError(
            f"Price must be a positive number, got {price!r}",
            price=price,
            item_id=item_id,
        ), rule="positive_price")
    return price


def require_owner(item: Item, requester: str) -> None:
    if requester != item.owner:
        _reject(NotOwnerError(
            f"{requester} does not own item {item.id}",
            requester=requester,
            owner=item.owner,
            item_id=item.id,
        ), rule="owner_only")


def list_fixed_price(item: Item, price: float, requester: str, now: datetime) -> Item:
    """List an item for a fixed price, or re-price an existing listing."""
    require_owner(item, requester)
    price = validate_price(price, item.id)

    if isinstance(item.listing, Auction):
        _reject(AlreadyListedError(
            f"Item {item.id} is under auction",
            listing_kind=item.listing_kind.value,
            item_id=item.id,
        ), rule="exclusive_listing")

    return item.with_listing(FixedPrice(price=price), now)


def delist(item: Item, requester: str, now: datetime) -> Item:
    """Withdraw a fixed-price listing. Unlisted items are returned unchanged."""
    require_owner(item, requester)

    if isinstance(item.listing, Unlisted):
        return item

    if isinstance(item.listing, Auction):
        _reject(AlreadyListedError(
            f"Item {item.id} is under auction and ends through settlement",
            listing_kind=item.listing_kind.value,
            item_id=item.id,
        ), rule="auction_ends_by_settlement")

    return item.with_listing(UNLISTED, now)


def start_auction(
    item: Item,
    starting_price: float,
    duration: Duration,
    requester: str,
    now: datetime,
    max_duration_seconds: Optional[float] = None,
) -> Item:
    """Put an unlisted item under auction."""
    require_owner(item, requester)
    starting_price = validate_price(starting_price, item.id)

    try:
        span = to_duration(duration)
        ends_at = auction_end_time(now, span)
    except (TypeError, ValueError, OverflowError):
        span = None
    if span is None or span.total_seconds() <= 0:
        _reject(InvalidDurationError(
            f"Auction duration must be positive, got {duration!r}",
            duration=duration,
            item_id=item.id,
        ), rule="positive_duration")
    if max_duration_seconds is not None and span.total_seconds() > max_duration_seconds:
        _reject(InvalidDurationError(
            f"Auction duration exceeds {max_duration_seconds}s",
            duration=duration,
            item_id=item.id,
        ), rule="max_duration")

    if not isinstance(item.listing, Unlisted):
        _reject(AlreadyListedError(
            f"Item {item.id} is already listed as {item.listing_kind.value}",
            listing_kind=item.listing_kind.value,
            item_id=item.id,
        ), rule="exclusive_listing")

    auction = AuctionState(
        starting_price=starting_price,
        ends_at=ends_at,
    )
    return item.with_listing(Auction(state=auction), now)


def place_bid(item: Item, bidder: str, amount: float, now: datetime) -> Item:
    """Record a bid that strictly beats the current minimum."""
    auction = item.auction
    if auction is None:
        _reject(AuctionNotActiveError(
            f"Item {item.id} is not under auction",
            item_id=item.id,
        ), rule="auction_active")

    if is_auction_expired(auction.ends_at, now):
        _reject(AuctionExpiredError(
            f"Auction for item {item.id} ended at {auction.ends_at.isoformat()}",
            ends_at=auction.ends_at,
            item_id=item.id,
        ), rule="auction_not_expired")

    if bidder == item.owner:
        _reject(SelfBidError(
            f"Owner {bidder} cannot bid on item {item.id}",
            item_id=item.id,
        ), rule="no_self_bid")

    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
        _reject(InvalidPriceError(
            f"Bid must be a number, got {amount!r}",
            price=amount,
            item_id=item.id,
        ), rule="numeric_bid")

    minimum = auction.minimum_acceptable
    if amount <= minimum:
        _reject(BidTooLowError(
            f"Bid {amount} must exceed {minimum}",
            minimum_acceptable=minimum,
            amount=amount,
            item_id=item.id,
        ), rule="bid_increases")

    return item.with_listing(Auction(state=auction.with_bid(bidder, amount)), now)


def settle_auction(item: Item, now: datetime) -> Item:
    """
    Close an expired auction.

    The highest bidder, if any, becomes the owner. An auction without bids
    simply returns the item to unlisted. Settling an unlisted item is a
    no-op and returns it unchanged.
    """
    if isinstance(item.listing, Unlisted):
        return item

    auction = item.auction
    if auction is None:
        _reject(AuctionNotActiveError(
            f"Item {item.id} is listed at a fixed price, not under auction",
            item_id=item.id,
        ), rule="auction_active")

    if not is_auction_expired(auction.ends_at, now):
        _reject(AuctionStillActiveError(
            f"Auction for item {item.id} runs until {auction.ends_at.isoformat()}",
            ends_at=auction.ends_at,
            item_id=item.id,
        ), rule="auction_expired")

    if auction.has_bids:
        return item.with_owner(auction.current_highest_bidder, now)

    return item.with_listing(UNLISTED, now)


def buy_fixed_price(item: Item, buyer: str, now: datetime) -> Item:
    """Transfer a fixed-price item to ``buyer``."""
    if not isinstance(item.listing, FixedPrice):
        _reject(NotForSaleError(
            f"Item {item.id} is not listed for a fixed price",
            item_id=item.id,
        ), rule="fixed_price_listed")

    if buyer == item.owner:
        _reject(SelfPurchaseError(
            f"Owner {buyer} cannot buy item {item.id}",
            item_id=item.id,
        ), rule="no_self_purchase")

    return item.with_owner(buyer, now)


def transfer_ownership(item: Item, from_owner: str, to_owner: str, now: datetime) -> Item:
    """
    Directly reassign ownership outside a sale.

    A fixed-price listing is withdrawn by the transfer. An active auction
    must be settled first.
    """
    require_owner(item, from_owner)

    if isinstance(item.listing, Auction):
        _reject(AlreadyListedError(
            f"Item {item.id} is under auction; settle it before transferring",
            listing_kind=item.listing_kind.value,
            item_id=item.id,
        ), rule="auction_ends_by_settlement")

    if to_owner == item.owner:
        return item

    return item.with_owner(to_owner, now)
