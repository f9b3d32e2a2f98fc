"""Tests for listing state machine rules."""

from datetime import datetime, timedelta, timezone

import pytest

from ledger_app.errors import (
    AlreadyListedError,
    AuctionExpiredError,
    AuctionNotActiveError,
    AuctionStillActiveError,
    BidTooLowError,
    InvalidDurationError,
    InvalidPriceError,
    NotForSaleError,
    NotOwnerError,
    SelfBidError,
    SelfPurchaseError,
)
from ledger_app.state import transitions
from ledger_app.state.models import UNLISTED, Auction, AuctionState, FixedPrice, Item

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


def make_item(**kwargs) -> Item:
    defaults = {"id": "item-1", "owner": "u1", "creator": "u1"}
    defaults.update(kwargs)
    return Item(**defaults)


def auction_item(starting_price=10, ends_at=NOW + HOUR, bid=None, bidder=None, **kwargs) -> Item:
    state = AuctionState(
        starting_price=starting_price,
        ends_at=ends_at,
        current_highest_bid=bid,
        current_highest_bidder=bidder,
    )
    return make_item(listing=Auction(state=state), **kwargs)


class TestListFixedPrice:
    """Test fixed-price listing."""

    def test_owner_lists_item(self):
        listed = transitions.list_fixed_price(make_item(), 5, "u1", NOW)

        assert listed.listing == FixedPrice(price=5)
        assert listed.version == 1

    def test_reprice_existing_listing(self):
        item = make_item(listing=FixedPrice(price=5), version=1)

        repriced = transitions.list_fixed_price(item, 7, "u1", NOW)

        assert repriced.listing == FixedPrice(price=7)
        assert repriced.version == 2

    def test_non_owner_rejected(self):
        with pytest.raises(NotOwnerError) as exc_info:
            transitions.list_fixed_price(make_item(), 5, "u2", NOW)

        assert exc_info.value.requester == "u2"
        assert exc_info.value.owner == "u1"

    @pytest.mark.parametrize("price", [0, -1, float("nan"), float("inf"), "5", True, None])
    def test_invalid_price_rejected(self, price):
        with pytest.raises(InvalidPriceError):
            transitions.list_fixed_price(make_item(), price, "u1", NOW)

    def test_auction_blocks_fixed_price(self):
        with pytest.raises(AlreadyListedError) as exc_info:
            transitions.list_fixed_price(auction_item(), 5, "u1", NOW)

        assert exc_info.value.listing_kind == "auction"


class TestDelist:
    """Test withdrawing a listing."""

    def test_fixed_price_returns_to_unlisted(self):
        item = make_item(listing=FixedPrice(price=5), version=1)

        delisted = transitions.delist(item, "u1", NOW)

        assert delisted.listing == UNLISTED
        assert delisted.version == 2

    def test_unlisted_is_noop(self):
        item = make_item()
        assert transitions.delist(item, "u1", NOW) is item

    def test_auction_cannot_be_delisted(self):
        with pytest.raises(AlreadyListedError):
            transitions.delist(auction_item(), "u1", NOW)

    def test_non_owner_rejected(self):
        with pytest.raises(NotOwnerError):
            transitions.delist(make_item(listing=FixedPrice(price=5)), "u2", NOW)


class TestStartAuction:
    """Test starting an auction."""

    def test_sets_auction_state(self):
        started = transitions.start_auction(make_item(), 10, HOUR, "u1", NOW)

        auction = started.auction
        assert auction.starting_price == 10
        assert auction.current_highest_bid is None
        assert auction.current_highest_bidder is None
        assert auction.ends_at == NOW + HOUR
        assert started.version == 1

    def test_duration_in_seconds(self):
        started = transitions.start_auction(make_item(), 10, 90, "u1", NOW)
        assert started.auction.ends_at == NOW + timedelta(seconds=90)

    @pytest.mark.parametrize(
        "duration", [0, -5, timedelta(0), "1h", 1e12, float("inf"), float("nan")]
    )
    def test_invalid_duration_rejected(self, duration):
        with pytest.raises(InvalidDurationError):
            transitions.start_auction(make_item(), 10, duration, "u1", NOW)

    def test_max_duration_enforced(self):
        with pytest.raises(InvalidDurationError):
            transitions.start_auction(
                make_item(), 10, HOUR, "u1", NOW, max_duration_seconds=60
            )

    def test_fixed_price_blocks_auction(self):
        item = make_item(listing=FixedPrice(price=5))
        with pytest.raises(AlreadyListedError) as exc_info:
            transitions.start_auction(item, 10, HOUR, "u1", NOW)

        assert exc_info.value.listing_kind == "fixed_price"

    def test_running_auction_blocks_new_auction(self):
        with pytest.raises(AlreadyListedError):
            transitions.start_auction(auction_item(), 10, HOUR, "u1", NOW)

    def test_invalid_starting_price(self):
        with pytest.raises(InvalidPriceError):
            transitions.start_auction(make_item(), 0, HOUR, "u1", NOW)

    def test_non_owner_rejected(self):
        with pytest.raises(NotOwnerError):
            transitions.start_auction(make_item(), 10, HOUR, "u2", NOW)


class TestPlaceBid:
    """Test bidding rules."""

    def test_first_bid_above_starting_price(self):
        bid = transitions.place_bid(auction_item(), "u2", 12, NOW)

        assert bid.auction.current_highest_bid == 12
        assert bid.auction.current_highest_bidder == "u2"
        assert bid.owner == "u1"

    def test_bid_equal_to_starting_price_rejected(self):
        with pytest.raises(BidTooLowError) as exc_info:
            transitions.place_bid(auction_item(), "u2", 10, NOW)

        assert exc_info.value.minimum_acceptable == 10

    def test_bid_must_beat_current_highest(self):
        item = auction_item(bid=12, bidder="u2")

        with pytest.raises(BidTooLowError) as exc_info:
            transitions.place_bid(item, "u3", 11, NOW)

        assert exc_info.value.minimum_acceptable == 12
        assert exc_info.value.amount == 11

    def test_not_an_auction(self):
        with pytest.raises(AuctionNotActiveError):
            transitions.place_bid(make_item(listing=FixedPrice(price=5)), "u2", 12, NOW)

    def test_expired_at_end_instant(self):
        item = auction_item(ends_at=NOW)
        with pytest.raises(AuctionExpiredError):
            transitions.place_bid(item, "u2", 12, NOW)

    def test_owner_cannot_bid(self):
        with pytest.raises(SelfBidError):
            transitions.place_bid(auction_item(), "u1", 12, NOW)

    def test_non_numeric_bid(self):
        with pytest.raises(InvalidPriceError):
            transitions.place_bid(auction_item(), "u2", "12", NOW)

    def test_bids_strictly_increase(self):
        item = auction_item()
        accepted = []
        for bidder, amount in [("u2", 11), ("u3", 11), ("u4", 15), ("u2", 14), ("u3", 16)]:
            try:
                item = transitions.place_bid(item, bidder, amount, NOW)
                accepted.append(amount)
            except BidTooLowError:
                pass

        assert accepted == [11, 15, 16]
        assert all(a < b for a, b in zip(accepted, accepted[1:]))


class TestSettleAuction:
    """Test auction settlement."""

    def test_winner_becomes_owner(self):
        item = auction_item(ends_at=NOW, bid=12, bidder="u2", version=2)

        settled = transitions.settle_auction(item, NOW)

        assert settled.owner == "u2"
        assert settled.listing == UNLISTED
        assert settled.version == 3

    def test_no_bids_returns_to_unlisted(self):
        item = auction_item(ends_at=NOW)

        settled = transitions.settle_auction(item, NOW)

        assert settled.owner == "u1"
        assert settled.listing == UNLISTED

    def test_unlisted_is_noop(self):
        item = make_item(version=4)
        assert transitions.settle_auction(item, NOW) is item

    def test_before_end_rejected(self):
        with pytest.raises(AuctionStillActiveError):
            transitions.settle_auction(auction_item(), NOW)

    def test_fixed_price_rejected(self):
        with pytest.raises(AuctionNotActiveError):
            transitions.settle_auction(make_item(listing=FixedPrice(price=5)), NOW)


class TestBuyFixedPrice:
    """Test fixed-price purchase."""

    def test_buyer_becomes_owner(self):
        item = make_item(listing=FixedPrice(price=5), version=1)

        bought = transitions.buy_fixed_price(item, "u2", NOW)

        assert bought.owner == "u2"
        assert bought.listing == UNLISTED
        assert bought.version == 2

    def test_not_for_sale(self):
        with pytest.raises(NotForSaleError):
            transitions.buy_fixed_price(make_item(), "u2", NOW)

    def test_auction_is_not_for_sale(self):
        with pytest.raises(NotForSaleError):
            transitions.buy_fixed_price(auction_item(), "u2", NOW)

    def test_owner_cannot_buy(self):
        with pytest.raises(SelfPurchaseError):
            transitions.buy_fixed_price(make_item(listing=FixedPrice(price=5)), "u1", NOW)


class TestTransferOwnership:
    """Test direct transfers."""

    def test_transfer(self):
        transferred = transitions.transfer_ownership(make_item(), "u1", "u2", NOW)

        assert transferred.owner == "u2"
        assert transferred.version == 1

    def test_transfer_withdraws_fixed_price_listing(self):
        item = make_item(listing=FixedPrice(price=5))

        transferred = transitions.transfer_ownership(item, "u1", "u2", NOW)

        assert transferred.listing == UNLISTED

    def test_wrong_from_owner(self):
        with pytest.raises(NotOwnerError):
            transitions.transfer_ownership(make_item(), "u3", "u2", NOW)

    def test_auction_must_settle_first(self):
        with pytest.raises(AlreadyListedError):
            transitions.transfer_ownership(auction_item(), "u1", "u2", NOW)

    def test_transfer_to_self_is_noop(self):
        item = make_item()
        assert transitions.transfer_ownership(item, "u1", "u1", NOW) is item
