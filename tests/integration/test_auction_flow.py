"""End-to-end auction lifecycle through the ledger service."""

from dataclasses import replace
from datetime import timedelta

import pytest

from ledger_app.errors import (
    AuctionExpiredError,
    AuctionStillActiveError,
    BidTooLowError,
    InvalidDurationError,
    SelfBidError,
)
from ledger_app.service import LedgerService
from ledger_app.state.models import UNLISTED, LedgerAction


class TestAuctionFlow:
    """Create, auction, bid, settle."""

    def test_auction_to_settlement(self, ledger, clock, events):
        item = ledger.create_item("u1")
        assert item.owner == "u1"
        assert item.version == 0

        auctioned = ledger.start_auction(item.id, 10, timedelta(hours=1), "u1")
        assert auctioned.auction.ends_at == clock.now + timedelta(hours=1)

        bid = ledger.place_bid(item.id, "u2", 12)
        assert bid.auction.current_highest_bidder == "u2"

        with pytest.raises(BidTooLowError) as exc_info:
            ledger.place_bid(item.id, "u3", 11)
        assert exc_info.value.minimum_acceptable == 12

        with pytest.raises(AuctionStillActiveError):
            ledger.settle_auction(item.id)

        clock.advance(hours=1)
        settled = ledger.settle_auction(item.id)

        assert settled.owner == "u2"
        assert settled.listing == UNLISTED
        assert settled.version == 3

        again = ledger.settle_auction(item.id)
        assert again == settled

        assert [e.action for e in events] == [
            LedgerAction.CREATE,
            LedgerAction.START_AUCTION,
            LedgerAction.PLACE_BID,
            LedgerAction.SETTLE_AUCTION,
        ]
        assert events[-1].transfer.price == 12

    def test_bid_after_end_rejected(self, ledger, clock):
        item = ledger.create_item("u1")
        ledger.start_auction(item.id, 10, 60, "u1")

        clock.advance(seconds=60)

        with pytest.raises(AuctionExpiredError):
            ledger.place_bid(item.id, "u2", 50)

    @pytest.mark.parametrize("duration", [1e12, float("inf"), float("nan")])
    def test_unbounded_duration_rejected(self, ledger, duration):
        item = ledger.create_item("u1")

        with pytest.raises(InvalidDurationError):
            ledger.start_auction(item.id, 10, duration, "u1")

        assert ledger.get_item(item.id).listing == UNLISTED

    def test_owner_cannot_bid(self, ledger):
        item = ledger.create_item("u1")
        ledger.start_auction(item.id, 10, 60, "u1")

        with pytest.raises(SelfBidError):
            ledger.place_bid(item.id, "u1", 20)

    def test_read_settles_expired_auction(self, ledger, clock):
        item = ledger.create_item("u1")
        ledger.start_auction(item.id, 10, 60, "u1")
        ledger.place_bid(item.id, "u2", 15)

        clock.advance(minutes=5)
        current = ledger.get_item(item.id)

        assert current.owner == "u2"
        assert current.listing == UNLISTED

    def test_no_bid_auction_returns_to_unlisted(self, ledger, clock):
        item = ledger.create_item("u1")
        ledger.start_auction(item.id, 10, 60, "u1")

        clock.advance(minutes=5)
        settled = ledger.settle_auction(item.id)

        assert settled.owner == "u1"
        assert settled.listing == UNLISTED
        assert ledger.list_fixed_price(item.id, 8, "u1").listing.price == 8

    def test_auto_settle_disabled(self, ledger_config, flaky_store, clock):
        config = replace(
            ledger_config,
            auction=replace(ledger_config.auction, auto_settle_on_read=False),
        )
        with LedgerService(config=config, durable=flaky_store, clock=clock) as service:
            item = service.create_item("u1")
            service.start_auction(item.id, 10, 60, "u1")
            clock.advance(minutes=5)

            assert service.get_item(item.id).auction is not None
            assert service.settle_auction(item.id).listing == UNLISTED
