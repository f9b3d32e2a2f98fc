"""Tests for item serialization."""

from datetime import datetime, timezone

import orjson

from ledger_app.persistence.codec import decode_item, encode_item, item_to_dict
from ledger_app.state.models import Auction, AuctionState, FixedPrice, Item

NOW = datetime(2024, 1, 1, 12, 30, tzinfo=timezone.utc)


class TestCodec:
    """Test encode/decode of item records."""

    def test_auction_item(self):
        state = AuctionState(
            starting_price=10,
            ends_at=NOW,
            current_highest_bid=12.5,
            current_highest_bidder="u2",
        )
        item = Item(
            id="a", owner="u1", creator="u1",
            listing=Auction(state=state),
            version=3, metadata_ref="ipfs://abc",
            created_at=NOW, updated_at=NOW,
        )

        decoded = decode_item(encode_item(item))

        assert decoded == item
        assert decoded.auction.ends_at.tzinfo is not None

    def test_tagged_listing_layout(self):
        item = Item(id="a", owner="u1", creator="u1", listing=FixedPrice(price=5))

        data = orjson.loads(encode_item(item))

        assert data["listing"] == {"kind": "fixed_price", "price": 5}
        assert data["created_at"] is None

    def test_unlisted_layout(self):
        data = item_to_dict(Item(id="a", owner="u1", creator="u1"))
        assert data["listing"] == {"kind": "unlisted"}
        assert data["version"] == 0
        assert data["dirty"] is False
