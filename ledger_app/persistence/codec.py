"""Item record serialization."""

from typing import Any

import orjson

from ..state.models import (
    UNLISTED,
    Auction,
    AuctionState,
    FixedPrice,
    Item,
    ListingKind,
    ListingState,
)
from ..utils.time import format_wall_time, parse_wall_time


def listing_to_dict(listing: ListingState) -> dict[str, Any]:
    """Encode a listing variant as a tagged dictionary."""
    data: dict[str, Any] = {"kind": listing.kind.value}

    if isinstance(listing, FixedPrice):
        data["price"] = listing.price
    elif isinstance(listing, Auction):
        auction = listing.state
        data.update({
            "starting_price": auction.starting_price,
            "ends_at": format_wall_time(auction.ends_at),
            "current_highest_bid": auction.current_highest_bid,
            "current_highest_bidder": auction.current_highest_bidder,
        })

    return data


def listing_from_dict(data: dict[str, Any]) -> ListingState:
    """Decode a tagged listing dictionary."""
    kind = ListingKind(data["kind"])

    if kind == ListingKind.FIXED_PRICE:
        return FixedPrice(price=data["price"])
    if kind == ListingKind.AUCTION:
        return Auction(state=AuctionState(
            starting_price=data["starting_price"],
            ends_at=parse_wall_time(data["ends_at"]),
            current_highest_bid=data.get("current_highest_bid"),
            current_highest_bidder=data.get("current_highest_bidder"),
        ))
    return UNLISTED


def item_to_dict(item: Item) -> dict[str, Any]:
    """Encode an item as a plain dictionary."""
    return {
        "id": item.id,
        "owner": item.owner,
        "creator": item.creator,
        "listing": listing_to_dict(item.listing),
        "version": item.version,
        "dirty": item.dirty,
        "metadata_ref": item.metadata_ref,
        "currency": item.currency,
        "created_at": format_wall_time(item.created_at),
        "updated_at": format_wall_time(item.updated_at),
    }


def item_from_dict(data: dict[str, Any]) -> Item:
    """Decode an item dictionary produced by ``item_to_dict``."""
    return Item(
        id=data["id"],
        owner=data["owner"],
        creator=data["creator"],
        listing=listing_from_dict(data["listing"]),
        version=data["version"],
        dirty=data.get("dirty", False),
        metadata_ref=data.get("metadata_ref"),
        currency=data.get("currency", "ETH"),
        created_at=parse_wall_time(data.get("created_at")),
        updated_at=parse_wall_time(data.get("updated_at")),
    )


def encode_item(item: Item) -> str:
    """Serialize an item to a JSON string."""
    return orjson.dumps(item_to_dict(item)).decode()


def decode_item(raw: str) -> Item:
    """Deserialize an item from a JSON string."""
    return item_from_dict(orjson.loads(raw))
