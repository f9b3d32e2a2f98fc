"""Ledger change events and transfer records."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..persistence.codec import item_to_dict
from ..state.models import FixedPrice, Item, LedgerAction
from ..utils.time import format_wall_time


class TransferKind(str, Enum):
    """How an item changed hands."""
    MINT = "mint"
    SALE = "sale"
    AUCTION = "auction"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class TransferRecord:
    """One ownership change, as kept in the transaction journal."""
    item_id: str
    version: int
    kind: TransferKind
    buyer: str
    occurred_at: datetime
    seller: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    settlement_ref: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "version": self.version,
            "kind": self.kind.value,
            "seller": self.seller,
            "buyer": self.buyer,
            "price": self.price,
            "currency": self.currency,
            "settlement_ref": self.settlement_ref,
            "occurred_at": format_wall_time(self.occurred_at),
        }


@dataclass(frozen=True)
class LedgerEvent:
    """State change published after every accepted mutation."""
    item_id: str
    action: LedgerAction
    previous_state: Optional[dict[str, Any]]
    new_state: dict[str, Any]
    version: int
    timestamp: datetime
    transfer: Optional[TransferRecord] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "action": self.action.value,
            "previous_state": self.previous_state,
            "new_state": self.new_state,
            "version": self.version,
            "timestamp": format_wall_time(self.timestamp),
            "transfer": self.transfer.to_dict() if self.transfer else None,
        }


def _transfer_for(
    action: LedgerAction,
    previous: Optional[Item],
    current: Item,
    timestamp: datetime,
    settlement_ref: Optional[str],
) -> Optional[TransferRecord]:
    if previous is None:
        return TransferRecord(
            item_id=current.id,
            version=current.version,
            kind=TransferKind.MINT,
            buyer=current.owner,
            occurred_at=timestamp,
            currency=current.currency,
            settlement_ref=settlement_ref,
        )

    if previous.owner == current.owner:
        return None

    price = None
    if action == LedgerAction.BUY_FIXED_PRICE and isinstance(previous.listing, FixedPrice):
        kind = TransferKind.SALE
        price = previous.listing.price
    elif action == LedgerAction.SETTLE_AUCTION and previous.auction is not None:
        kind = TransferKind.AUCTION
        price = previous.auction.current_highest_bid
    else:
        kind = TransferKind.TRANSFER

    return TransferRecord(
        item_id=current.id,
        version=current.version,
        kind=kind,
        seller=previous.owner,
        buyer=current.owner,
        price=price,
        currency=current.currency,
        occurred_at=timestamp,
        settlement_ref=settlement_ref,
    )


def build_event(
    action: LedgerAction,
    previous: Optional[Item],
    current: Item,
    timestamp: datetime,
    settlement_ref: Optional[str] = None,
) -> LedgerEvent:
    """Describe the change from ``previous`` to ``current``."""
    return LedgerEvent(
        item_id=current.id,
        action=action,
        previous_state=item_to_dict(previous) if previous is not None else None,
        new_state=item_to_dict(current),
        version=current.version,
        timestamp=timestamp,
        transfer=_transfer_for(action, previous, current, timestamp, settlement_ref),
    )
