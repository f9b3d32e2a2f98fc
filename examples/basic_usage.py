#!/usr/bin/env python3
"""
Basic Usage Example - Ownership and Listing Ledger

This script walks one item through its lifecycle against a throwaway
SQLite database:
- Mint an item
- List it for a fixed price, then withdraw the listing
- Run a short auction and settle it
- Simulate a durable store outage and reconcile afterwards

Run: python examples/basic_usage.py
"""

import tempfile
import time
from pathlib import Path

from ledger_app.errors import BidTooLowError
from ledger_app.service import LedgerService


def print_item(label, item):
    listing = item.listing_kind.value
    extra = ""
    if item.auction is not None:
        extra = f" highest={item.auction.current_highest_bid} by {item.auction.current_highest_bidder}"
    print(f"  {label:<22} owner={item.owner:<6} v{item.version} {listing}{extra}"
          f"{' (dirty)' if item.dirty else ''}")


def main():
    workdir = Path(tempfile.mkdtemp(prefix="ledger-example-"))
    print(f"📁 Working directory: {workdir}")

    with LedgerService.from_config(overrides={
        "store": {"db_path": str(workdir / "ledger.db"), "cooldown_seconds": 0},
        "notifications": {
            "max_workers": 0,
            "file_path": str(workdir / "events.jsonl"),
            "journal_path": str(workdir / "journal.db"),
        },
    }) as ledger:
        print("\n🎨 Minting")
        item = ledger.create_item("alice", metadata_ref="ipfs://example")
        print_item("created", item)

        print("\n🏷️  Fixed price")
        print_item("listed at 5", ledger.list_fixed_price(item.id, 5, "alice"))
        print_item("delisted", ledger.delist(item.id, "alice"))

        print("\n🔨 Auction")
        print_item("auction started", ledger.start_auction(item.id, 10, 1, "alice"))
        print_item("bob bids 12", ledger.place_bid(item.id, "bob", 12))
        try:
            ledger.place_bid(item.id, "carol", 11)
        except BidTooLowError as e:
            print(f"  carol bids 11          rejected, must exceed {e.minimum_acceptable}")

        time.sleep(1.1)
        print_item("settled", ledger.settle_auction(item.id))

        print("\n🔌 Durable store outage")
        ledger.selector.mark_unreachable("simulated outage")
        ledger.durable.ping = lambda: False
        print_item("bob lists at 20", ledger.list_fixed_price(item.id, 20, "bob"))
        print(f"  health: {ledger.health()['dirty_records']} dirty record(s)")

        del ledger.durable.ping
        report = ledger.reconcile()
        print(f"  reconciled: promoted={report.promoted} discarded={report.discarded}")
        print_item("after recovery", ledger.get_item(item.id))

        print("\n📜 Transaction history")
        for tx in ledger.transaction_history(item.id):
            print(f"  v{tx.version} {tx.kind:<8} {tx.seller or '-':>6} -> {tx.buyer:<6} {tx.price}")

    print(f"\n✅ Events written to {workdir / 'events.jsonl'}")


if __name__ == "__main__":
    main()
