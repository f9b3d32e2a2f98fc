"""
Ledger App - Ownership & Listing Ledger for a digital-asset marketplace

Holds the authoritative state of who owns each item and whether it is
unlisted, listed for a fixed price, or under auction. Enforces bid and
transfer invariants and keeps serving writes through an in-memory mirror
while the durable store is unreachable, reconciling once it recovers.
"""

__version__ = "0.1.0"
__author__ = "Ledger Team"
