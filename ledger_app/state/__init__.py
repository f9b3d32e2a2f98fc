"""
Item ownership and listing state module.

Holds the item data model, the listing state machine rules and the per-item
lock registry. Listing moves Unlisted → FixedPrice → Unlisted or
Unlisted → Auction → Unlisted.
"""
