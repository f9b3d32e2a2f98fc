"""
Utility functions module.

Time Semantics:
- Auction expiry is a pure comparison against a wall-clock instant
  supplied at call time; nothing here runs a timer
- All timestamps are timezone-aware UTC
"""
