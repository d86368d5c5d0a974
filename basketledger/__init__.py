"""
basketledger - content-addressed basket store.

Immutable entries linked by typed, ordered links, with a basket total
that is kept consistent by recomputing it from the linked positions.
"""

__version__ = "0.1.0"
