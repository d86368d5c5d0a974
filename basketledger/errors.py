"""
Error taxonomy for the store and the basket engine.

Single-entity reads propagate these to the caller. Listings recover
item-level NotFound/DecodeError by skipping the item.
"""

from __future__ import annotations


class BasketLedgerError(Exception):
    """Base class for all basketledger failures."""


class NotFound(BasketLedgerError):
    """No entry was ever stored at the address."""

    def __init__(self, address: str, what: str = "entry"):
        self.address = address
        self.what = what
        super().__init__(f"No {what} at address {address}")


class DecodeError(BasketLedgerError):
    """Stored blob is unreadable, or does not match the requested record type."""

    def __init__(self, address: str, expected: str, reason: str):
        self.address = address
        self.expected = expected
        self.reason = reason
        super().__init__(f"Could not decode {address} as {expected}: {reason}")


class InconsistentLink(BasketLedgerError):
    """A position does not have exactly one product link."""

    def __init__(self, address: str, tag: str, count: int, detail: str | None = None):
        self.address = address
        self.tag = tag
        self.count = count
        message = f"{address} has {count} '{tag}' links, expected exactly 1"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ConcurrentUpdateConflict(BasketLedgerError):
    """The basket head kept moving during a bounded number of retries."""

    def __init__(self, basket_id: str, attempts: int):
        self.basket_id = basket_id
        self.attempts = attempts
        super().__init__(f"Basket {basket_id} changed concurrently; gave up after {attempts} attempts")


class InvalidRecord(BasketLedgerError, ValueError):
    """Well-typed input that is outside the record contract."""


class ConfigError(BasketLedgerError, ValueError):
    """Invalid configuration value."""
