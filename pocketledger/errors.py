"""Exception hierarchy shared by the ledger store, session and CLI."""
from __future__ import annotations


class LedgerError(Exception):
    """Base class for every failure the ledger reports to its callers."""


class StorageUnavailable(LedgerError):
    """The storage root is not configured or cannot be used."""


class ParseFailure(LedgerError):
    """A date, amount, repeat tag or record row could not be parsed."""


class IndexOutOfRange(LedgerError):
    """A delete or update referenced a position outside the month's list."""

    def __init__(self, index: int, size: int):
        super().__init__(f"No entry at index {index} (month has {size} entries)")
        self.index = index
        self.size = size


class IoFailure(LedgerError):
    """Writing or creating a month file failed."""
