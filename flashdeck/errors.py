"""
Error taxonomy for flashdeck.

All errors raised by the scheduling core derive from FlashdeckError so the
host can catch one type and report it.
"""

from __future__ import annotations


class FlashdeckError(Exception):
    """Base class for flashdeck errors."""


class NotFoundError(FlashdeckError):
    """A card, deck or creation stamp does not exist in the store."""

    def __init__(self, what: str, key: object | None = None):
        self.what = what
        self.key = key
        message = f"{what} not found" if key is None else f"{what} {key!r} not found"
        super().__init__(message)


class StorageError(FlashdeckError):
    """A query or write against the store failed."""


class DataIntegrityError(FlashdeckError):
    """Persisted data holds a value outside the known set."""


class UnknownCardStateError(DataIntegrityError):
    """A successor state has no mutation rule."""
