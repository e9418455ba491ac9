"""Error taxonomy for the garden datastore."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every datastore failure."""


class ValidationError(StoreError, ValueError):
    """Input outside the domain a store accepts; nothing was written."""


class NotFoundError(StoreError, KeyError):
    """A query matched no rows."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class StorageError(StoreError):
    """The underlying SQLite handle failed."""
