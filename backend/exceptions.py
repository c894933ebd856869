"""
Custom exception classes for storage and Algorand lookups.

These are infrastructure errors, not HTTP errors: callers decide whether to
swallow them (best-effort side operations) or translate them into a
domain error from domain/errors.py.
"""


class StorageError(Exception):
    """Raised when the transaction store is unavailable or a write fails."""
    pass


class DuplicateKeyError(StorageError):
    """Raised when a transaction record with the same tx_id already exists."""

    def __init__(self, tx_id: str):
        super().__init__(f"Transaction already recorded: {tx_id}")
        self.tx_id = tx_id


class LookupFailedError(Exception):
    """Raised when the node or indexer answered but rejected a lookup (e.g. unknown txId)."""
    pass
