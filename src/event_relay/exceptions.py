"""
Module: exceptions.py
Description: Exception hierarchy for the event relay.

Only initialization and precondition failures surface as exceptions;
delivery and ordinary storage failures are absorbed into log lines and
result counts.
"""


class RelayError(Exception):
    """Base class for all event relay errors."""


class RelayStateError(RelayError):
    """Raised when an entry point is called on a context that is not open."""


class StorageError(RelayError):
    """Base class for offline queue storage errors."""


class StorageInitializationError(StorageError):
    """Raised when the queue database cannot be created or opened."""


class StorageNotInitializedError(StorageError):
    """Raised when the queue store is used before initialize() or after close()."""
