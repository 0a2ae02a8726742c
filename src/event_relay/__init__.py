"""
Offline-resilient relay for client-side analytics events.

Batches are pushed to the ingestion host immediately; when that fails
they are kept in a local SQLite queue and drained by later flush passes.
"""

from .config.settings import Settings
from .context import RelayContext
from .delivery import DeliveryOutcome, DeliveryStatus, RelayClient, flush_queue
from .exceptions import (
    RelayError,
    RelayStateError,
    StorageError,
    StorageInitializationError,
    StorageNotInitializedError,
)
from .handlers import on_startup, submit_batch
from .models import BatchResult, FlushReport, QueuedEvent, QueueStats, TelemetryEvent
from .storage import EventQueueStore

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "RelayContext",
    "RelayClient",
    "DeliveryOutcome",
    "DeliveryStatus",
    "EventQueueStore",
    "flush_queue",
    "submit_batch",
    "on_startup",
    "TelemetryEvent",
    "QueuedEvent",
    "BatchResult",
    "FlushReport",
    "QueueStats",
    "RelayError",
    "RelayStateError",
    "StorageError",
    "StorageInitializationError",
    "StorageNotInitializedError",
]
