"""
Package: delivery
Description: Event delivery mechanisms for the event relay.

Provides push delivery of batches to the ingestion host and the flush
pass that drains the offline queue.
"""

from .push import DeliveryOutcome, DeliveryStatus, RelayClient
from .flush import flush_queue

__all__ = [
    "DeliveryOutcome",
    "DeliveryStatus",
    "RelayClient",
    "flush_queue",
]
