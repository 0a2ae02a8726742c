"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains all data models used by the event relay:
- TelemetryEvent: one analytics event
- QueuedEvent: one row of the offline queue
- BatchPayload: events plus API key handed over by the host
- BatchResult, FlushReport, QueueStats: results of relay operations

All models are exported here for convenient importing.
"""

from .event import TelemetryEvent, QueuedEvent
from .request import BatchPayload
from .response import BatchResult, FlushReport, QueueStats

__all__ = [
    "TelemetryEvent",
    "QueuedEvent",
    "BatchPayload",
    "BatchResult",
    "FlushReport",
    "QueueStats",
]
