"""
Module: storage
Description: Package initialization for the offline queue persistence layer.

This package contains the SQLite-backed queue used when live delivery
fails:
- queue: EventQueueStore over a single aiosqlite connection
"""

from .queue import EventQueueStore, MAX_QUEUE_SIZE, MAX_RETRY_COUNT

__all__ = ["EventQueueStore", "MAX_QUEUE_SIZE", "MAX_RETRY_COUNT"]
