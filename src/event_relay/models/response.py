"""
Module: response.py
Description: Result models returned by the relay entry points.

Key Components:
- BatchResult: outcome of submit_batch (sent / queued counts)
- FlushReport: accounting of a single flush pass
- QueueStats: snapshot of the offline queue

Dependencies: pydantic, typing
"""

from typing import Optional
from pydantic import BaseModel, Field


class BatchResult(BaseModel):
    """
    Result of submitting one batch.

    Exactly one of the counts is non-zero for a non-empty batch:
    either the batch went out live or it was written to the queue.
    """

    sent: int = Field(default=0, ge=0, description="Events delivered immediately")
    queued: int = Field(default=0, ge=0, description="Events persisted for retry")


class FlushReport(BaseModel):
    """
    Accounting of one flush pass.

    Attributes:
        selected: Eligible rows read from the queue
        delivered: Rows deleted after a successful delivery
        retried: Rows whose retry count was incremented
        purged: Rows deleted after reaching the retry ceiling
        corrupt: Selected rows whose stored event could not be read
        skipped_reason: Why the pass did not contact the network, if it didn't
    """

    selected: int = Field(default=0, ge=0)
    delivered: int = Field(default=0, ge=0)
    retried: int = Field(default=0, ge=0)
    purged: int = Field(default=0, ge=0)
    corrupt: int = Field(default=0, ge=0)
    skipped_reason: Optional[str] = Field(default=None)


class QueueStats(BaseModel):
    """Snapshot of the offline queue contents."""

    total: int = Field(default=0, ge=0, description="Rows in the queue")
    eligible: int = Field(default=0, ge=0, description="Rows below the retry ceiling")
    exhausted: int = Field(default=0, ge=0, description="Rows at or above the retry ceiling")
    oldest_created_at: Optional[int] = Field(default=None, description="Oldest row (epoch ms)")
    newest_created_at: Optional[int] = Field(default=None, description="Newest row (epoch ms)")
