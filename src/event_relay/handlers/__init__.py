"""
Module: handlers
Description: Package initialization for host-facing entry points.

This package contains the operations the host application invokes:
- batch: submit_batch() for every telemetry batch
- startup: on_startup() once after the queue is opened
"""

from .batch import submit_batch
from .startup import on_startup

__all__ = ["submit_batch", "on_startup"]
