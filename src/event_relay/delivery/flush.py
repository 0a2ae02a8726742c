"""
Module: flush.py
Description: Drain one bounded slice of the offline queue.

A flush pass selects the oldest eligible rows, sends the readable ones
as a single batch and applies the outcome to every selected row:
delete on success, increment-then-purge on failure.
"""

from typing import List

from event_relay.delivery.push import RelayClient
from event_relay.models.event import TelemetryEvent
from event_relay.models.response import FlushReport
from event_relay.storage.queue import EventQueueStore
from event_relay.utils.logger import get_logger

logger = get_logger(__name__)

FLUSH_BATCH_SIZE = 50


async def flush_queue(
    store: EventQueueStore,
    relay_client: RelayClient,
    api_key: str,
    batch_size: int = FLUSH_BATCH_SIZE
) -> FlushReport:
    """
    Run one flush pass.

    Retry accounting covers every selected id, including rows whose
    stored event can no longer be read, so a malformed row ages out
    through the retry ceiling instead of staying at the head of the
    queue. When no selected row is readable the pass takes the failure
    branch without contacting the network.

    Args:
        store: Open offline queue
        relay_client: Client used for the delivery attempt
        api_key: Ingestion API key; blank means no usable credential
        batch_size: Maximum rows selected in this pass

    Returns:
        FlushReport describing what the pass did
    """
    rows = await store.select_eligible(batch_size)
    if not rows:
        return FlushReport(skipped_reason="empty")

    report = FlushReport(selected=len(rows))

    if not api_key or not api_key.strip():
        logger.info("Flush skipped, no API key available", queued=len(rows))
        report.skipped_reason = "no_api_key"
        return report

    ids = [row.id for row in rows]
    events: List[TelemetryEvent] = []
    for row in rows:
        try:
            events.append(row.to_event())
        except ValueError as e:
            report.corrupt += 1
            logger.warning(
                "Queued event is unreadable, excluding it from the batch",
                row_id=row.id,
                retry_count=row.retry_count,
                error=str(e)
            )

    if events:
        outcome = await relay_client.deliver(events, api_key)
        if outcome.succeeded:
            report.delivered = await store.delete(ids)
            logger.info(
                "Queued events flushed",
                delivered=report.delivered,
                corrupt=report.corrupt
            )
            return report
        failure = outcome.status.value
    else:
        # Nothing readable: counted as a failed attempt so the rows age out.
        report.skipped_reason = "all_corrupt"
        failure = "all_corrupt"

    report.retried = await store.increment_retry(ids)
    report.purged = await store.purge_exhausted(ids)

    logger.warning(
        "Flush failed, queued events kept for retry",
        reason=failure,
        retried=report.retried,
        purged=report.purged,
        corrupt=report.corrupt
    )
    return report
