"""
Module: batch.py
Description: Batch intake, the per-batch entry point for the host.

Attempts immediate delivery of a fresh batch. If push succeeds, drains
any backlog with one flush pass. If push fails, writes the batch to the
offline queue for retry.

Key Components:
- submit_batch(): deliver-or-queue a batch, returns BatchResult

Dependencies: models, delivery, storage, utils
"""

from typing import TYPE_CHECKING, Any, Mapping, Sequence, Union

from event_relay.delivery.flush import flush_queue
from event_relay.models.event import TelemetryEvent
from event_relay.models.response import BatchResult
from event_relay.utils.logger import get_logger

if TYPE_CHECKING:
    from event_relay.context import RelayContext

logger = get_logger(__name__)


async def submit_batch(
    context: "RelayContext",
    events: Sequence[Union[TelemetryEvent, Mapping[str, Any]]],
    api_key: str
) -> BatchResult:
    """
    Deliver a batch now, or queue it for a later flush pass.

    Delivery and storage failures never raise; they show up in the
    returned counts and in the log.

    Args:
        context: Open relay context
        events: Events of the batch
        api_key: Ingestion API key

    Returns:
        BatchResult with sent=len(events) on success, otherwise
        queued=<rows actually persisted>

    Raises:
        RelayStateError: If the context is not open

    Example:
        >>> result = await submit_batch(context, [{"event": "app_opened"}], "phc_key")
        >>> result.model_dump()
        {'sent': 1, 'queued': 0}
    """
    context.require_open()

    event_count = len(events)
    if event_count == 0:
        return BatchResult()

    outcome = await context.relay_client.deliver(events, api_key)

    if outcome.succeeded:
        logger.info("Batch delivered immediately", event_count=event_count)

        # Connectivity is back; drain part of the backlog while we're at it
        try:
            await flush_queue(
                context.store,
                context.relay_client,
                api_key,
                batch_size=context.settings.flush_batch_size
            )
        except Exception as e:
            logger.error(
                "Backlog flush after live delivery failed",
                error=str(e),
                error_type=type(e).__name__
            )

        return BatchResult(sent=event_count, queued=0)

    logger.warning(
        "Live delivery failed, queuing batch",
        event_count=event_count,
        outcome=outcome.status.value,
        status_code=outcome.status_code,
        error=outcome.error
    )
    queued = await context.store.enqueue(events)
    return BatchResult(sent=0, queued=queued)
