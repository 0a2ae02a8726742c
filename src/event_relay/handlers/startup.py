"""
Module: startup.py
Description: Best-effort drain of the offline queue at process start.
"""

from typing import TYPE_CHECKING

from event_relay.delivery.flush import flush_queue
from event_relay.utils.logger import get_logger

if TYPE_CHECKING:
    from event_relay.context import RelayContext

logger = get_logger(__name__)


async def on_startup(context: "RelayContext", api_key: str = "") -> None:
    """
    Run one flush pass right after the queue store is opened.

    The host normally has no API key yet at this point, so with the
    default placeholder the pass stops before any network call and the
    backlog waits for the next successful live batch. Never raises.

    Args:
        context: Relay context whose store has been initialized
        api_key: Ingestion API key, if the host already holds one
    """
    try:
        context.require_open()
        report = await flush_queue(
            context.store,
            context.relay_client,
            api_key,
            batch_size=context.settings.flush_batch_size
        )
    except Exception as e:
        logger.error(
            "Startup flush failed",
            error=str(e),
            error_type=type(e).__name__
        )
        return

    if report.selected:
        logger.info(
            "Startup flush finished",
            selected=report.selected,
            delivered=report.delivered,
            skipped_reason=report.skipped_reason
        )
