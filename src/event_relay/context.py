"""
Module: context.py
Description: Relay context owning the queue store and relay client.

One RelayContext is built at process start from Settings, opened once,
passed to the entry points and closed at process exit.
"""

from typing import Any, Mapping, Optional, Sequence, Union

from event_relay.config.settings import Settings, settings as default_settings
from event_relay.delivery.flush import flush_queue
from event_relay.delivery.push import RelayClient
from event_relay.exceptions import RelayStateError
from event_relay.handlers.batch import submit_batch
from event_relay.handlers.startup import on_startup
from event_relay.models.event import TelemetryEvent
from event_relay.models.response import BatchResult, FlushReport, QueueStats
from event_relay.storage.queue import EventQueueStore
from event_relay.utils.logger import get_logger

logger = get_logger(__name__)


class RelayContext:
    """
    Explicit state for the relay entry points.

    Attributes:
        settings: Configuration the context was built from
        store: Offline queue store
        relay_client: Client for the ingestion host

    Example:
        >>> async with RelayContext(Settings(data_dir="./data")) as context:
        ...     await context.on_startup()
        ...     result = await context.submit_batch(events, api_key)
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        store: Optional[EventQueueStore] = None,
        relay_client: Optional[RelayClient] = None
    ):
        self.settings = config or default_settings
        self.store = store or EventQueueStore(
            self.settings.database_path,
            max_queue_size=self.settings.max_queue_size,
            max_retry_count=self.settings.max_retry_count
        )
        self.relay_client = relay_client or RelayClient(
            self.settings.ingest_host,
            timeout_seconds=self.settings.delivery_timeout
        )

    @property
    def is_open(self) -> bool:
        return self.store.is_open

    def require_open(self) -> None:
        """
        Raises:
            RelayStateError: If open() has not been called or close() has
        """
        if not self.is_open:
            raise RelayStateError("Relay context is not open")

    async def open(self) -> "RelayContext":
        """
        Initialize the queue store.

        Raises:
            StorageInitializationError: If the queue database cannot be opened
        """
        await self.store.initialize()
        logger.info(
            "Relay context opened",
            app_name=self.settings.app_name,
            version=self.settings.app_version,
            ingest_host=self.settings.ingest_host
        )
        return self

    async def close(self) -> None:
        await self.store.close()

    async def __aenter__(self) -> "RelayContext":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def submit_batch(
        self,
        events: Sequence[Union[TelemetryEvent, Mapping[str, Any]]],
        api_key: str
    ) -> BatchResult:
        return await submit_batch(self, events, api_key)

    async def on_startup(self, api_key: str = "") -> None:
        await on_startup(self, api_key)

    async def flush(self, api_key: str) -> FlushReport:
        """Run one flush pass with the given API key."""
        self.require_open()
        return await flush_queue(
            self.store,
            self.relay_client,
            api_key,
            batch_size=self.settings.flush_batch_size
        )

    async def stats(self) -> QueueStats:
        self.require_open()
        return await self.store.stats()
