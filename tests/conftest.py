"""
Module: conftest.py
Description: Shared pytest fixtures for event relay tests.

Provides settings pointed at a temporary data directory, an opened
queue store, a relay context and sample events. The ingestion host is
mocked with pytest-httpx, so no test touches the network.
"""

import itertools

import pytest
import pytest_asyncio

from event_relay.config.settings import Settings
from event_relay.context import RelayContext
from event_relay.delivery.push import RelayClient
from event_relay.models.event import TelemetryEvent
from event_relay.storage.queue import EventQueueStore
from event_relay.utils.logger import configure_logging

TEST_HOST = "https://ingest.test"
BATCH_URL = f"{TEST_HOST}/batch"
TEST_API_KEY = "phc_test_key"


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore default logging after tests that reconfigure it (e.g. the CLI)."""
    yield
    configure_logging()


@pytest.fixture
def test_settings(tmp_path):
    """
    Provide test configuration settings.

    Disables .env loading and points the queue at a per-test directory.
    """
    return Settings(
        _env_file=None,
        app_name="Event Relay Test",
        log_level="DEBUG",
        ingest_host=TEST_HOST,
        data_dir=tmp_path / "data",
    )


@pytest.fixture
def batch_url():
    return BATCH_URL


@pytest.fixture
def api_key():
    return TEST_API_KEY


@pytest.fixture
def clock():
    """Strictly increasing fake clock in epoch milliseconds."""
    ticks = itertools.count(1_700_000_000_000)
    return lambda: next(ticks)


@pytest_asyncio.fixture
async def store(test_settings, clock):
    """Provide an initialized EventQueueStore, closed after the test."""
    queue_store = EventQueueStore(
        test_settings.database_path,
        max_queue_size=test_settings.max_queue_size,
        max_retry_count=test_settings.max_retry_count,
        clock=clock,
    )
    await queue_store.initialize()
    yield queue_store
    await queue_store.close()


@pytest.fixture
def relay_client(test_settings):
    return RelayClient(test_settings.ingest_host, timeout_seconds=test_settings.delivery_timeout)


@pytest_asyncio.fixture
async def context(test_settings, store, relay_client):
    """Provide an open RelayContext sharing the store fixture."""
    relay_context = RelayContext(test_settings, store=store, relay_client=relay_client)
    await relay_context.open()
    yield relay_context
    await relay_context.close()


@pytest.fixture
def sample_event():
    """Typical event as sent by the host application."""
    return {
        "event": "item_created",
        "properties": {
            "distinct_id": "2f1c7e0a-5b7d-4c1e-9a55-0c3f3b1d2e4f",
            "app_version": "1.4.2",
            "platform": "desktop",
            "item_type": "bug",
        },
        "timestamp": "2026-10-18T09:30:00.000Z",
    }


@pytest.fixture
def sample_events(sample_event):
    """Three distinct events."""
    return [
        TelemetryEvent(**{**sample_event, "event": name})
        for name in ("app_opened", "item_created", "app_closed")
    ]


@pytest.fixture
def unusual_events():
    """Valid events whose names and properties must reach the wire untouched."""
    return [
        {"event": " $pageview ", "properties": {"path": "  /home  "}, "timestamp": None},
        {"event": "x" * 201, "properties": {}, "timestamp": None},
        {"event": "", "properties": {"empty_name": True}, "timestamp": None},
        {
            "event": "événement ✓ \U0001f680",
            "properties": {
                "nested": {"list": [1, 2.5, None, {"deep": ["ü", False]}]},
                "quote": "\"tab\there\"\n",
            },
            "timestamp": "2026-10-18T09:30:00.000Z",
        },
    ]
