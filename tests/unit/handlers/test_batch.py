"""
Module: test_batch.py
Description: Unit tests for batch intake.

Tests submit_batch deliver-or-queue behavior, the opportunistic backlog
flush after a live success and the precondition on an open context.
"""

import json

import httpx
import pytest

from event_relay.context import RelayContext
from event_relay.exceptions import RelayStateError
from event_relay.handlers.batch import submit_batch
from event_relay.models.response import BatchResult


class TestSubmitBatch:
    """Test cases for submit_batch."""

    @pytest.mark.asyncio
    async def test_live_success_reports_sent(self, context, sample_events, httpx_mock, batch_url, api_key):
        httpx_mock.add_response(method="POST", url=batch_url, status_code=200)

        result = await submit_batch(context, sample_events, api_key)

        assert result == BatchResult(sent=3, queued=0)
        assert await context.store.count() == 0
        assert len(httpx_mock.get_requests()) == 1

    @pytest.mark.asyncio
    async def test_live_batch_sent_verbatim(self, context, unusual_events, httpx_mock, batch_url, api_key):
        httpx_mock.add_response(method="POST", url=batch_url, status_code=200)

        result = await submit_batch(context, unusual_events, api_key)

        assert result == BatchResult(sent=len(unusual_events), queued=0)
        body = json.loads(httpx_mock.get_request().content)
        assert body == {"api_key": api_key, "batch": unusual_events}

    @pytest.mark.asyncio
    async def test_rejection_queues_batch(self, context, sample_events, httpx_mock, batch_url, api_key):
        httpx_mock.add_response(method="POST", url=batch_url, status_code=503)

        result = await submit_batch(context, sample_events, api_key)

        assert result == BatchResult(sent=0, queued=3)
        assert await context.store.count() == 3

    @pytest.mark.asyncio
    async def test_network_error_queues_batch(self, context, sample_events, httpx_mock, api_key):
        httpx_mock.add_exception(httpx.ConnectError("Name or service not known"))

        result = await submit_batch(context, sample_events, api_key)

        assert result == BatchResult(sent=0, queued=3)

    @pytest.mark.asyncio
    async def test_unencodable_batch_is_queued_without_bad_event(self, context, sample_event, httpx_mock, api_key):
        events = [sample_event, {"event": "bad", "properties": {"handle": object()}}]

        result = await submit_batch(context, events, api_key)

        assert result == BatchResult(sent=0, queued=1)
        assert httpx_mock.get_requests() == []

    @pytest.mark.asyncio
    async def test_success_drains_backlog(self, context, sample_events, httpx_mock, batch_url, api_key):
        await context.store.enqueue([{"event": "queued_while_offline"}])
        httpx_mock.add_response(method="POST", url=batch_url, status_code=200)
        httpx_mock.add_response(method="POST", url=batch_url, status_code=200)

        result = await submit_batch(context, sample_events, api_key)

        assert result == BatchResult(sent=3, queued=0)
        assert await context.store.count() == 0

        live_request, flush_request = httpx_mock.get_requests()
        assert len(json.loads(live_request.content)["batch"]) == 3
        flushed = json.loads(flush_request.content)["batch"]
        assert [event["event"] for event in flushed] == ["queued_while_offline"]

    @pytest.mark.asyncio
    async def test_failed_backlog_flush_does_not_change_result(
        self, context, sample_events, httpx_mock, batch_url, api_key
    ):
        await context.store.enqueue([{"event": "queued_while_offline"}])
        httpx_mock.add_response(method="POST", url=batch_url, status_code=200)
        httpx_mock.add_response(method="POST", url=batch_url, status_code=500)

        result = await submit_batch(context, sample_events, api_key)

        assert result == BatchResult(sent=3, queued=0)
        rows = await context.store.select_eligible(10)
        assert [row.retry_count for row in rows] == [1]

    @pytest.mark.asyncio
    async def test_empty_batch_skips_network(self, context, httpx_mock, api_key):
        result = await submit_batch(context, [], api_key)

        assert result == BatchResult(sent=0, queued=0)
        assert httpx_mock.get_requests() == []

    @pytest.mark.asyncio
    async def test_closed_context_raises(self, test_settings, sample_events, api_key):
        context = RelayContext(test_settings)

        with pytest.raises(RelayStateError):
            await submit_batch(context, sample_events, api_key)

    @pytest.mark.asyncio
    async def test_context_method_delegates(self, context, sample_events, httpx_mock, batch_url, api_key):
        httpx_mock.add_response(method="POST", url=batch_url, status_code=400)

        result = await context.submit_batch(sample_events, api_key)

        assert result == BatchResult(sent=0, queued=3)
