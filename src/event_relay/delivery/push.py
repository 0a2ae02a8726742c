"""
Module: push.py
Description: Push delivery of event batches to the ingestion endpoint.

Implements a single HTTP POST per batch with timeout handling. Network
and HTTP failures are reported as a DeliveryOutcome instead of being
raised; retry policy belongs to the callers.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import httpx
from pydantic import BaseModel, Field

from event_relay.models.event import TelemetryEvent
from event_relay.utils.logger import get_logger

logger = get_logger(__name__)

HTTP_TIMEOUT_SECONDS = 10
BATCH_PATH = "/batch"


class DeliveryStatus(str, Enum):
    SUCCESS = "success"
    REJECTED = "rejected"
    UNREACHABLE = "unreachable"


class DeliveryOutcome(BaseModel):
    """
    Result of one delivery attempt.

    Attributes:
        status: success, rejected (non-2xx response) or unreachable
            (transport failure)
        status_code: HTTP status of the response, if one was received
        error: Transport error description for unreachable outcomes
    """

    status: DeliveryStatus = Field(..., description="Delivery outcome")
    status_code: Optional[int] = Field(default=None, description="HTTP status code")
    error: Optional[str] = Field(default=None, description="Transport error")

    @property
    def succeeded(self) -> bool:
        return self.status is DeliveryStatus.SUCCESS

    @classmethod
    def success(cls, status_code: int) -> "DeliveryOutcome":
        return cls(status=DeliveryStatus.SUCCESS, status_code=status_code)

    @classmethod
    def rejected(cls, status_code: int) -> "DeliveryOutcome":
        return cls(status=DeliveryStatus.REJECTED, status_code=status_code)

    @classmethod
    def unreachable(cls, error: str) -> "DeliveryOutcome":
        return cls(status=DeliveryStatus.UNREACHABLE, error=error)


def build_batch_body(
    events: Sequence[Union[TelemetryEvent, Mapping[str, Any]]],
    api_key: str
) -> Dict[str, Any]:
    """
    Build the JSON document posted to {host}/batch.

    Args:
        events: Events to include, in order
        api_key: Ingestion API key

    Returns:
        {"api_key": ..., "batch": [event, ...]}
    """
    batch: List[Dict[str, Any]] = []
    for event in events:
        if not isinstance(event, TelemetryEvent):
            event = TelemetryEvent.model_validate(event)
        batch.append(event.model_dump(mode='json'))
    return {'api_key': api_key, 'batch': batch}


class RelayClient:
    """
    HTTP client for pushing event batches to the ingestion host.

    Handles delivery attempts with a fixed timeout and classifies every
    result as success, rejected or unreachable.
    """

    def __init__(self, host: str, timeout_seconds: float = HTTP_TIMEOUT_SECONDS):
        """
        Initialize relay client.

        Args:
            host: Base URL of the ingestion host
            timeout_seconds: HTTP timeout in seconds

        Raises:
            ValueError: If host is invalid
        """
        if not host or not isinstance(host, str):
            raise ValueError("host must be a non-empty string")
        if not host.startswith(('http://', 'https://')):
            raise ValueError("host must be a valid HTTP/HTTPS URL")

        self.host = host.rstrip('/')
        self.endpoint = f"{self.host}{BATCH_PATH}"
        self.timeout = httpx.Timeout(timeout_seconds, connect=timeout_seconds)

        logger.info(
            "Relay client initialized",
            endpoint=self.endpoint,
            timeout_seconds=timeout_seconds
        )

    async def deliver(
        self,
        events: Sequence[Union[TelemetryEvent, Mapping[str, Any]]],
        api_key: str
    ) -> DeliveryOutcome:
        """
        Deliver a batch via HTTP POST.

        Args:
            events: Events to deliver
            api_key: Ingestion API key

        Returns:
            DeliveryOutcome; never raises for network or HTTP failures
        """
        try:
            payload = build_batch_body(events, api_key)
        except ValueError as e:
            logger.error("Event batch could not be encoded", error=str(e))
            return DeliveryOutcome.unreachable(f"encode error: {e}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                logger.debug(
                    "Attempting batch delivery",
                    endpoint=self.endpoint,
                    event_count=len(payload['batch'])
                )

                response = await client.post(
                    self.endpoint,
                    json=payload,
                    headers={'Content-Type': 'application/json'}
                )

                if not response.is_success:
                    logger.warning(
                        "Batch rejected by ingestion host",
                        endpoint=self.endpoint,
                        status_code=response.status_code,
                        event_count=len(payload['batch'])
                    )
                    return DeliveryOutcome.rejected(response.status_code)

                logger.info(
                    "Batch delivered successfully",
                    status_code=response.status_code,
                    event_count=len(payload['batch'])
                )
                return DeliveryOutcome.success(response.status_code)

            except httpx.TimeoutException as e:
                logger.warning(
                    "Batch delivery timeout",
                    endpoint=self.endpoint,
                    error=str(e)
                )
                return DeliveryOutcome.unreachable(f"timeout: {e}")

            except httpx.TransportError as e:
                logger.warning(
                    "Batch delivery network error",
                    endpoint=self.endpoint,
                    error=str(e),
                    error_type=type(e).__name__
                )
                return DeliveryOutcome.unreachable(str(e) or type(e).__name__)

            except httpx.HTTPError as e:
                logger.error(
                    "Batch delivery failed",
                    endpoint=self.endpoint,
                    error=str(e),
                    error_type=type(e).__name__
                )
                return DeliveryOutcome.unreachable(str(e) or type(e).__name__)
