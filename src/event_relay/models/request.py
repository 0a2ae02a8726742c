"""
Module: request.py
Description: Batch payload model accepted from the host application.

Mirrors the payload the host hands to submit_batch: a list of events
and the ingestion API key used to authenticate the batch.

Dependencies: pydantic, typing
"""

from typing import List
from pydantic import BaseModel, Field, field_validator

from event_relay.models.event import TelemetryEvent


class BatchPayload(BaseModel):
    """
    Batch of events submitted in one call.

    Attributes:
        events: Events to deliver
        api_key: Ingestion API key sent with the batch
    """

    events: List[TelemetryEvent] = Field(
        default_factory=list,
        description="Events to deliver"
    )
    api_key: str = Field(
        ...,
        description="Ingestion API key"
    )

    @field_validator('api_key')
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate api_key is a string; emptiness is allowed and means 'no credential'."""
        if not isinstance(v, str):
            raise ValueError("api_key must be a string")
        return v.strip()
