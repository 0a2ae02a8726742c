"""
Module: event.py
Description: Event data models for the event relay.

Defines the analytics event accepted from the host application and the
row model of the offline queue.

Key Components:
- TelemetryEvent: one analytics event as sent on the wire
- QueuedEvent: one pending row of the offline queue
- Validation: Pydantic v2 with custom field validators

Dependencies: pydantic, typing
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


class TelemetryEvent(BaseModel):
    """
    Analytics event submitted by the host application.

    The relay treats properties as an opaque JSON object; it never
    inspects them beyond making sure they serialize.

    Attributes:
        event: Event name (e.g., 'item_created')
        properties: Arbitrary event properties (flexible JSON)
        timestamp: Optional client-side ISO 8601 timestamp
    """

    model_config = ConfigDict(validate_assignment=True)

    event: str = Field(
        ...,
        description="Event name, sent exactly as given"
    )
    properties: Dict[str, Any] = Field(
        default_factory=dict,
        description="Event properties"
    )
    timestamp: Optional[str] = Field(
        default=None,
        description="Client timestamp (ISO 8601)"
    )

    @field_validator('properties', mode='before')
    @classmethod
    def validate_properties(cls, v: Any) -> Dict[str, Any]:
        """Validate properties is a dictionary, treating null as empty."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("properties must be a dictionary")
        return v


class QueuedEvent(BaseModel):
    """
    Pending event row of the offline queue.

    Attributes:
        id: Row identifier assigned by the store, never reused
        event_json: Serialized TelemetryEvent, opaque to the queue
        created_at: Insertion time in epoch milliseconds
        retry_count: Number of failed delivery attempts including this row
    """

    id: int = Field(..., ge=1, description="Queue row identifier")
    event_json: str = Field(..., description="Serialized event")
    created_at: int = Field(..., ge=0, description="Insertion time (epoch ms)")
    retry_count: int = Field(default=0, ge=0, description="Failed delivery attempts")

    def to_event(self) -> TelemetryEvent:
        """
        Deserialize the stored event.

        Raises:
            ValueError: If event_json is not a valid serialized event
        """
        return TelemetryEvent.model_validate_json(self.event_json)
