"""Consumed records and the domain event envelope carried inside them."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class EventDecodeError(Exception):
    """Raised when a record value is not a valid event envelope."""

    pass


@dataclass(frozen=True)
class ConsumedRecord:
    """One record delivered by the stream consumer.

    Attributes:
        topic: Topic the record was read from
        partition: Partition number within the topic
        offset: Position of the record within its partition
        key: Record key, if the producer set one
        value: Record payload; None for tombstones
        headers: Record headers (values may be None)
        timestamp: Broker timestamp, when available
    """

    topic: str
    partition: int
    offset: int
    key: Optional[Union[bytes, str]] = None
    value: Optional[Union[bytes, str]] = None
    headers: Mapping[str, Optional[str]] = field(default_factory=dict)
    timestamp: Optional[datetime] = None

    @property
    def key_text(self) -> Optional[str]:
        if isinstance(self.key, bytes):
            return self.key.decode("utf-8", errors="replace")
        return self.key


class OrderEventData(BaseModel):
    """Fields of an order event the notification path reads.

    Unknown fields are ignored; numeric fields tolerate being absent.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., alias="_id")
    customer_name: Optional[str] = Field(None, alias="customerName")
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    customer_phone: Optional[str] = Field(None, alias="customerPhone")
    device_token: Optional[str] = Field(None, alias="deviceToken")
    preferred_channel: Optional[str] = Field(None, alias="preferredChannel")
    status: Optional[str] = None
    total: Optional[float] = None
    final_total: Optional[float] = Field(None, alias="finalTotal")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        if isinstance(v, (int, str)) and not isinstance(v, bool) and str(v).strip():
            return str(v)
        raise ValueError("_id must be a non-empty string")

    @property
    def has_contact(self) -> bool:
        return bool(self.customer_email or self.customer_phone)


class DomainEvent(BaseModel):
    """Decoded event envelope: ``{"event": <name>, "data": {...}}``."""

    model_config = ConfigDict(extra="ignore")

    event: str = Field(..., min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.event

    def order_data(self) -> OrderEventData:
        """Parse ``data`` as an order payload.

        Raises:
            EventDecodeError: If ``data`` lacks a usable ``_id``
        """
        try:
            return OrderEventData.model_validate(self.data)
        except ValidationError as e:
            raise EventDecodeError(f"Invalid order data: {_summarize(e)}") from e


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(loc) for loc in error["loc"]) or "<root>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def decode_event(value: Union[bytes, str]) -> DomainEvent:
    """Decode a record value into a DomainEvent.

    Raises:
        EventDecodeError: If the value is not UTF-8 JSON or not an envelope
    """
    try:
        text = value.decode("utf-8") if isinstance(value, bytes) else value
        raw = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise EventDecodeError(f"Record value is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise EventDecodeError(f"Event envelope must be a JSON object, got {type(raw).__name__}")

    try:
        return DomainEvent.model_validate(raw)
    except ValidationError as e:
        raise EventDecodeError(f"Invalid event envelope: {_summarize(e)}") from e
