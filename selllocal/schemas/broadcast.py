"""Broadcast and subscription request schemas."""
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from selllocal.models import BROADCAST_TYPES, SUBSCRIPTION_SOURCES
from selllocal.schemas import RequestModel
from selllocal.utils.dates import parse_iso_datetime


def _parse_schedule(value):
    try:
        return parse_iso_datetime(value)
    except (TypeError, ValueError):
        raise ValueError('scheduledAt must be a valid ISO 8601 date')


class BroadcastInput(RequestModel):
    title: Optional[str] = Field(None, max_length=100)
    message: Optional[str] = Field(None, max_length=1000)
    type: str = 'custom'
    product_id: Optional[int] = None
    promotion_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None

    @field_validator('type')
    @classmethod
    def type_is_known(cls, value):
        if value not in BROADCAST_TYPES:
            raise ValueError(f"Type must be one of: {', '.join(BROADCAST_TYPES)}")
        return value

    @field_validator('scheduled_at', mode='before')
    @classmethod
    def parse_schedule(cls, value):
        return _parse_schedule(value)

    @model_validator(mode='after')
    def title_and_message_present(self):
        if not self.title or not self.message:
            raise ValueError('Title and message are required')
        return self


class BroadcastUpdate(RequestModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    message: Optional[str] = Field(None, min_length=1, max_length=1000)
    type: Optional[str] = None
    product_id: Optional[int] = None
    promotion_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None

    @field_validator('type')
    @classmethod
    def type_is_known(cls, value):
        if value is not None and value not in BROADCAST_TYPES:
            raise ValueError(f"Type must be one of: {', '.join(BROADCAST_TYPES)}")
        return value

    @field_validator('scheduled_at', mode='before')
    @classmethod
    def parse_schedule(cls, value):
        return _parse_schedule(value)


class SubscribeInput(RequestModel):
    phone: Optional[str] = None
    name: Optional[str] = None
    seller_id: Optional[int] = None
    source: Optional[str] = None

    @field_validator('source')
    @classmethod
    def source_is_known(cls, value):
        if value is not None and value not in SUBSCRIPTION_SOURCES:
            raise ValueError(f"Source must be one of: {', '.join(SUBSCRIPTION_SOURCES)}")
        return value


class UnsubscribeInput(RequestModel):
    token: Optional[str] = None
    phone: Optional[str] = None
    seller_id: Optional[int] = None
