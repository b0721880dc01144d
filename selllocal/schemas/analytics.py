"""Analytics tracking schema."""
from typing import Any, Dict, Optional

from pydantic import Field, field_validator, model_validator

from selllocal.models import EventType
from selllocal.schemas import RequestModel


class TrackEventInput(RequestModel):
    seller_alias: Optional[str] = None
    event_type: Optional[str] = None
    session_id: Optional[str] = None
    buyer_id: Optional[int] = None
    product_id: Optional[int] = None
    page: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    visitor_name: Optional[str] = None
    visitor_phone: Optional[str] = None

    @model_validator(mode='after')
    def alias_and_type_present(self):
        if not self.seller_alias or not self.event_type:
            raise ValueError('Seller alias and event type are required')
        if self.event_type not in EventType.ALL:
            raise ValueError(f'Invalid event type: {self.event_type}')
        return self

    @field_validator('metadata', mode='before')
    @classmethod
    def default_metadata(cls, value):
        return value or {}
