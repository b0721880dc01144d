"""Availability request schema."""
from typing import Optional

from pydantic import model_validator

from selllocal.schemas import RequestModel


class AvailabilityRequestInput(RequestModel):
    product_id: Optional[int] = None
    seller_alias: Optional[str] = None

    @model_validator(mode='after')
    def ids_present(self):
        if not self.product_id or not self.seller_alias:
            raise ValueError('Product ID and seller alias are required')
        return self
