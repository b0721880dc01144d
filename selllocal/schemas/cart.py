"""Cart request schemas."""
from typing import Optional

from pydantic import Field

from selllocal.schemas import RequestModel


class CartItemInput(RequestModel):
    product_id: int
    quantity: int = Field(ge=1)
    seller_alias: str = Field(min_length=1)


class CheckoutInput(RequestModel):
    notes: Optional[str] = Field(None, max_length=1000)
