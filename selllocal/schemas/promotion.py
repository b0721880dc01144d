"""Promotion request schemas."""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from selllocal.models import DiscountType
from selllocal.schemas import RequestModel
from selllocal.utils.dates import parse_iso_datetime


def check_promotion_values(discount_type, discount_value, start_date, end_date):
    if discount_type == DiscountType.PERCENTAGE and discount_value is not None and discount_value > 100:
        raise ValueError('Percentage discount cannot exceed 100%')
    if start_date and end_date and end_date <= start_date:
        raise ValueError('End date must be after start date')


class PromotionInput(RequestModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    discount_type: str
    discount_value: Decimal = Field(ge=0)
    start_date: datetime
    end_date: datetime
    apply_to_all: bool = False
    products: List[int] = Field(default_factory=list)
    code: Optional[str] = None

    @field_validator('discount_type')
    @classmethod
    def discount_type_is_known(cls, value):
        if value not in DiscountType.ALL:
            raise ValueError('Discount type must be percentage or absolute')
        return value

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def parse_dates(cls, value):
        try:
            return parse_iso_datetime(value)
        except (TypeError, ValueError):
            raise ValueError('Dates must be valid ISO 8601 values')

    @model_validator(mode='after')
    def check_values(self):
        check_promotion_values(self.discount_type, self.discount_value, self.start_date, self.end_date)
        return self


class PromotionUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    discount_type: Optional[str] = None
    discount_value: Optional[Decimal] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    apply_to_all: Optional[bool] = None
    products: Optional[List[int]] = None
    code: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('discount_type')
    @classmethod
    def discount_type_is_known(cls, value):
        if value is not None and value not in DiscountType.ALL:
            raise ValueError('Discount type must be percentage or absolute')
        return value

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def parse_dates(cls, value):
        try:
            return parse_iso_datetime(value)
        except (TypeError, ValueError):
            raise ValueError('Dates must be valid ISO 8601 values')
