"""Product request schemas."""
import json
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from selllocal.models import UNITS
from selllocal.schemas import RequestModel

MAX_IMAGES = 10


class PriceTierInput(RequestModel):
    min_quantity: int = Field(ge=1)
    max_quantity: Optional[int] = None
    price: Decimal = Field(ge=0)

    @model_validator(mode='after')
    def max_not_below_min(self):
        if self.max_quantity is not None and self.max_quantity < self.min_quantity:
            raise ValueError('Tier maxQuantity must be greater than or equal to minQuantity')
        return self

    def as_tier(self):
        return {
            'min_quantity': self.min_quantity,
            'max_quantity': self.max_quantity,
            'price': self.price,
        }


class ProductInput(RequestModel):
    """Create form. Update uses ProductUpdate, where every field is optional."""
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=100)
    base_price: Decimal = Field(gt=0)
    price_tiers: List[PriceTierInput] = Field(default_factory=list)
    minimum_order_quantity: int = Field(1, ge=1)
    stock: int = Field(0, ge=0)
    unit: str = 'piece'
    tags: List[str] = Field(default_factory=list)
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    video_link: Optional[str] = None

    @field_validator('unit')
    @classmethod
    def unit_is_known(cls, value):
        if value not in UNITS:
            raise ValueError(f"Unit must be one of: {', '.join(UNITS)}")
        return value

    @field_validator('tags', mode='before')
    @classmethod
    def split_tags(cls, value):
        return _split_csv(value)


class ProductUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    base_price: Optional[Decimal] = Field(None, gt=0)
    price_tiers: Optional[List[PriceTierInput]] = None
    minimum_order_quantity: Optional[int] = Field(None, ge=1)
    stock: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = None
    tags: Optional[List[str]] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    video_link: Optional[str] = None
    is_active: Optional[bool] = None
    remove_images: List[str] = Field(default_factory=list)

    @field_validator('unit')
    @classmethod
    def unit_is_known(cls, value):
        if value is not None and value not in UNITS:
            raise ValueError(f"Unit must be one of: {', '.join(UNITS)}")
        return value

    @field_validator('tags', mode='before')
    @classmethod
    def split_tags(cls, value):
        if value is None:
            return None
        return _split_csv(value)


def _split_csv(value):
    if value is None or value == '':
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [str(item).strip() for item in value if str(item).strip()]


_JSON_FIELDS = ('priceTiers', 'removeImages', 'tags')


def form_to_dict(form):
    """
    Flatten a multipart form into a dict the product schemas accept.

    priceTiers and removeImages arrive as JSON strings. Empty strings are
    dropped so optional fields keep their defaults.
    """
    data = {}
    for key in form.keys():
        value = form.get(key)
        if value is None or value == '':
            continue
        if key in _JSON_FIELDS and isinstance(value, str) and value.strip().startswith('['):
            try:
                value = json.loads(value)
            except ValueError:
                pass
        data[key] = value
    return data
