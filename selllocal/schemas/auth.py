"""Auth and profile request schemas."""
from typing import List, Optional, Union

from pydantic import EmailStr, Field, field_validator, model_validator

from selllocal.models import THEMES
from selllocal.schemas import RequestModel


class AddressInput(RequestModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None


class SellerRegistration(RequestModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    business_name: str = Field(min_length=1)
    theme: Optional[str] = None
    business_description: Optional[str] = Field(None, max_length=500)
    address: Optional[AddressInput] = None

    @field_validator('theme')
    @classmethod
    def theme_is_known(cls, value):
        if value is not None and value not in THEMES:
            raise ValueError(f"Theme must be one of: {', '.join(THEMES)}")
        return value

    @model_validator(mode='after')
    def address_is_complete(self):
        address = self.address
        if not address or not all([address.street, address.city, address.state, address.pincode]):
            raise ValueError('Complete address is required (street, city, state, pincode)')
        return self


class BuyerRegistration(RequestModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    seller_alias: Optional[str] = None

    @model_validator(mode='after')
    def alias_present(self):
        if not self.seller_alias:
            raise ValueError('Seller alias is required')
        return self


class LoginInput(RequestModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ProfileUpdate(RequestModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    business_description: Optional[str] = Field(None, max_length=500)
    address: Optional[AddressInput] = None
    theme: Optional[str] = None
    seo_meta_title: Optional[str] = Field(None, max_length=60)
    seo_meta_description: Optional[str] = Field(None, max_length=160)
    seo_keywords: Optional[Union[List[str], str]] = None
    seo_local_area: Optional[str] = None
    instagram_handle: Optional[str] = None
    facebook_handle: Optional[str] = None

    @field_validator('theme')
    @classmethod
    def theme_is_known(cls, value):
        if value is not None and value not in THEMES:
            raise ValueError(f"Theme must be one of: {', '.join(THEMES)}")
        return value

    @field_validator('seo_keywords')
    @classmethod
    def split_keywords(cls, value):
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(',')
        return [keyword.strip() for keyword in value if keyword and keyword.strip()]
