"""Admin request schemas."""
from typing import Any, ClassVar, Optional

from pydantic import model_validator

from selllocal.schemas import RequestModel


class ExtendValidityInput(RequestModel):
    months: Optional[Any] = None

    @model_validator(mode='after')
    def months_is_positive(self):
        months = self.months
        if isinstance(months, bool) or not isinstance(months, (int, str)):
            raise ValueError('Please provide valid number of months (minimum 1)')
        try:
            months = int(months)
        except ValueError:
            raise ValueError('Please provide valid number of months (minimum 1)')
        if months < 1:
            raise ValueError('Please provide valid number of months (minimum 1)')
        self.months = months
        return self


class ToggleInput(RequestModel):
    """Global broadcast switch. Only a JSON boolean is accepted."""
    missing_message: ClassVar[str] = 'enabled field is required'

    enabled: Optional[Any] = None

    @model_validator(mode='after')
    def enabled_is_boolean(self):
        if self.enabled is None:
            raise ValueError(self.missing_message)
        if not isinstance(self.enabled, bool):
            raise ValueError('enabled must be a boolean')
        return self


class SellerToggleInput(ToggleInput):
    missing_message: ClassVar[str] = 'enabled must be a boolean'
