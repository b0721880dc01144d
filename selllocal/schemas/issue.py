"""Issue report schemas."""
from typing import Any, Dict, Optional

from pydantic import Field, field_validator, model_validator

from selllocal.models import ISSUE_STATUSES, ISSUE_TYPES
from selllocal.schemas import RequestModel


class IssueReportInput(RequestModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    page_url: Optional[str] = None
    screenshot: Optional[str] = None
    browser_info: Dict[str, Any] = Field(default_factory=dict)
    issue_type: str = 'bug'

    @field_validator('issue_type')
    @classmethod
    def issue_type_is_known(cls, value):
        if value not in ISSUE_TYPES:
            raise ValueError(f"Issue type must be one of: {', '.join(ISSUE_TYPES)}")
        return value

    @field_validator('browser_info', mode='before')
    @classmethod
    def default_browser_info(cls, value):
        return value or {}

    @model_validator(mode='after')
    def required_fields_present(self):
        if not all([self.title, self.description, self.page_url, self.screenshot]):
            raise ValueError('Missing required fields: title, description, pageUrl, screenshot')
        return self


class IssueStatusUpdate(RequestModel):
    status: Optional[str] = None
    admin_notes: Optional[str] = None

    @model_validator(mode='after')
    def status_is_known(self):
        if self.status not in ISSUE_STATUSES:
            raise ValueError('Invalid status')
        return self
