"""CPD schemas"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from ...utils.date_utils import to_naive_utc
from ...utils.sanitization import clean_text

CPD_TEXT_FIELDS = (
    "cpd_type",
    "learning_method",
    "provider_organization",
    "description",
    "key_learnings",
    "application_to_practice",
    "document_type",
    "supporting_document",
)


class CPDFields(BaseModel):
    @field_validator("title", check_fields=False)
    @classmethod
    def validate_title(cls, v):
        return clean_text(v, max_length=255)

    @field_validator("activity_date", check_fields=False)
    @classmethod
    def validate_activity_date(cls, v):
        return to_naive_utc(v)

    @field_validator(*CPD_TEXT_FIELDS, check_fields=False)
    @classmethod
    def validate_text(cls, v):
        return clean_text(v)

    @field_validator("icf_competencies", check_fields=False)
    @classmethod
    def validate_competencies(cls, v):
        if v is None:
            return v
        return [item.strip() for item in v if item and item.strip()]


class CPDCreate(CPDFields):
    title: str
    activity_date: datetime
    # Localized strings such as "1,5" are parsed with the profile's country
    hours: Union[float, str]
    cpd_type: Optional[str] = None
    learning_method: Optional[str] = None
    provider_organization: Optional[str] = None
    description: Optional[str] = None
    key_learnings: Optional[str] = None
    application_to_practice: Optional[str] = None
    icf_competencies: list[str] = []
    icf_cce_hours: bool = True
    document_type: Optional[str] = "Certificate"
    supporting_document: Optional[str] = None


class CPDUpdate(CPDFields):
    title: Optional[str] = None
    activity_date: Optional[datetime] = None
    hours: Optional[Union[float, str]] = None
    cpd_type: Optional[str] = None
    learning_method: Optional[str] = None
    provider_organization: Optional[str] = None
    description: Optional[str] = None
    key_learnings: Optional[str] = None
    application_to_practice: Optional[str] = None
    icf_competencies: Optional[list[str]] = None
    icf_cce_hours: Optional[bool] = None
    document_type: Optional[str] = None
    supporting_document: Optional[str] = None


class CPDResponse(BaseModel):
    id: int
    title: str
    activity_date: datetime
    hours: float
    cpd_type: Optional[str] = None
    learning_method: Optional[str] = None
    provider_organization: Optional[str] = None
    description: Optional[str] = None
    key_learnings: Optional[str] = None
    application_to_practice: Optional[str] = None
    icf_competencies: Optional[list[str]] = None
    icf_cce_hours: bool = True
    document_type: Optional[str] = None
    supporting_document: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CPDSummary(BaseModel):
    total_hours: float
    icf_cce_hours: float
    entry_count: int
