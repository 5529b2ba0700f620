"""Admin schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...shared.validators import USER_ROLES


class AdminUserResponse(BaseModel):
    id: int
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str
    icf_level: Optional[str] = None
    country: Optional[str] = None
    subscription_status: Optional[str] = None
    subscription_plan: Optional[str] = None
    created_at: Optional[datetime] = None
    total_sessions: int = 0
    total_cpd_entries: int = 0
    total_coaching_hours: float = 0

    model_config = ConfigDict(from_attributes=True)


class SubscriptionUserResponse(BaseModel):
    id: int
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    subscription_id: Optional[str] = None
    subscription_status: Optional[str] = None
    subscription_plan: Optional[str] = None
    subscription_current_period_start: Optional[datetime] = None
    subscription_current_period_end: Optional[datetime] = None
    cancel_at_period_end: Optional[bool] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RoleUpdateRequest(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v not in USER_ROLES:
            raise ValueError(f"Role must be one of: {', '.join(sorted(USER_ROLES))}")
        return v


class SubscriptionUpdateRequest(BaseModel):
    plan: str

    @field_validator("plan")
    @classmethod
    def validate_plan(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Plan is required")
        return v
