"""Billing domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel


class CheckoutRequest(BaseModel):
    lookup_key: Optional[str] = None


class PortalRequest(BaseModel):
    customer_id: Optional[str] = None
    session_id: Optional[str] = None


class RedirectResponse(BaseModel):
    url: str


class PlanResponse(BaseModel):
    id: str
    name: str
    lookup_key: str
    price: int
    currency: str
    interval: str
    features: list[str]


class UsageProgress(BaseModel):
    percentage: float
    color: str
    message: str
    show_progress: bool


class UsageResponse(BaseModel):
    used: int
    limit: int
    remaining: int
    is_subscribed: bool
    has_reached_limit: bool
    subscription_plan: str
    subscription_status: Optional[str] = None
    progress: UsageProgress
    features: dict[str, bool] = {}
