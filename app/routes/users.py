import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import Profile
from ..shared.notification_types import parse_notification_types
from ..shared.validators import (
    validate_country_code,
    validate_currency_code,
    validate_email,
    validate_icf_level,
)
from ..utils.date_utils import get_most_recent_entry_date, to_naive_utc
from ..utils.sanitization import clean_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    icf_level: Optional[str] = None
    currency: Optional[str] = None
    country: Optional[str] = None
    cpd_renewal_date: Optional[datetime] = None
    calendly_url: Optional[str] = None

    @field_validator("name", "calendly_url")
    @classmethod
    def validate_text(cls, v):
        return clean_text(v, max_length=500)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("icf_level")
    @classmethod
    def validate_level(cls, v):
        return validate_icf_level(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return validate_currency_code(v)

    @field_validator("country")
    @classmethod
    def validate_country(cls, v):
        return validate_country_code(v)

    @field_validator("cpd_renewal_date")
    @classmethod
    def validate_renewal_date(cls, v):
        return to_naive_utc(v)


class ProfileResponse(BaseModel):
    id: int
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str
    icf_level: Optional[str] = None
    currency: Optional[str] = None
    country: Optional[str] = None
    cpd_renewal_date: Optional[datetime] = None
    calendly_url: Optional[str] = None
    calendly_connected: bool = False
    subscription_status: Optional[str] = None
    subscription_plan: Optional[str] = None
    subscription_current_period_end: Optional[datetime] = None
    cancel_at_period_end: Optional[bool] = None
    email_notification_types: list[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def profile_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        user_id=profile.user_id,
        email=profile.email,
        name=profile.name,
        role=profile.role or "user",
        icf_level=profile.icf_level,
        currency=profile.currency,
        country=profile.country,
        cpd_renewal_date=profile.cpd_renewal_date,
        calendly_url=profile.calendly_url,
        calendly_connected=bool(profile.calendly_access_token),
        subscription_status=profile.subscription_status,
        subscription_plan=profile.subscription_plan,
        subscription_current_period_end=profile.subscription_current_period_end,
        cancel_at_period_end=profile.cancel_at_period_end,
        email_notification_types=parse_notification_types(profile.email_notification_types),
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )


@router.get("/me", response_model=ProfileResponse)
async def get_me(current_user: Profile = Depends(get_current_user)):
    return profile_response(current_user)


@router.put("/me", response_model=ProfileResponse)
async def update_me(
    data: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updates = data.model_dump(exclude_unset=True)

    new_email = updates.get("email")
    if new_email and new_email != (current_user.email or "").lower():
        taken = (
            db.query(Profile)
            .filter(func.lower(Profile.email) == new_email, Profile.user_id != current_user.user_id)
            .first()
        )
        if taken:
            raise HTTPException(status_code=409, detail="Email already in use by another account")
    if "email" in updates and not updates["email"]:
        updates.pop("email")

    for key, value in updates.items():
        setattr(current_user, key, value)

    db.commit()
    db.refresh(current_user)
    logger.info(f"✅ Profile updated for user {current_user.user_id}: {sorted(updates)}")
    return profile_response(current_user)


@router.get("/me/last-entry-date")
async def get_last_entry_date(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Latest session date, else latest CPD date, else latest mentoring date"""
    latest = get_most_recent_entry_date(db, current_user.user_id)
    return {"last_entry_date": latest.isoformat() if latest else None}
