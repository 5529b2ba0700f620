"""Billing repository - Profile lookups and subscription writes"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Profile


class BillingRepository:
    @staticmethod
    def get_profile_by_email(db: Session, email: str) -> Optional[Profile]:
        return db.query(Profile).filter(func.lower(Profile.email) == email.lower()).first()

    @staticmethod
    def get_profile_by_customer_id(db: Session, customer_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.stripe_customer_id == customer_id).first()

    @staticmethod
    def update_subscription(db: Session, profile: Profile, **fields) -> Profile:
        """Write subscription columns; keys passed explicitly as None are cleared"""
        for key, value in fields.items():
            setattr(profile, key, value)
        profile.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(profile)
        return profile
