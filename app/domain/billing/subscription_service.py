"""Subscription service - Plans, usage, checkout and Stripe subscription events"""

import logging
from datetime import datetime
from typing import Optional

import stripe
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import invalidate_admin_stats
from ...config import APP_URL
from ...models import Profile
from ...plan_limits import get_feature_access, get_usage_progress, get_usage_stats
from .repository import BillingRepository
from .schemas import CheckoutRequest, PortalRequest
from .stripe_service import stripe_service

logger = logging.getLogger(__name__)

PLANS = [
    {
        "id": "starter",
        "name": "Starter",
        "lookup_key": "starter_monthly",
        "price": 20,
        "currency": "USD",
        "interval": "month",
        "features": ["Unlimited session and CPD entries", "CSV and Excel exports", "Email reminders"],
    },
    {
        "id": "pro",
        "name": "Pro",
        "lookup_key": "pro_monthly",
        "price": 50,
        "currency": "USD",
        "interval": "month",
        "features": [
            "Everything in Starter",
            "ICF coaching log export",
            "Calendly integration",
            "Push notifications",
        ],
    },
]

LOGGED_ONLY_EVENTS = (
    "customer.subscription.trial_will_end",
    "invoice.payment_succeeded",
    "invoice.payment_failed",
)


def from_unix(timestamp: Optional[int]) -> Optional[datetime]:
    return datetime.utcfromtimestamp(timestamp) if timestamp else None


def subscription_period(subscription: dict) -> tuple[Optional[datetime], Optional[datetime]]:
    """Billing period of a subscription payload; newer API versions report it per item"""
    start = subscription.get("current_period_start")
    end = subscription.get("current_period_end")
    if start is None or end is None:
        items = (subscription.get("items") or {}).get("data") or []
        if items:
            start = start or items[0].get("current_period_start")
            end = end or items[0].get("current_period_end")
    return from_unix(start), from_unix(end)


class SubscriptionService:
    """Service for subscription management"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BillingRepository()

    def get_plans(self) -> list[dict]:
        return PLANS

    def get_usage(self, user: Profile) -> dict:
        usage = get_usage_stats(user, self.db)
        usage["progress"] = get_usage_progress(usage)
        usage["features"] = get_feature_access(user)
        return usage

    # ===================================
    # CHECKOUT AND PORTAL
    # ===================================

    def _require_stripe(self) -> None:
        if not stripe_service.is_available():
            raise HTTPException(status_code=503, detail="Payment service not configured")

    async def create_checkout_session(self, body: CheckoutRequest, user: Optional[Profile]) -> dict:
        if not body.lookup_key:
            raise HTTPException(status_code=400, detail="lookup_key is required")
        self._require_stripe()

        try:
            price = await stripe_service.find_price(body.lookup_key)
            if not price:
                raise HTTPException(status_code=404, detail="Price not found")

            session = await stripe_service.create_checkout_session(
                price_id=price.id,
                lookup_key=body.lookup_key,
                success_url=f"{APP_URL}/dashboard/subscription/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{APP_URL}/dashboard/subscription/canceled",
                customer_email=user.email if user else None,
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe checkout failed for {body.lookup_key}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create checkout session") from e

        return {"url": session.url}

    async def create_portal_session(self, body: PortalRequest) -> dict:
        if not body.customer_id and not body.session_id:
            raise HTTPException(status_code=400, detail="customer_id or session_id is required")
        self._require_stripe()

        try:
            customer_id = body.customer_id
            if not customer_id:
                customer_id = await stripe_service.get_checkout_customer(body.session_id)
            if not customer_id:
                raise HTTPException(status_code=400, detail="No customer found for this checkout session")

            portal = await stripe_service.create_portal_session(customer_id, f"{APP_URL}/dashboard")
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe portal session failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to create portal session") from e

        return {"url": portal.url}

    # ===================================
    # WEBHOOK EVENTS
    # ===================================

    async def handle_event(self, event: dict) -> None:
        event_type = event.get("type")
        subscription = (event.get("data") or {}).get("object") or {}

        if event_type == "customer.subscription.created":
            await self._on_subscription_created(subscription)
        elif event_type == "customer.subscription.updated":
            self._on_subscription_updated(subscription)
        elif event_type == "customer.subscription.deleted":
            self._on_subscription_deleted(subscription)
        elif event_type in LOGGED_ONLY_EVENTS:
            logger.info(f"🔔 Stripe {event_type} for customer {subscription.get('customer')}")
        else:
            logger.info(f"Event {event_type} received and ignored (no handler)")

    async def _on_subscription_created(self, subscription: dict) -> None:
        customer_id = subscription.get("customer")
        customer = await stripe_service.get_customer(customer_id)
        if getattr(customer, "deleted", False):
            logger.warning(f"⚠️ Customer {customer_id} was deleted; ignoring subscription")
            return

        email = getattr(customer, "email", None)
        profile = self.repo.get_profile_by_email(self.db, email) if email else None
        if not profile:
            logger.warning(f"⚠️ No profile for Stripe customer {customer_id} ({email})")
            return

        start, end = subscription_period(subscription)
        self.repo.update_subscription(
            self.db,
            profile,
            stripe_customer_id=customer_id,
            subscription_id=subscription.get("id"),
            subscription_status=subscription.get("status"),
            subscription_plan=(subscription.get("metadata") or {}).get("lookup_key") or "unknown",
            subscription_current_period_start=start,
            subscription_current_period_end=end,
        )
        invalidate_admin_stats()
        logger.info(f"✅ Subscription {subscription.get('id')} created for user {profile.user_id}")

    def _on_subscription_updated(self, subscription: dict) -> None:
        profile = self.repo.get_profile_by_customer_id(self.db, subscription.get("customer"))
        if not profile:
            logger.warning(f"⚠️ No profile for Stripe customer {subscription.get('customer')}")
            return

        start, end = subscription_period(subscription)
        self.repo.update_subscription(
            self.db,
            profile,
            subscription_status=subscription.get("status"),
            subscription_current_period_start=start,
            subscription_current_period_end=end,
            cancel_at_period_end=bool(subscription.get("cancel_at_period_end")),
        )
        invalidate_admin_stats()
        logger.info(f"🔄 Subscription updated for user {profile.user_id}: {subscription.get('status')}")

    def _on_subscription_deleted(self, subscription: dict) -> None:
        profile = self.repo.get_profile_by_customer_id(self.db, subscription.get("customer"))
        if not profile:
            logger.warning(f"⚠️ No profile for Stripe customer {subscription.get('customer')}")
            return

        # Plan drops back to free so the entry limit applies again
        self.repo.update_subscription(
            self.db,
            profile,
            subscription_status="canceled",
            subscription_id=None,
            subscription_plan="free",
        )
        invalidate_admin_stats()
        logger.info(f"🛑 Subscription canceled for user {profile.user_id}")
