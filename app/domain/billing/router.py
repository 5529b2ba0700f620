"""Billing router - plans, usage, Stripe checkout/portal and the Stripe webhook"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_optional_user
from ...cache import cache
from ...config import STRIPE_WEBHOOK_SECRET
from ...database import get_db
from ...models import Profile
from ...rate_limiter import create_rate_limiter
from ...webhook_security import verify_stripe_webhook
from .schemas import CheckoutRequest, PlanResponse, PortalRequest, RedirectResponse, UsageResponse
from .subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])
stripe_router = APIRouter(prefix="/stripe", tags=["Billing"])
webhooks_router = APIRouter(prefix="/webhooks", tags=["Webhooks"])

rate_limit_stripe_webhook = create_rate_limiter(
    limit=100, window_seconds=60, key_prefix="stripe_webhook", use_ip=True
)

EVENT_IDEMPOTENCY_TTL = 86400


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    """Dependency injection for SubscriptionService"""
    return SubscriptionService(db)


# ============================================================================
# PLANS AND USAGE
# ============================================================================


@router.get("/plans", response_model=list[PlanResponse])
async def get_plans(service: SubscriptionService = Depends(get_subscription_service)):
    return service.get_plans()


@router.get("/usage", response_model=UsageResponse)
async def get_usage(
    user: Profile = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Entry usage against the free limit"""
    return service.get_usage(user)


# ============================================================================
# STRIPE CHECKOUT
# ============================================================================


@stripe_router.post("/create-checkout-session", response_model=RedirectResponse)
async def create_checkout_session(
    body: CheckoutRequest,
    user: Optional[Profile] = Depends(get_optional_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.create_checkout_session(body, user)


@stripe_router.post("/create-portal-session", response_model=RedirectResponse)
async def create_portal_session(
    body: PortalRequest,
    service: SubscriptionService = Depends(get_subscription_service),
):
    return await service.create_portal_session(body)


# ============================================================================
# WEBHOOK
# ============================================================================


@webhooks_router.post("/stripe")
async def handle_stripe_webhook(
    request: Request,
    service: SubscriptionService = Depends(get_subscription_service),
    _: None = Depends(rate_limit_stripe_webhook),
):
    """
    Process Stripe subscription lifecycle events.

    The Stripe-Signature header is checked against the raw body with a
    5 minute timestamp tolerance. Events already handled are acknowledged
    without running again.
    """
    raw_body = await verify_stripe_webhook(request, STRIPE_WEBHOOK_SECRET)

    try:
        event = json.loads(raw_body.decode("utf-8"))
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid JSON payload") from e

    event_id = event.get("id")
    idempotency_key = f"stripe_event:{event_id}"
    if event_id and cache.get(idempotency_key):
        logger.info(f"🔄 Stripe event {event_id} already processed, skipping")
        return {"received": True}

    logger.info(f"🔔 Stripe webhook received id={event_id} type={event.get('type')}")

    try:
        await service.handle_event(event)
    except Exception as e:
        logger.error(f"❌ Stripe webhook handler failed for {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Webhook handler failed") from e

    if event_id:
        cache.set(idempotency_key, True, ttl=EVENT_IDEMPOTENCY_TTL)
    return {"received": True}
