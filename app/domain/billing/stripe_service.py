"""Stripe service - Checkout, customer portal and lookups against the Stripe API"""

import asyncio
import logging
from typing import Optional

import stripe

from ...config import STRIPE_SECRET_KEY

logger = logging.getLogger(__name__)


class StripeService:
    """Service for Stripe API operations"""

    def __init__(self, api_key: Optional[str] = STRIPE_SECRET_KEY):
        self.api_key = api_key
        if not self.api_key:
            logger.warning("STRIPE_SECRET_KEY not set; billing endpoints will fail until configured")
        else:
            stripe.api_key = self.api_key
            logger.info("Stripe client configured")

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def find_price(self, lookup_key: str) -> Optional[stripe.Price]:
        prices = await asyncio.to_thread(
            stripe.Price.list, lookup_keys=[lookup_key], expand=["data.product"]
        )
        return prices.data[0] if prices.data else None

    async def create_checkout_session(
        self,
        price_id: str,
        lookup_key: str,
        success_url: str,
        cancel_url: str,
        customer_email: Optional[str] = None,
    ) -> stripe.checkout.Session:
        params = {
            "mode": "subscription",
            "billing_address_collection": "auto",
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": {"lookup_key": lookup_key},
            # Copied onto the subscription so subscription webhooks know the plan
            "subscription_data": {"metadata": {"lookup_key": lookup_key}},
        }
        if customer_email:
            params["customer_email"] = customer_email

        session = await asyncio.to_thread(stripe.checkout.Session.create, **params)
        logger.info(f"✅ Stripe checkout session created: {session.id} ({lookup_key})")
        return session

    async def get_checkout_customer(self, session_id: str) -> Optional[str]:
        session = await asyncio.to_thread(stripe.checkout.Session.retrieve, session_id)
        return session.customer

    async def create_portal_session(self, customer_id: str, return_url: str) -> stripe.billing_portal.Session:
        return await asyncio.to_thread(
            stripe.billing_portal.Session.create, customer=customer_id, return_url=return_url
        )

    async def get_customer(self, customer_id: str):
        return await asyncio.to_thread(stripe.Customer.retrieve, customer_id)


stripe_service = StripeService()
