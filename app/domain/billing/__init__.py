"""Billing domain - plans, usage and Stripe subscriptions"""

from .router import router, stripe_router, webhooks_router

__all__ = ["router", "stripe_router", "webhooks_router"]
