# fitquest/payments.py
"""
Payment collaborator for physical rewards.

Rewards are paid for in points; the zero-amount PaymentIntent only exists so
the client can confirm the order and shipping details through Stripe.
"""
import logging
from typing import Any, Dict, Optional

import stripe

from .errors import ExternalCollaboratorFailure

logger = logging.getLogger(__name__)


class StripePaymentCollector:
    def __init__(self, api_key: Optional[str], currency: str = "usd"):
        self.api_key = api_key or None
        self.currency = currency

    def create_collection_session(self, metadata: Dict[str, Any]) -> str:
        """Create a $0 PaymentIntent tagged with ``metadata``; return its client secret."""
        # Stripe metadata values must be strings
        clean = {k: str(v) for k, v in metadata.items() if v is not None}
        try:
            intent = stripe.PaymentIntent.create(
                amount=0,
                currency=self.currency,
                metadata=clean,
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            logger.exception(
                "payment intent creation failed user_id=%s reward_id=%s",
                clean.get("userId"), clean.get("rewardId"),
            )
            raise ExternalCollaboratorFailure() from exc

        client_secret = getattr(intent, "client_secret", None)
        if not client_secret:
            raise ExternalCollaboratorFailure("Payment provider returned no client secret")
        return client_secret


def get_payment_collector(app) -> StripePaymentCollector:
    return StripePaymentCollector(
        api_key=app.config.get("STRIPE_SECRET_KEY"),
        currency=app.config.get("PAYMENT_CURRENCY", "usd"),
    )
