"""
Stripe collaborator: checkout session creation for upgrades and webhook event parsing.
"""
import json
import logging
from typing import Optional

import stripe

from app.core.errors import ConfigurationError, InvalidInput, UpstreamError

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
PAYMENT_SUCCEEDED = "invoice.payment_succeeded"
SUBSCRIPTION_DELETED = "customer.subscription.deleted"


class StripePayments:
    def __init__(
        self,
        secret_key: str,
        price_id: str,
        webhook_secret: str = "",
        frontend_url: str = "http://localhost:8788",
    ):
        self.secret_key = (secret_key or "").strip()
        self.price_id = (price_id or "").strip()
        self.webhook_secret = (webhook_secret or "").strip()
        self.frontend_url = frontend_url.rstrip("/")

    def create_checkout_url(self, email: str) -> str:
        """
        Create a subscription-mode Checkout Session for `email` and return its URL.
        The account tier is not touched here; it flips when the webhook confirms payment.
        """
        if not self.secret_key or not self.price_id:
            raise ConfigurationError(
                "STRIPE_SECRET_KEY or STRIPE_PRICE_ID not set",
                message="Payment configuration missing",
            )

        try:
            session = stripe.checkout.Session.create(
                api_key=self.secret_key,
                payment_method_types=["card"],
                mode="subscription",
                line_items=[{"price": self.price_id, "quantity": 1}],
                customer_email=email,
                success_url=f"{self.frontend_url}/?success=true",
                cancel_url=f"{self.frontend_url}/?cancelled=true",
                metadata={"user_email": email},
            )
        except stripe.StripeError as e:
            logger.error("Stripe error creating checkout session for %s: %s", email, e)
            raise UpstreamError(str(e), message="Upgrade failed: payment session creation failed") from e

        logger.info("Created Stripe Checkout Session %s for %s", session.id, email)
        return session.url

    def parse_event(self, payload: bytes, signature: Optional[str]) -> dict:
        """
        Parse a webhook body into an event dict. The signature is verified when a
        webhook secret is configured.

        Raises:
            InvalidInput: unparseable payload or bad signature
        """
        if self.webhook_secret:
            try:
                event = stripe.Webhook.construct_event(payload, signature or "", self.webhook_secret)
            except ValueError as e:
                raise InvalidInput("Invalid webhook payload") from e
            except stripe.SignatureVerificationError as e:
                raise InvalidInput("Invalid webhook signature") from e
            return event.to_dict() if hasattr(event, "to_dict") else dict(event)

        try:
            event = json.loads(payload)
        except (ValueError, UnicodeDecodeError) as e:
            raise InvalidInput("Invalid webhook payload") from e
        if not isinstance(event, dict):
            raise InvalidInput("Invalid webhook payload")
        return event
