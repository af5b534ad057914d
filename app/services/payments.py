"""
Stripe helpers for paid course checkout and webhook verification.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, Protocol

import stripe

from app.core.config import Settings, get_settings
from app.core.error_codes import ErrorCode
from app.core.errors import ApiError

logger = logging.getLogger(__name__)


class PaymentService(Protocol):
    def create_customer(self, email: str | None) -> str: ...

    def create_checkout_session(
        self,
        *,
        customer_id: str,
        line_items: list[dict[str, Any]],
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> str: ...

    def verify_webhook(self, payload: bytes, signature: str | None) -> dict[str, Any]: ...


class StripePaymentService:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def create_customer(self, email: str | None) -> str:
        try:
            customer = stripe.Customer.create(api_key=self._settings.stripe_api_key, email=email)
        except stripe.StripeError as exc:
            logger.error("Stripe customer creation failed: %s", exc)
            raise ApiError(ErrorCode.PAYMENT_PROVIDER_FAILED) from exc
        return customer.id

    def create_checkout_session(
        self,
        *,
        customer_id: str,
        line_items: list[dict[str, Any]],
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> str:
        try:
            session = stripe.checkout.Session.create(
                api_key=self._settings.stripe_api_key,
                customer=customer_id,
                mode="payment",
                line_items=line_items,
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session creation failed: %s", exc)
            raise ApiError(ErrorCode.PAYMENT_PROVIDER_FAILED) from exc
        if not session.url:
            raise ApiError(ErrorCode.PAYMENT_PROVIDER_FAILED, "Checkout session has no redirect url")
        return session.url

    def verify_webhook(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """Check the Stripe-Signature header and return the decoded event."""
        s = self._settings
        if not signature or not s.stripe_webhook_secret:
            raise ApiError(ErrorCode.WEBHOOK_SIGNATURE_INVALID)
        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(body, signature, s.stripe_webhook_secret, s.stripe_webhook_tolerance)
            event = json.loads(body)
        except (stripe.SignatureVerificationError, UnicodeDecodeError, ValueError) as exc:
            logger.warning("Rejected webhook: %s", exc)
            raise ApiError(ErrorCode.WEBHOOK_SIGNATURE_INVALID, f"Webhook Error: {exc}") from exc
        if not isinstance(event, dict):
            raise ApiError(ErrorCode.WEBHOOK_SIGNATURE_INVALID, "Webhook Error: malformed event")
        return event


@lru_cache(maxsize=1)
def get_payment_service() -> PaymentService:
    return StripePaymentService(get_settings())
