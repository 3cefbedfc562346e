"""Stripe payment flow for certificate orders.

- Payment intent creation at a flat, server-side price
- Webhook signature verification
- Dispatch of verified events (paid orders go to fulfillment)

The Stripe SDK is synchronous, so API calls run in a worker thread.
"""

import asyncio
from typing import Any

import stripe

from core.config import get_settings
from core.logger import get_logger
from core.wide_event import set_wide_event_nested
from schemas import FulfillmentPayload, PaymentIntentRequest
from services.fulfillment_service import forward_order

logger = get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"


class PaymentsNotConfiguredError(Exception):
    """Raised when Stripe keys are missing."""


def build_order_metadata(order: PaymentIntentRequest) -> dict[str, str]:
    """Order fields stored on the payment intent (Stripe metadata is str-only)."""
    return {
        "firstName": order.first_name,
        "lastName": order.last_name,
        "certificationDate": order.certification_date,
        "degreeLevel": order.degree_level,
        "faculty": order.faculty,
        "achievement": order.achievement,
        "buyerEmail": order.buyer_email or "",
        "recipientEmail": order.recipient_email or "",
        "style": order.style,
    }


async def create_payment_intent(order: PaymentIntentRequest) -> str:
    """Create a card payment intent for one certificate.

    Returns:
        The intent's client secret for Stripe.js

    Raises:
        PaymentsNotConfiguredError: STRIPE_SECRET_KEY is not set
        stripe.StripeError: The Stripe API rejected the request
    """
    settings = get_settings()
    if not settings.stripe_secret_key:
        raise PaymentsNotConfiguredError("Stripe secret key not configured")

    params: dict[str, Any] = {
        "amount": settings.certificate_price_cents,
        "currency": settings.certificate_currency,
        "payment_method_types": ["card"],
        "metadata": build_order_metadata(order),
        "api_key": settings.stripe_secret_key,
    }
    if order.buyer_email:
        params["receipt_email"] = order.buyer_email

    intent = await asyncio.to_thread(stripe.PaymentIntent.create, **params)

    set_wide_event_nested(
        "payment",
        intent_id=intent["id"],
        amount_cents=settings.certificate_price_cents,
        style=order.style,
    )
    logger.info(
        "payment_intent.created",
        payment_intent_id=intent["id"],
        style=order.style,
    )
    return intent["client_secret"]


def construct_event(payload: bytes, signature: str) -> dict[str, Any]:
    """Verify a webhook payload against its Stripe-Signature header.

    Returns the event as plain nested dicts; ``StripeObject`` is not a
    mapping in current SDK releases.

    Raises:
        PaymentsNotConfiguredError: STRIPE_WEBHOOK_SECRET is not set
        ValueError: The payload is not valid JSON
        stripe.SignatureVerificationError: The signature does not match
    """
    secret = get_settings().stripe_webhook_secret
    if not secret:
        raise PaymentsNotConfiguredError("Stripe webhook secret not configured")
    event = stripe.Webhook.construct_event(payload, signature, secret)
    return event.to_dict()


def _charge_billing_email(intent: dict[str, Any]) -> str | None:
    charges = intent.get("charges") or {}
    data = charges.get("data") or []
    if not data:
        return None
    billing = data[0].get("billing_details") or {}
    return billing.get("email")


def resolve_buyer_email(intent: dict[str, Any]) -> str | None:
    """Buyer email from metadata, then receipt email, then the card's billing email."""
    metadata = intent.get("metadata") or {}
    return (
        metadata.get("buyerEmail")
        or intent.get("receipt_email")
        or _charge_billing_email(intent)
    )


def build_fulfillment_payload(intent: dict[str, Any]) -> FulfillmentPayload:
    """Flatten a succeeded payment intent into the fulfillment order record."""
    metadata = intent.get("metadata") or {}
    buyer_email = resolve_buyer_email(intent)

    return FulfillmentPayload(
        email=buyer_email,
        buyer_email=buyer_email,
        recipient_email=metadata.get("recipientEmail") or "",
        first_name=metadata.get("firstName"),
        last_name=metadata.get("lastName"),
        certification_date=metadata.get("certificationDate"),
        degree_level=metadata.get("degreeLevel"),
        faculty=metadata.get("faculty"),
        achievement=metadata.get("achievement"),
        style=metadata.get("style"),
        payment_intent_id=intent["id"],
        amount_paid=intent["amount"] / 100,
    )


async def handle_stripe_event(event: dict[str, Any]) -> str:
    """Dispatch a verified Stripe event.

    Returns:
        "forwarded" / "not_forwarded" for paid orders, "ignored" otherwise.
    """
    event_type = event["type"]
    set_wide_event_nested("webhook", event_type=event_type, event_id=event.get("id"))

    if event_type != PAYMENT_SUCCEEDED:
        logger.debug("webhook.event.ignored", event_type=event_type)
        return "ignored"

    intent = event["data"]["object"]
    payload = build_fulfillment_payload(intent)

    logger.info(
        "payment.succeeded",
        payment_intent_id=payload.payment_intent_id,
        amount_paid=payload.amount_paid,
        style=payload.style,
        has_recipient_email=bool(payload.recipient_email),
    )

    forwarded = await forward_order(payload)
    return "forwarded" if forwarded else "not_forwarded"
