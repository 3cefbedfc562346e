"""Stripe payment endpoints: checkout intent and webhook receiver."""

import stripe
from fastapi import APIRouter, HTTPException, Request

from core import get_logger
from core.config import get_settings
from core.ratelimit import PAYMENT_LIMIT, limiter
from core.wide_event import set_wide_event_fields
from schemas import PaymentIntentRequest, PaymentIntentResponse, WebhookResponse
from services.payments_service import (
    PaymentsNotConfiguredError,
    construct_event,
    create_payment_intent,
    handle_stripe_event,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["payments"])


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentResponse,
    response_model_by_alias=True,
    summary="Start checkout for one certificate",
    responses={
        400: {"description": "Missing order fields or buyer email"},
        500: {"description": "Payment processor error"},
    },
)
@limiter.limit(PAYMENT_LIMIT)
async def create_payment_intent_endpoint(
    request: Request, body: PaymentIntentRequest
) -> PaymentIntentResponse:
    """Create a PaymentIntent and hand its client secret to Stripe.js."""
    if get_settings().require_buyer_email and not body.buyer_email:
        raise HTTPException(status_code=400, detail="Email address is required")

    try:
        client_secret = await create_payment_intent(body)
    except PaymentsNotConfiguredError as e:
        logger.error("payment_intent.not_configured")
        raise HTTPException(status_code=500, detail=str(e))
    except stripe.StripeError as e:
        set_wide_event_fields(
            payment_error=type(e).__name__,
            payment_error_code=getattr(e, "code", None),
        )
        logger.error(
            "payment_intent.failed",
            error=str(e),
            error_type=type(e).__name__,
            http_status=getattr(e, "http_status", None),
        )
        raise HTTPException(
            status_code=500,
            detail=getattr(e, "user_message", None) or str(e) or "Payment failed",
        )

    return PaymentIntentResponse(client_secret=client_secret)


@router.post(
    "/webhook",
    response_model=WebhookResponse,
    summary="Handle Stripe webhooks",
    description=(
        "Verifies the Stripe-Signature header against the raw body. Paid orders "
        "(payment_intent.succeeded) are forwarded to the fulfillment automation; "
        "every verified event is acknowledged with 200."
    ),
    responses={
        400: {"description": "Missing or invalid signature"},
        500: {"description": "Webhook signing secret not configured"},
    },
)
async def stripe_webhook(request: Request) -> WebhookResponse:
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    if not signature:
        raise HTTPException(
            status_code=400,
            detail="Webhook Error: Missing Stripe-Signature header",
        )

    try:
        event = construct_event(payload, signature)
    except PaymentsNotConfiguredError as e:
        logger.error("webhook.not_configured")
        raise HTTPException(status_code=500, detail=str(e))
    except (ValueError, stripe.SignatureVerificationError) as e:
        set_wide_event_fields(
            webhook_error="verification_failed",
            webhook_error_type=type(e).__name__,
        )
        logger.warning("webhook.verification_failed", error=str(e))
        raise HTTPException(status_code=400, detail=f"Webhook Error: {e}")

    logger.info("webhook.received", event_type=event["type"], event_id=event["id"])
    await handle_stripe_event(event)

    return WebhookResponse(received=True)
