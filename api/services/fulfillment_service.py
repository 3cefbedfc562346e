"""Forward paid orders to the fulfillment automation (n8n) webhook.

The automation generates and emails the final certificate. Forwarding never
raises: Stripe must get a 200 for a verified event, so failures are logged
with enough context to replay the order by hand.
"""

import httpx

from core.config import get_settings
from core.http_client import get_http_client
from core.logger import get_logger
from schemas import FulfillmentPayload

logger = get_logger(__name__)


async def forward_order(payload: FulfillmentPayload) -> bool:
    """POST the order to N8N_WEBHOOK_URL.

    Returns:
        True if the automation accepted the order, False otherwise.
    """
    url = get_settings().n8n_webhook_url
    if not url:
        logger.error(
            "fulfillment.not_configured",
            payment_intent_id=payload.payment_intent_id,
            hint="N8N_WEBHOOK_URL not set; certificate will not be emailed",
        )
        return False

    body = payload.model_dump(by_alias=True)
    client = await get_http_client()

    try:
        response = await client.post(url, json=body)
    except httpx.HTTPError as e:
        logger.error(
            "fulfillment.forward_failed",
            payment_intent_id=payload.payment_intent_id,
            error=str(e),
            error_type=type(e).__name__,
            order=body,
        )
        return False

    if response.is_error:
        logger.error(
            "fulfillment.rejected",
            payment_intent_id=payload.payment_intent_id,
            status_code=response.status_code,
            response_body=response.text[:500],
            order=body,
        )
        return False

    logger.info(
        "fulfillment.forwarded",
        payment_intent_id=payload.payment_intent_id,
        status_code=response.status_code,
    )
    return True
