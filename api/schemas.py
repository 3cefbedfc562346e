"""Pydantic schemas for API request/response validation.

The storefront speaks camelCase JSON, so every schema aliases its snake_case
fields with ``to_camel`` and accepts either spelling on input.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderFields(CamelModel):
    """Fields printed on a certificate."""

    first_name: str = Field(min_length=1, max_length=200)
    last_name: str = Field(min_length=1, max_length=200)
    certification_date: str | None = Field(default=None, max_length=200)
    degree_level: str = Field(min_length=1, max_length=200)
    faculty: str = Field(min_length=1, max_length=200)
    achievement: str = Field(min_length=1, max_length=300)
    style: str = Field(min_length=1, max_length=50)


class CertificateRequest(OrderFields):
    """Request to render a certificate."""

    output_format: Literal["pdf", "png"] = Field(default="pdf", alias="format")


class PaymentIntentRequest(OrderFields):
    """Order submitted before card payment.

    The date is required here: a paid order is always fulfilled with a date line.
    """

    certification_date: str = Field(min_length=1, max_length=200)
    buyer_email: str | None = Field(default=None, max_length=320)
    recipient_email: str | None = Field(default=None, max_length=320)
    # Accepted for storefront compatibility; the price is fixed server-side
    price_id: str | None = None


class PaymentIntentResponse(CamelModel):
    client_secret: str


class WebhookResponse(CamelModel):
    received: bool = True


class FulfillmentPayload(CamelModel):
    """Flat order record forwarded to the fulfillment automation webhook."""

    email: str | None
    buyer_email: str | None
    recipient_email: str
    first_name: str | None
    last_name: str | None
    certification_date: str | None
    degree_level: str | None
    faculty: str | None
    achievement: str | None
    style: str | None
    payment_intent_id: str
    amount_paid: float


class PreviewRequest(CamelModel):
    """Request to autofill a Canva brand template and return a thumbnail."""

    template_id: str = Field(min_length=1)
    fields: dict[str, str]
    page_number: int = Field(default=1, ge=1)
    existing_design_id: str | None = None


class PreviewResponse(CamelModel):
    success: bool = True
    design_id: str
    thumbnail_url: str | None
    page_number: int


class PurchaseRequest(CamelModel):
    """Request to export a previewed Canva design."""

    design_id: str = Field(min_length=1)
    page_number: int | None = Field(default=None, ge=1)
    tier: Literal["digital", "printed", "framed"] | None = None
    output_format: str = Field(default="pdf", alias="format")


class PurchaseResponse(CamelModel):
    success: bool = True
    download_url: str
    order_number: str
    design_id: str
    output_format: str = Field(alias="format")


class CleanupRequest(CamelModel):
    design_ids: list[str] = Field(default_factory=list, max_length=100)


class CleanupResponse(CamelModel):
    success: bool
    message: str
    cleaned: int
    errors: int


class HealthResponse(BaseModel):
    status: str
    service: str


class ErrorResponse(BaseModel):
    """Shape of every JSON error body."""

    error: str
    message: str | None = None
