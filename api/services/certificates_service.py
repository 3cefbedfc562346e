"""Certificate business logic for Phuckery University.

Routes should call this module instead of the rendering module directly.
Rendering is CPU-bound, so it runs in the default thread pool.
"""

import asyncio

from core.config import get_settings
from core.logger import get_logger
from rendering.certificates import RenderedCertificate, render_certificate
from rendering.text import CertificateFields
from schemas import OrderFields

logger = get_logger(__name__)


def to_certificate_fields(order: OrderFields) -> CertificateFields:
    return CertificateFields(
        first_name=order.first_name,
        last_name=order.last_name,
        degree_level=order.degree_level,
        faculty=order.faculty,
        achievement=order.achievement,
        certification_date=order.certification_date,
    )


async def generate_certificate(
    order: OrderFields, output_format: str = "pdf"
) -> RenderedCertificate:
    """Render a certificate for an order without blocking the event loop.

    Args:
        order: Validated order fields, including the style
        output_format: "pdf" or "png"

    Returns:
        RenderedCertificate with bytes, media type and download filename

    Raises:
        rendering.errors.CertificateRenderingError subclasses, unchanged
    """
    fields = to_certificate_fields(order)
    png_scale = get_settings().png_scale

    loop = asyncio.get_running_loop()
    rendered = await loop.run_in_executor(
        None,
        lambda: render_certificate(
            fields, order.style, output_format, png_scale=png_scale
        ),
    )

    logger.info(
        "certificate.rendered",
        style=order.style,
        format=output_format,
        size_bytes=len(rendered.content),
    )
    return rendered
