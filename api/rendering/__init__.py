"""Rendering module for presentation concerns.

This module handles all certificate presentation logic:
- Style table and background lookup
- Display string derivation
- Text layout, PDF assembly and PNG rasterization

This separates presentation concerns from order/payment logic in services.
"""

from rendering.certificates import (
    CertificateLayout,
    PlacedText,
    RenderedCertificate,
    layout_certificate,
    render_certificate,
)
from rendering.errors import (
    CertificateRenderingError,
    RenderError,
    ResourceMissingError,
    ValidationError,
)
from rendering.styles import STYLE_KEYS, STYLES, get_style
from rendering.text import CertificateFields, compile_certificate_text

__all__ = [
    "STYLES",
    "STYLE_KEYS",
    "CertificateFields",
    "CertificateLayout",
    "CertificateRenderingError",
    "PlacedText",
    "RenderError",
    "RenderedCertificate",
    "ResourceMissingError",
    "ValidationError",
    "compile_certificate_text",
    "get_style",
    "layout_certificate",
    "render_certificate",
]
