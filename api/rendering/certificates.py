"""Certificate rendering - layout, PDF and PNG generation.

This module composes the printed certificate:
- Text placement (horizontal centering per slot)
- PDF assembly with reportlab (background stretched to the page)
- PNG rasterization via an SVG rendition and CairoSVG

Order/payment logic lives in services; this module only turns
(fields, style) into bytes.
"""

import base64
import html
import io
from dataclasses import dataclass

from reportlab.lib.colors import black
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from rendering.errors import RenderError, ValidationError
from rendering.styles import (
    PAGE_HEIGHT,
    PAGE_WIDTH,
    FontName,
    SlotRole,
    StyleDefinition,
    resolve_style,
)
from rendering.text import CertificateFields, CertificateText, compile_certificate_text

PDF_MEDIA_TYPE = "application/pdf"
PNG_MEDIA_TYPE = "image/png"

OUTPUT_FORMATS = {
    "pdf": PDF_MEDIA_TYPE,
    "png": PNG_MEDIA_TYPE,
}

CERTIFICATE_FILENAME = "phuckery-certificate"
DOCUMENT_TITLE = "Phuckery University Certificate"

# Base-14 fonts are WinAnsi encoded; reportlab draws anything else as a
# blank glyph instead of failing.
STANDARD_FONT_ENCODING = "cp1252"

# SVG font stacks matching the PDF base-14 fonts for the PNG rendition.
_SVG_FONTS: dict[FontName, tuple[str, str, str]] = {
    FontName.SERIF: ("Times, 'Times New Roman', serif", "normal", "normal"),
    FontName.SERIF_BOLD: ("Times, 'Times New Roman', serif", "bold", "normal"),
    FontName.SERIF_ITALIC: ("Times, 'Times New Roman', serif", "normal", "italic"),
    FontName.SERIF_BOLD_ITALIC: (
        "Times, 'Times New Roman', serif",
        "bold",
        "italic",
    ),
    FontName.SANS: ("Helvetica, Arial, sans-serif", "normal", "normal"),
    FontName.SANS_BOLD: ("Helvetica, Arial, sans-serif", "bold", "normal"),
    FontName.SANS_OBLIQUE: ("Helvetica, Arial, sans-serif", "normal", "oblique"),
    FontName.MONO: ("Courier, 'Courier New', monospace", "normal", "normal"),
    FontName.MONO_BOLD: ("Courier, 'Courier New', monospace", "bold", "normal"),
}


@dataclass(frozen=True)
class PlacedText:
    """A single line of text positioned on the page."""

    role: SlotRole
    text: str
    x: float
    y: float
    font: FontName
    font_size: float
    width: float


@dataclass(frozen=True)
class CertificateLayout:
    style: StyleDefinition
    text: CertificateText
    placements: tuple[PlacedText, ...]
    background: bytes

    def placement(self, role: SlotRole) -> PlacedText | None:
        for placed in self.placements:
            if placed.role is role:
                return placed
        return None


@dataclass(frozen=True)
class RenderedCertificate:
    content: bytes
    media_type: str
    filename: str


def measure_text(text: str, font: FontName, font_size: float) -> float:
    """Width of ``text`` in points.

    Raises:
        RenderError: If the text has characters outside the font's encoding,
            or the font metrics cannot measure the string.
    """
    try:
        text.encode(STANDARD_FONT_ENCODING)
    except UnicodeEncodeError as e:
        raise RenderError(f"Text cannot be encoded in {font.value}", e) from e

    try:
        return stringWidth(text, font.value, font_size)
    except Exception as e:
        raise RenderError(f"Could not measure text in {font.value}", e) from e


def centered_x(text_width: float, page_width: float = PAGE_WIDTH) -> float:
    return (page_width - text_width) / 2


def layout_certificate(fields: CertificateFields, style: str) -> CertificateLayout:
    """Resolve the style and position every line of the certificate.

    Raises:
        ValidationError: Unknown style.
        ResourceMissingError: Background asset not found.
        RenderError: Text measurement failed.
    """
    definition, background = resolve_style(style)
    text = compile_certificate_text(fields, definition)

    placements: list[PlacedText] = []
    for role, slot in definition.slots():
        line = text.for_role(role)
        if role is SlotRole.DATE_LINE and not line:
            continue

        width = measure_text(line, slot.font, slot.font_size)
        placements.append(
            PlacedText(
                role=role,
                text=line,
                x=centered_x(width),
                y=slot.y,
                font=slot.font,
                font_size=slot.font_size,
                width=width,
            )
        )

    return CertificateLayout(
        style=definition,
        text=text,
        placements=tuple(placements),
        background=background,
    )


def layout_to_pdf(layout: CertificateLayout) -> bytes:
    """Serialize a layout to a single-page PDF.

    Uses reportlab's invariant mode so repeated renders are byte-identical.
    """
    buffer = io.BytesIO()
    try:
        pdf = canvas.Canvas(
            buffer,
            pagesize=(PAGE_WIDTH, PAGE_HEIGHT),
            invariant=1,
        )
        pdf.setTitle(DOCUMENT_TITLE)

        background = ImageReader(io.BytesIO(layout.background))
        pdf.drawImage(background, 0, 0, width=PAGE_WIDTH, height=PAGE_HEIGHT)

        pdf.setFillColor(black)
        for placed in layout.placements:
            pdf.setFont(placed.font.value, placed.font_size)
            pdf.drawString(placed.x, placed.y, placed.text)

        pdf.showPage()
        pdf.save()
    except Exception as e:
        raise RenderError("Failed to build certificate PDF", e) from e

    return buffer.getvalue()


def to_base64_data_uri(content: bytes, media_type: str) -> str:
    """Encode bytes as a base64 data URI for embedding."""
    encoded = base64.b64encode(content).decode("utf-8")
    return f"data:{media_type};base64,{encoded}"


def layout_to_svg(layout: CertificateLayout) -> str:
    """Render a layout as SVG with the same geometry as the PDF.

    SVG's y axis points down, so baselines are flipped against the page height.
    """
    background_uri = to_base64_data_uri(layout.background, PNG_MEDIA_TYPE)

    text_elements: list[str] = []
    for placed in layout.placements:
        family, weight, font_style = _SVG_FONTS[placed.font]
        text_elements.append(
            f'  <text x="{placed.x:.3f}" y="{PAGE_HEIGHT - placed.y:.3f}" '
            f'font-family="{family}" font-size="{placed.font_size}" '
            f'font-weight="{weight}" font-style="{font_style}" fill="#000000">'
            f"{html.escape(placed.text, quote=True)}</text>"
        )

    body = "\n".join(text_elements)

    return f"""<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" viewBox="0 0 {PAGE_WIDTH} {PAGE_HEIGHT}" width="{PAGE_WIDTH}" height="{PAGE_HEIGHT}">
  <image x="0" y="0" width="{PAGE_WIDTH}" height="{PAGE_HEIGHT}" preserveAspectRatio="none" xlink:href="{background_uri}"/>
{body}
</svg>"""


def svg_to_png(svg_content: str, *, scale: float = 2.0) -> bytes:
    """Convert SVG string to PNG bytes using CairoSVG.

    Args:
        svg_content: SVG string to convert
        scale: Output scale factor (2.0 renders a 1584x1224 raster)

    Returns:
        PNG content as bytes

    Raises:
        RenderError: If the cairo library is missing or rasterization fails
    """
    try:
        import cairosvg
    except OSError as e:
        if "cairo" in str(e).lower():
            raise RenderError(
                "PNG generation requires the Cairo library. "
                "On macOS: brew install cairo. "
                "On Ubuntu/Debian: apt-get install libcairo2-dev. "
                "On Alpine: apk add cairo-dev.",
                e,
            ) from e
        raise

    try:
        return cairosvg.svg2png(bytestring=svg_content.encode("utf-8"), scale=scale)
    except Exception as e:
        raise RenderError("Failed to rasterize certificate", e) from e


def render_certificate(
    fields: CertificateFields,
    style: str,
    output_format: str = "pdf",
    *,
    png_scale: float = 2.0,
) -> RenderedCertificate:
    """Render a complete certificate document.

    Args:
        fields: Names, degree and achievement to print
        style: One of the style identifiers in ``rendering.styles.STYLES``
        output_format: "pdf" (default) or "png"
        png_scale: Raster scale for PNG output

    Returns:
        RenderedCertificate with the document bytes and content type

    Raises:
        ValidationError: Unknown style or output format
        ResourceMissingError: Background asset not found
        RenderError: Measurement or serialization failed
    """
    media_type = OUTPUT_FORMATS.get(output_format)
    if media_type is None:
        raise ValidationError(f"Invalid format: {output_format}")

    layout = layout_certificate(fields, style)

    if output_format == "png":
        content = svg_to_png(layout_to_svg(layout), scale=png_scale)
    else:
        content = layout_to_pdf(layout)

    return RenderedCertificate(
        content=content,
        media_type=media_type,
        filename=f"{CERTIFICATE_FILENAME}.{output_format}",
    )
