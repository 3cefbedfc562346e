"""Tests for the certificate service wrapper."""

from pathlib import Path
from unittest.mock import patch

import pytest

from rendering.errors import ResourceMissingError, ValidationError
from schemas import CertificateRequest
from services.certificates_service import generate_certificate, to_certificate_fields

pytestmark = pytest.mark.unit


@pytest.fixture
def request_body(order_json) -> CertificateRequest:
    return CertificateRequest.model_validate(order_json)


class TestToCertificateFields:
    def test_copies_order_fields(self, request_body):
        fields = to_certificate_fields(request_body)

        assert fields.first_name == "Jane"
        assert fields.last_name == "Doe"
        assert fields.degree_level == "Bachelor"
        assert fields.faculty == "Nonsense Studies"
        assert fields.achievement == "Advanced Procrastination"
        assert fields.certification_date == "15th day of March, 2025"


class TestGenerateCertificate:
    async def test_renders_pdf(self, backgrounds_dir: Path, request_body):
        rendered = await generate_certificate(request_body)

        assert rendered.media_type == "application/pdf"
        assert rendered.content.startswith(b"%PDF-")

    async def test_passes_png_scale_from_settings(
        self, backgrounds_dir: Path, settings_env, request_body
    ):
        settings_env.setenv("PNG_SCALE", "3.0")
        with patch(
            "rendering.certificates.svg_to_png", return_value=b"\x89PNG"
        ) as mock_png:
            rendered = await generate_certificate(request_body, "png")

        assert rendered.media_type == "image/png"
        assert mock_png.call_args.kwargs == {"scale": 3.0}

    async def test_unknown_style_propagates(self, backgrounds_dir: Path, order_json):
        body = CertificateRequest.model_validate({**order_json, "style": "goth"})
        with pytest.raises(ValidationError):
            await generate_certificate(body)

    async def test_missing_background_propagates(
        self, empty_assets_dir: Path, request_body
    ):
        with pytest.raises(ResourceMissingError):
            await generate_certificate(request_body)
