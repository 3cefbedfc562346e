"""Pytest configuration and shared fixtures.

This module provides:
- Environment defaults so Settings validation passes without real keys
- Generated background images for every certificate style
- FastAPI test client for route tests (rate limiting disabled)
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_phuckery")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_phuckery")

from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from unittest.mock import patch

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from core.config import clear_settings_cache
from core.wide_event import init_wide_event
from rendering.styles import STYLES, clear_background_cache
from rendering.text import CertificateFields
from tests.factories import write_background


@pytest.fixture(autouse=True)
def setup_wide_event():
    """Initialize wide_event context for all tests.

    Services use set_wide_event_fields() which requires context initialization.
    In production this is done by middleware; in tests we do it here.
    """
    init_wide_event()
    yield


@pytest.fixture
def settings_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch]:
    """Monkeypatch for env-driven settings; the settings cache is reset around it."""
    clear_settings_cache()
    yield monkeypatch
    clear_settings_cache()


# =============================================================================
# Certificate fixtures
# =============================================================================


@pytest.fixture
def backgrounds_dir(
    tmp_path: Path, settings_env: pytest.MonkeyPatch
) -> Generator[Path]:
    """ASSETS_DIR holding a background for every style."""
    assets = tmp_path / "backgrounds"
    assets.mkdir()
    for style in STYLES.values():
        write_background(assets / style.background)

    settings_env.setenv("ASSETS_DIR", str(assets))
    clear_settings_cache()
    clear_background_cache()
    yield assets
    clear_background_cache()


@pytest.fixture
def empty_assets_dir(
    tmp_path: Path, settings_env: pytest.MonkeyPatch
) -> Generator[Path]:
    """ASSETS_DIR and working directory with no backgrounds at all."""
    assets = tmp_path / "empty"
    assets.mkdir()
    settings_env.setenv("ASSETS_DIR", str(assets))
    settings_env.chdir(tmp_path)
    clear_settings_cache()
    clear_background_cache()
    yield assets
    clear_background_cache()


@pytest.fixture
def fields() -> CertificateFields:
    return CertificateFields(
        first_name="Jane",
        last_name="Doe",
        degree_level="Bachelor",
        faculty="Nonsense Studies",
        achievement="Advanced Procrastination",
        certification_date="15th day of March, 2025",
    )


@pytest.fixture
def order_json() -> dict[str, str]:
    """Storefront order body in camelCase, as the checkout page sends it."""
    return {
        "firstName": "Jane",
        "lastName": "Doe",
        "certificationDate": "15th day of March, 2025",
        "degreeLevel": "Bachelor",
        "faculty": "Nonsense Studies",
        "achievement": "Advanced Procrastination",
        "style": "classic",
    }


# =============================================================================
# App / client fixtures
# =============================================================================


@pytest.fixture
def app() -> FastAPI:
    from main import app as fastapi_app

    return fastapi_app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client against the app, with rate limiting disabled."""
    with patch("core.ratelimit.limiter.enabled", False):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
