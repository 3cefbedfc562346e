"""Application configuration using pydantic-settings."""

from functools import cached_property, lru_cache
from typing import Self

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RenderingSettings(BaseSettings):
    """Settings the certificate renderer needs.

    Kept separate so the CLI can render without payment or Canva keys.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Extra directory searched first for certificate background images
    assets_dir: str = ""

    # Raster scale for format=png (1.0 = 792x612 px)
    png_scale: float = 2.0


class Settings(RenderingSettings):
    """Application settings loaded from environment variables."""

    # Comma-separated list of allowed CORS origins; "*" allows any origin
    cors_allowed_origins: str = "*"

    # Stripe - card payments for certificate orders
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""

    # Flat price per certificate, in the smallest currency unit
    certificate_price_cents: int = 999
    certificate_currency: str = "usd"

    # When True, /api/create-payment-intent rejects orders without buyerEmail
    require_buyer_email: bool = False

    # Fulfillment automation (n8n) - receives paid orders, emails certificates
    n8n_webhook_url: str = ""

    # Canva Connect API - brand template autofill and export
    canva_access_token: str = ""
    canva_client_id: str = ""
    canva_client_secret: str = ""
    canva_redirect_uri: str = "http://localhost:8000/api/auth/callback"
    canva_api_base_url: str = "https://api.canva.com/rest/v1"
    canva_authorize_url: str = "https://www.canva.com/api/oauth/authorize"
    canva_poll_interval_seconds: float = 1.0
    canva_autofill_max_polls: int = 30
    canva_export_max_polls: int = 60

    # Bearer token for /api/cleanup; empty disables the check
    cleanup_secret: str = ""

    http_timeout: float = 10.0

    # Use "redis://host:port" in production for distributed rate limiting
    # memory:// only works for single-instance deployments
    ratelimit_storage_uri: str = "memory://"

    # Feature flags: production defaults
    # Set DEBUG=true in .env for local development
    debug: bool = False  # Enables docs, relaxes validation
    require_https: bool = True  # Secure flag on the PKCE cookie
    enable_docs: bool = False  # Swagger UI at /docs

    @model_validator(mode="after")
    def validate_config(self) -> Self:
        # In production (debug=False), payments must be fully configured
        if not self.debug:
            if not self.stripe_secret_key:
                raise ValueError(
                    "STRIPE_SECRET_KEY must be set. "
                    "Set DEBUG=true to skip this check in development."
                )
            if not self.stripe_webhook_secret:
                raise ValueError(
                    "STRIPE_WEBHOOK_SECRET must be set. "
                    "Set DEBUG=true to skip this check in development."
                )
        if self.certificate_price_cents <= 0:
            raise ValueError("CERTIFICATE_PRICE_CENTS must be positive")
        return self

    @cached_property
    def allowed_origins(self) -> list[str]:
        """Parsed cors_allowed_origins, without blanks or duplicates."""
        origins: list[str] = []
        for origin in self.cors_allowed_origins.split(","):
            origin = origin.strip()
            if origin and origin not in origins:
                origins.append(origin)
        return origins


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


@lru_cache(maxsize=1)
def get_rendering_settings() -> RenderingSettings:
    return RenderingSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this in tests to reset settings between test cases.
    After clearing, the next get_settings() call will create
    a fresh Settings instance with current environment variables.

    Example:
        def test_something(monkeypatch):
            monkeypatch.setenv("ASSETS_DIR", "/tmp/backgrounds")
            clear_settings_cache()
            settings = get_settings()  # Fresh instance
    """
    get_settings.cache_clear()
    get_rendering_settings.cache_clear()
