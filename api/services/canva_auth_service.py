"""One-off OAuth 2.0 PKCE flow for obtaining a Canva access token.

An operator visits /api/auth/login, approves the app in Canva, and copies the
tokens shown by the callback page into CANVA_ACCESS_TOKEN. The code verifier
travels between the two requests in a short-lived cookie.
"""

import secrets
import time
from dataclasses import dataclass

import httpx
from authlib.common.urls import add_params_to_uri
from authlib.integrations.httpx_client import AsyncOAuth2Client, OAuthError
from authlib.oauth2.rfc7636 import create_s256_code_challenge

from core.config import get_settings
from core.logger import get_logger

logger = get_logger(__name__)

CODE_VERIFIER_COOKIE = "code_verifier"
CODE_VERIFIER_MAX_AGE = 600

CANVA_SCOPES = (
    "asset:read",
    "brandtemplate:content:read",
    "brandtemplate:meta:read",
    "design:content:read",
    "design:content:write",
    "design:meta:read",
)


class CanvaAuthNotConfiguredError(Exception):
    """Raised when CANVA_CLIENT_ID is not set."""


class TokenExchangeError(Exception):
    """Raised when Canva rejects the authorization code."""


@dataclass(frozen=True)
class AuthorizationRequest:
    url: str
    code_verifier: str
    state: str


@dataclass(frozen=True)
class CanvaTokens:
    access_token: str
    refresh_token: str | None


def generate_code_verifier() -> str:
    """32 random bytes, base64url-encoded without padding (43 chars)."""
    return secrets.token_urlsafe(32)


def build_authorization_request(
    code_verifier: str | None = None, now_ms: int | None = None
) -> AuthorizationRequest:
    """Build the Canva authorize URL with an S256 code challenge.

    Raises:
        CanvaAuthNotConfiguredError: CANVA_CLIENT_ID is not set
    """
    settings = get_settings()
    if not settings.canva_client_id:
        raise CanvaAuthNotConfiguredError("CANVA_CLIENT_ID not configured")

    verifier = code_verifier or generate_code_verifier()
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    state = f"canva_auth_{now_ms}"

    url = add_params_to_uri(
        settings.canva_authorize_url,
        [
            ("response_type", "code"),
            ("client_id", settings.canva_client_id),
            ("redirect_uri", settings.canva_redirect_uri),
            ("scope", " ".join(CANVA_SCOPES)),
            ("state", state),
            ("code_challenge", create_s256_code_challenge(verifier)),
            ("code_challenge_method", "S256"),
        ],
    )
    return AuthorizationRequest(url=url, code_verifier=verifier, state=state)


async def exchange_code(code: str, code_verifier: str) -> CanvaTokens:
    """Trade an authorization code (plus its verifier) for tokens.

    Raises:
        TokenExchangeError: Canva returned an OAuth error or was unreachable
    """
    settings = get_settings()
    token_url = f"{settings.canva_api_base_url.rstrip('/')}/oauth/token"

    async with AsyncOAuth2Client(
        client_id=settings.canva_client_id,
        client_secret=settings.canva_client_secret,
        token_endpoint_auth_method="client_secret_post",
        redirect_uri=settings.canva_redirect_uri,
        timeout=settings.http_timeout,
    ) as client:
        try:
            token = await client.fetch_token(
                token_url,
                grant_type="authorization_code",
                code=code,
                code_verifier=code_verifier,
            )
        except OAuthError as e:
            logger.warning(
                "canva.auth.token_exchange_failed",
                error=e.error,
                description=e.description,
            )
            raise TokenExchangeError(
                e.description or e.error or "Token exchange failed"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("canva.auth.token_exchange_failed", error=str(e))
            raise TokenExchangeError(str(e) or "Token exchange failed") from e

    access_token = token.get("access_token")
    if not access_token:
        raise TokenExchangeError("Token exchange failed")

    logger.info(
        "canva.auth.token_issued",
        has_refresh_token=bool(token.get("refresh_token")),
        expires_in=token.get("expires_in"),
    )
    return CanvaTokens(
        access_token=access_token,
        refresh_token=token.get("refresh_token"),
    )
