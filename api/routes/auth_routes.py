"""Canva OAuth (PKCE) routes for obtaining an API access token.

Handles:
- GET /api/auth/login: redirect to Canva's authorize page
- GET /api/auth/callback: exchange the code, show the tokens to the operator

These are browser-facing, so failures answer with plain text, not JSON.
"""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from core import get_logger
from core.config import get_settings
from core.ratelimit import AUTH_LIMIT, limiter
from core.templates import templates
from services.canva_auth_service import (
    CODE_VERIFIER_COOKIE,
    CODE_VERIFIER_MAX_AGE,
    CanvaAuthNotConfiguredError,
    TokenExchangeError,
    build_authorization_request,
    exchange_code,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get(
    "/login",
    summary="Redirect to Canva OAuth login",
    include_in_schema=False,
)
@limiter.limit(AUTH_LIMIT)
async def login(request: Request) -> Response:
    """Start the PKCE flow.

    The code verifier is kept in an HttpOnly cookie for ten minutes so the
    callback can prove it started this flow.
    """
    try:
        auth_request = build_authorization_request()
    except CanvaAuthNotConfiguredError as e:
        logger.error("auth.login.canva_not_configured")
        return PlainTextResponse(str(e), status_code=500)

    response = RedirectResponse(url=auth_request.url, status_code=302)
    response.set_cookie(
        CODE_VERIFIER_COOKIE,
        auth_request.code_verifier,
        max_age=CODE_VERIFIER_MAX_AGE,
        path="/",
        httponly=True,
        secure=get_settings().require_https,
        samesite="lax",
    )
    logger.info("auth.login.redirect", state=auth_request.state)
    return response


@router.get(
    "/callback",
    name="auth_callback",
    summary="Canva OAuth callback",
    include_in_schema=False,
)
@limiter.limit(AUTH_LIMIT)
async def callback(
    request: Request,
    code: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
) -> Response:
    """Exchange the authorization code and display the issued tokens."""
    if error:
        logger.warning("auth.callback.denied", error=error)
        return PlainTextResponse(
            f"Auth failed: {error} - {error_description or ''}", status_code=400
        )

    if not code:
        return PlainTextResponse("Missing authorization code", status_code=400)

    code_verifier = request.cookies.get(CODE_VERIFIER_COOKIE)
    if not code_verifier:
        return PlainTextResponse(
            "Missing code_verifier. "
            "Please start the auth flow again at /api/auth/login",
            status_code=400,
        )

    try:
        tokens = await exchange_code(code, code_verifier)
    except TokenExchangeError as e:
        return PlainTextResponse(f"Error: {e}", status_code=500)

    response = templates.TemplateResponse(
        request,
        "canva_tokens.html",
        {
            "access_token": tokens.access_token,
            "refresh_token": tokens.refresh_token,
        },
        headers={"Cache-Control": "no-store"},
    )
    response.delete_cookie(
        CODE_VERIFIER_COOKIE,
        path="/",
        httponly=True,
        secure=get_settings().require_https,
    )
    logger.info("auth.callback.success")
    return response
