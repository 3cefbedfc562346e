"""FastAPI application for the Phuckery University API."""

from contextlib import asynccontextmanager
from typing import Any

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import get_settings
from core.http_client import close_http_client
from core.logger import configure_logging, get_logger
from core.middleware import RequestLoggingMiddleware
from core.ratelimit import limiter, rate_limit_exceeded_handler
from routes import (
    auth_router,
    canva_router,
    certificates_router,
    health_router,
    payments_router,
)

configure_logging()
logger = get_logger(__name__)

# Validation error types meaning "the client left something out"
_MISSING_ERROR_TYPES = frozenset({"missing", "string_too_short"})


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Shape HTTPException into ``{"error": ...}`` bodies.

    A dict ``detail`` is used as the body as-is, so routes can add fields
    such as ``searched`` or ``message``.
    """
    if not isinstance(exc, StarletteHTTPException):
        return JSONResponse(status_code=500, content={"error": "Unexpected error"})

    content: dict[str, Any]
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


def _error_field(loc: tuple[Any, ...]) -> str:
    # ("body", "firstName") -> "firstName"
    parts = [str(part) for part in loc if part != "body"]
    return ".".join(parts) or "body"


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handler for request validation errors (400, not FastAPI's 422)."""
    if not isinstance(exc, RequestValidationError):
        return JSONResponse(status_code=500, content={"error": "Unexpected error"})

    errors = exc.errors()
    fields = list(dict.fromkeys(_error_field(tuple(e["loc"])) for e in errors))
    missing = any(e["type"] in _MISSING_ERROR_TYPES for e in errors)

    logger.warning(
        "request.validation_error",
        path=request.url.path,
        method=request.method,
        fields=fields,
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": "Missing required fields" if missing else "Invalid request",
            "fields": fields,
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        exc_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again.",
        },
    )


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Close the shared outbound HTTP pool on shutdown."""
    logger.info("app.startup", debug=get_settings().debug)
    try:
        yield
    finally:
        await close_http_client()


_settings = get_settings()

app = fastapi.FastAPI(
    title="Phuckery University API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _settings.enable_docs or _settings.debug else None,
    redoc_url="/redoc" if _settings.enable_docs or _settings.debug else None,
    openapi_url=("/openapi.json" if _settings.enable_docs or _settings.debug else None),
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    expose_headers=["Content-Disposition", "X-Request-Duration-Ms", "X-Request-Id"],
    max_age=600,
)
# Outermost, so CORS preflights and error responses are timed too
app.add_middleware(RequestLoggingMiddleware)

app.include_router(health_router)
app.include_router(certificates_router)
app.include_router(payments_router)
app.include_router(canva_router)
app.include_router(auth_router)
