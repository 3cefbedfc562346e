"""Canva design endpoints: preview, purchase export and cleanup."""

import secrets
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from core import get_logger
from core.config import get_settings
from core.ratelimit import CANVA_LIMIT, limiter
from core.wide_event import set_wide_event_nested
from schemas import (
    CleanupRequest,
    CleanupResponse,
    PreviewRequest,
    PreviewResponse,
    PurchaseRequest,
    PurchaseResponse,
)
from services.canva_service import (
    CanvaClient,
    CanvaError,
    CanvaNotConfiguredError,
    get_canva_client,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["canva"])


async def canva_client() -> CanvaClient:
    """Dependency: Canva client, or 500 when no access token is configured."""
    try:
        return await get_canva_client()
    except CanvaNotConfiguredError as e:
        logger.error("canva.not_configured")
        raise HTTPException(
            status_code=500,
            detail={"error": "Server configuration error", "message": str(e)},
        )


def require_cleanup_secret(
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Dependency: bearer check against CLEANUP_SECRET, when one is set."""
    expected = get_settings().cleanup_secret
    if not expected:
        return
    if not authorization or not secrets.compare_digest(
        authorization, f"Bearer {expected}"
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")


Canva = Annotated[CanvaClient, Depends(canva_client)]


@router.post(
    "/preview",
    response_model=PreviewResponse,
    response_model_by_alias=True,
    summary="Autofill a brand template and return a thumbnail",
    responses={
        400: {"description": "templateId or fields missing"},
        500: {"description": "Canva not configured or preview failed"},
    },
)
@limiter.limit(CANVA_LIMIT)
async def preview(
    request: Request, body: PreviewRequest, canva: Canva
) -> PreviewResponse:
    set_wide_event_nested(
        "canva", template_id=body.template_id, page_number=body.page_number
    )
    settings = get_settings()

    # A fresh autofill every time; existingDesignId is not reused
    try:
        result = await canva.create_preview(
            body.template_id,
            body.fields,
            body.page_number,
            max_polls=settings.canva_autofill_max_polls,
        )
    except (CanvaError, httpx.HTTPError) as e:
        logger.error(
            "canva.preview_failed", template_id=body.template_id, error=str(e)
        )
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to generate preview", "message": str(e)},
        )

    return PreviewResponse(
        design_id=result.design_id,
        thumbnail_url=result.thumbnail_url,
        page_number=result.page_number,
    )


@router.post(
    "/purchase",
    response_model=PurchaseResponse,
    response_model_by_alias=True,
    summary="Export a previewed design for download",
    responses={
        400: {"description": "designId missing"},
        500: {"description": "Canva not configured or export failed"},
    },
)
@limiter.limit(CANVA_LIMIT)
async def purchase(
    request: Request, body: PurchaseRequest, canva: Canva
) -> PurchaseResponse:
    set_wide_event_nested("canva", design_id=body.design_id, tier=body.tier)
    settings = get_settings()

    try:
        result = await canva.export_design(
            body.design_id,
            body.page_number,
            max_polls=settings.canva_export_max_polls,
        )
    except (CanvaError, httpx.HTTPError) as e:
        logger.error(
            "canva.purchase_failed", design_id=body.design_id, error=str(e)
        )
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to process purchase", "message": str(e)},
        )

    return PurchaseResponse(
        download_url=result.download_url,
        order_number=result.order_number,
        design_id=result.design_id,
        output_format=result.export_format,
    )


@router.api_route(
    "/cleanup",
    methods=["POST", "DELETE"],
    response_model=CleanupResponse,
    summary="Delete unpurchased design copies",
    dependencies=[Depends(require_cleanup_secret)],
    responses={
        401: {"description": "Missing or wrong cleanup bearer token"},
        500: {"description": "Canva not configured"},
    },
)
async def cleanup(request: Request) -> CleanupResponse:
    """Delete the design ids given in the body, if any.

    There is no design registry, so without ids this reports nothing cleaned.
    Scheduled callers (cron) may send an empty body, which needs no Canva token.
    """
    body = CleanupRequest()
    raw = await request.body()
    if raw.strip():
        try:
            body = CleanupRequest.model_validate_json(raw)
        except ValidationError as e:
            raise RequestValidationError(e.errors()) from e

    if not body.design_ids:
        return CleanupResponse(
            success=True,
            message="Cleanup endpoint ready. No design ids supplied.",
            cleaned=0,
            errors=0,
        )

    canva = await canva_client()
    cleaned, errors = await canva.delete_designs(body.design_ids)
    logger.info("canva.cleanup.completed", cleaned=cleaned, errors=errors)

    return CleanupResponse(
        success=errors == 0,
        message=f"Deleted {cleaned} of {len(body.design_ids)} designs.",
        cleaned=cleaned,
        errors=errors,
    )
