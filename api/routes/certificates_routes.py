"""Certificate rendering endpoint."""

from fastapi import APIRouter, HTTPException, Request, Response

from core import get_logger
from core.ratelimit import RENDER_LIMIT, limiter
from core.wide_event import set_wide_event_nested
from rendering.errors import RenderError, ResourceMissingError, ValidationError
from schemas import CertificateRequest
from services.certificates_service import generate_certificate

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["certificates"])


@router.post(
    "/generate-certificate",
    summary="Render a certificate",
    description=(
        "Lays out the recipient's name, degree, achievement and date on the "
        "chosen style's background and returns a single-page landscape PDF "
        "(or a PNG when format=png) for inline display."
    ),
    response_class=Response,
    responses={
        200: {
            "content": {"application/pdf": {}, "image/png": {}},
            "description": "The rendered certificate",
        },
        400: {"description": "Missing fields or unknown style"},
        500: {"description": "Background missing or rendering failed"},
    },
)
@limiter.limit(RENDER_LIMIT)
async def generate_certificate_endpoint(
    request: Request, body: CertificateRequest
) -> Response:
    set_wide_event_nested(
        "certificate", style=body.style, format=body.output_format
    )

    try:
        rendered = await generate_certificate(body, body.output_format)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ResourceMissingError as e:
        searched = [str(path) for path in e.searched]
        logger.error(
            "certificate.background_missing",
            style=body.style,
            asset=e.asset_name,
            searched=searched,
        )
        raise HTTPException(
            status_code=500, detail={"error": str(e), "searched": searched}
        )
    except RenderError as e:
        logger.error("certificate.render_failed", style=body.style, error=str(e))
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to generate certificate", "message": str(e)},
        )

    return Response(
        content=rendered.content,
        media_type=rendered.media_type,
        headers={
            "Content-Disposition": f'inline; filename="{rendered.filename}"',
            "Cache-Control": "no-store",
        },
    )
