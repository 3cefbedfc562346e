"""Canva Connect API client for certificate previews and exports.

Previews autofill a brand template into a new design and return a page
thumbnail. Purchases export that design as a PDF. Both operations are
asynchronous jobs on Canva's side and are polled at a fixed interval for a
bounded number of attempts.
"""

from __future__ import annotations

import asyncio
import secrets
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import httpx

from core.config import get_settings
from core.http_client import get_http_client
from core.logger import get_logger

logger = get_logger(__name__)

# Storefront placeholder -> brand template autofill dataset field
AUTOFILL_FIELDS: Mapping[str, str] = {
    "{{RECIPIENT_NAME}}": "recipient_name",
    "{{DEGREE_TITLE}}": "degree_title",
    "{{ACHIEVEMENT_TEXT}}": "achievement_text",
}

ORDER_NUMBER_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ORDER_NUMBER_SUFFIX_LENGTH = 5

# Every tier exports a print-quality PDF
EXPORT_FORMAT = "pdf"


class CanvaError(Exception):
    """Base class for Canva API failures."""


class CanvaNotConfiguredError(CanvaError):
    """Raised when CANVA_ACCESS_TOKEN is not set."""


class CanvaAPIError(CanvaError):
    """Raised when the Canva API answers with a non-2xx status."""

    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Canva API Error: {status_code} - {detail}")


class CanvaJobError(CanvaError):
    """Raised when an autofill or export job reports ``failed``."""


class CanvaJobTimeout(CanvaError):
    """Raised when a job is still running after the last poll."""


@dataclass(frozen=True)
class DesignPreview:
    design_id: str
    thumbnail_url: str | None
    page_number: int


@dataclass(frozen=True)
class DesignExport:
    design_id: str
    download_url: str
    export_format: str
    order_number: str


def generate_order_number(now: datetime | None = None) -> str:
    """Human-friendly order number, e.g. ``PHU-2026-7KQ2M``.

    The alphabet leaves out 0/O and 1/I so numbers can be read over the phone.
    """
    year = (now or datetime.now(UTC)).year
    suffix = "".join(
        secrets.choice(ORDER_NUMBER_ALPHABET)
        for _ in range(ORDER_NUMBER_SUFFIX_LENGTH)
    )
    return f"PHU-{year}-{suffix}"


def build_autofill_data(fields: Mapping[str, str]) -> dict[str, dict[str, str]]:
    """Map storefront placeholders to autofill text datasets.

    Unknown placeholders and empty values are dropped.
    """
    data: dict[str, dict[str, str]] = {}
    for placeholder, dataset_field in AUTOFILL_FIELDS.items():
        value = fields.get(placeholder)
        if value:
            data[dataset_field] = {"type": "text", "text": value}
    return data


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or "Unknown error"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(body)


class CanvaClient:
    """Thin bearer-token client over the Canva REST API."""

    def __init__(
        self,
        access_token: str,
        http: httpx.AsyncClient,
        *,
        base_url: str = "https://api.canva.com/rest/v1",
        poll_interval: float = 1.0,
    ):
        self._access_token = access_token
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._poll_interval = poll_interval

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = await self._http.request(
            method,
            f"{self._base_url}{endpoint}",
            headers={"Authorization": f"Bearer {self._access_token}"},
            json=json,
            params=params,
        )

        if response.is_error:
            detail = _error_detail(response)
            logger.warning(
                "canva.api.error",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
                detail=detail,
            )
            raise CanvaAPIError(response.status_code, detail)

        # DELETE answers with an empty body
        if method == "DELETE" or not response.content:
            return {}
        return response.json()

    # --- Raw endpoints ---

    async def create_autofill_job(
        self, brand_template_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/autofill/create",
            json={"brand_template_id": brand_template_id, "data": data},
        )

    async def get_autofill_job(self, job_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/autofill/jobs/{job_id}")

    async def get_design(self, design_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/designs/{design_id}")

    async def get_design_pages(
        self, design_id: str, offset: int = 0, limit: int = 1
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/designs/{design_id}/pages",
            params={"offset": offset, "limit": limit},
        )

    async def create_export_job(
        self,
        design_id: str,
        export_format: str = EXPORT_FORMAT,
        pages: list[int] | None = None,
    ) -> dict[str, Any]:
        format_spec: dict[str, Any] = {"type": export_format}
        if pages:
            format_spec["pages"] = pages
        return await self._request(
            "POST", "/exports", json={"design_id": design_id, "format": format_spec}
        )

    async def get_export_job(self, job_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/exports/{job_id}")

    async def delete_design(self, design_id: str) -> None:
        await self._request("DELETE", f"/designs/{design_id}")

    # --- Job polling ---

    async def wait_for_job(
        self,
        fetch: Callable[[str], Awaitable[dict[str, Any]]],
        job_id: str,
        *,
        max_polls: int,
        label: str,
    ) -> dict[str, Any]:
        """Poll a job until it succeeds, fails or runs out of attempts.

        Sleeps before every poll, since a job is never done on creation.

        Returns:
            The job's ``result`` object

        Raises:
            CanvaJobError: The job reported ``failed``
            CanvaJobTimeout: Still in progress after ``max_polls`` polls
        """
        for _ in range(max_polls):
            await asyncio.sleep(self._poll_interval)
            job = (await fetch(job_id))["job"]
            status = job.get("status")

            if status == "success":
                return job.get("result") or {}
            if status == "failed":
                message = (job.get("error") or {}).get("message") or "Unknown error"
                raise CanvaJobError(f"{label} failed: {message}")

        raise CanvaJobTimeout(f"{label} timed out")

    # --- Certificate operations ---

    async def create_preview(
        self,
        template_id: str,
        fields: Mapping[str, str],
        page_number: int = 1,
        *,
        max_polls: int = 30,
    ) -> DesignPreview:
        """Autofill a brand template and return a thumbnail of one page."""
        data = build_autofill_data(fields)
        logger.info(
            "canva.autofill.started",
            template_id=template_id,
            datasets=sorted(data),
        )

        created = await self.create_autofill_job(template_id, data)
        result = await self.wait_for_job(
            self.get_autofill_job,
            created["job"]["id"],
            max_polls=max_polls,
            label="Autofill",
        )
        design_id = result["design"]["id"]

        pages = await self.get_design_pages(design_id, offset=page_number - 1)
        items = pages.get("items") or []
        if items:
            thumbnail_url = items[0]["thumbnail"]["url"]
        else:
            design = await self.get_design(design_id)
            thumbnail_url = design["design"]["thumbnail"]["url"]

        logger.info(
            "canva.autofill.completed",
            design_id=design_id,
            page_number=page_number,
        )
        return DesignPreview(
            design_id=design_id,
            thumbnail_url=thumbnail_url,
            page_number=page_number,
        )

    async def export_design(
        self,
        design_id: str,
        page_number: int | None = None,
        *,
        max_polls: int = 60,
    ) -> DesignExport:
        """Export a design (or one page of it) and assign an order number."""
        logger.info(
            "canva.export.started",
            design_id=design_id,
            page_number=page_number,
            format=EXPORT_FORMAT,
        )

        created = await self.create_export_job(
            design_id,
            EXPORT_FORMAT,
            [page_number] if page_number else None,
        )
        result = await self.wait_for_job(
            self.get_export_job,
            created["job"]["id"],
            max_polls=max_polls,
            label="Export",
        )

        order_number = generate_order_number()
        logger.info(
            "canva.export.completed",
            design_id=design_id,
            order_number=order_number,
        )
        return DesignExport(
            design_id=design_id,
            download_url=result["url"],
            export_format=EXPORT_FORMAT,
            order_number=order_number,
        )

    async def delete_designs(self, design_ids: list[str]) -> tuple[int, int]:
        """Delete design copies one by one.

        Returns:
            (cleaned, errors) counts. A failed delete does not stop the rest.
        """
        cleaned = 0
        errors = 0
        for design_id in design_ids:
            try:
                await self.delete_design(design_id)
            except (CanvaAPIError, httpx.HTTPError) as e:
                errors += 1
                logger.warning(
                    "canva.design.delete_failed",
                    design_id=design_id,
                    error=str(e),
                )
            else:
                cleaned += 1
        return cleaned, errors


async def get_canva_client() -> CanvaClient:
    """Build a client from settings on the shared HTTP pool.

    Raises:
        CanvaNotConfiguredError: CANVA_ACCESS_TOKEN is not set
    """
    settings = get_settings()
    if not settings.canva_access_token:
        raise CanvaNotConfiguredError("Canva API token not configured")

    return CanvaClient(
        settings.canva_access_token,
        await get_http_client(),
        base_url=settings.canva_api_base_url,
        poll_interval=settings.canva_poll_interval_seconds,
    )
