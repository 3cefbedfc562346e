"""Errors raised by the certificate renderer.

Every failure propagates to the caller; the HTTP layer decides the status code.
"""

from pathlib import Path


class CertificateRenderingError(Exception):
    """Base class for renderer failures."""


class ValidationError(CertificateRenderingError):
    """Raised for bad input, e.g. an unknown style identifier."""


class ResourceMissingError(CertificateRenderingError):
    """Raised when a background asset cannot be located."""

    def __init__(self, asset_name: str, searched: list[Path]):
        self.asset_name = asset_name
        self.searched = searched
        super().__init__(f"Background image not found: {asset_name}")


class RenderError(CertificateRenderingError):
    """Raised when text measurement or page serialization fails."""

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
