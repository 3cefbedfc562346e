"""API route modules."""

from .auth_routes import router as auth_router
from .canva_routes import router as canva_router
from .certificates_routes import router as certificates_router
from .health_routes import router as health_router
from .payments_routes import router as payments_router

__all__ = [
    "auth_router",
    "canva_router",
    "certificates_router",
    "health_router",
    "payments_router",
]
