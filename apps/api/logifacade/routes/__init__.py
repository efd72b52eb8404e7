"""Route modules."""

from .auth import router as auth_router
from .shipments import router as shipments_router
from .systems import router as systems_router

__all__ = ["auth_router", "shipments_router", "systems_router"]
