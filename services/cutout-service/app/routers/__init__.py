"""API routers for the cutout service."""
from .health import router as health_router
from .segment import router as segment_router

__all__ = ["health_router", "segment_router"]
