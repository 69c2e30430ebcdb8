from __future__ import annotations

from contact_api.api.routes.contact import router as contact_router
from contact_api.api.routes.health import router as health_router

__all__ = ["contact_router", "health_router"]
