"""Application factory for the FastAPI app.

Builds the app in one place (metadata, middleware, handlers, routers and
the persistence gateway) so tests can create isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from contact_api.adapters.persistence.base import AbstractContactGateway
from contact_api.adapters.persistence.factory import create_contact_gateway
from contact_api.api.routes import contact_router, health_router
from contact_api.core.config import settings
from contact_api.core.exception_handlers import setup_exception_handlers
from contact_api.core.logging import configure_logging
from contact_api.core.middleware import request_id_middleware
from contact_api.core.openapi import apply_openapi_customizations


def create_app(gateway: AbstractContactGateway | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        gateway: Persistence gateway to use. When omitted it is selected
            from settings (Supabase when configured, log-only otherwise).

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Portfolio Contact API",
        description=(
            "Backend for the portfolio contact form: validates submissions, "
            "limits how often a client may submit and stores messages in "
            "Supabase (or only logs them when no database is configured)."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    # Chosen once per process; the routes only read it
    app.state.contact_gateway = gateway if gateway is not None else create_contact_gateway()

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(contact_router)
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
