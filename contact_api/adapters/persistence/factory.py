"""Factory selecting the persistence gateway once at startup."""

import logging

from contact_api.adapters.persistence.base import AbstractContactGateway
from contact_api.adapters.persistence.null_gateway import NullContactGateway
from contact_api.adapters.persistence.supabase_gateway import SupabaseContactGateway
from contact_api.core.config import SupabaseSettings, settings

logger = logging.getLogger(__name__)


def create_contact_gateway(
    supabase_settings: SupabaseSettings | None = None,
) -> AbstractContactGateway:
    """Instantiate the gateway matching the Supabase configuration.

    Missing configuration is not an error: the service falls back to the
    log-only gateway so local development works without a database.

    Args:
        supabase_settings: Optional settings; defaults to the global settings.

    Returns:
        AbstractContactGateway: Supabase gateway when URL and key are set,
            otherwise the log-only gateway.
    """
    cfg = supabase_settings or settings.supabase

    if cfg.is_configured:
        logger.info(
            "persistence.configured",
            extra={
                "gateway": SupabaseContactGateway.name,
                "table": cfg.table,
                "uses_service_role": bool(cfg.service_role_key),
            },
        )
        return SupabaseContactGateway(
            url=cfg.url,  # type: ignore[arg-type]
            key=cfg.access_key,  # type: ignore[arg-type]
            table=cfg.table,
        )

    logger.warning(
        "persistence.not_configured",
        extra={
            "gateway": NullContactGateway.name,
            "hint": "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY) to store messages",
        },
    )
    return NullContactGateway()
