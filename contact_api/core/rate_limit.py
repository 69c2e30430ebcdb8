"""Rate limiting wiring for the HTTP layer.

This module owns the process-wide limiter and knows how to derive the
origin identifier of a request.

Rate limiting strategy:
- Fixed-window limit per origin (client address).
- The origin is the first address of the forwarded-for header set by the
  proxy. Without that header the connection peer address is used, or the
  shared "unknown" bucket when fallback is disabled or no peer is known.
"""

from __future__ import annotations

import logging

from fastapi import Request

from contact_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from contact_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from contact_api.core.config import settings

logger = logging.getLogger(__name__)

UNKNOWN_ORIGIN = "unknown"

_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, int] | None = None


def get_rate_limiter() -> AbstractRateLimiter | None:
    """Return the process-wide rate limiter, or None when disabled.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.
    """

    global _limiter, _limiter_config

    if not settings.app.rate_limit_enabled:
        return None

    config = (
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
        settings.app.rate_limit_max_keys,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = InMemoryFixedWindowRateLimiter(
            limit=settings.app.rate_limit_requests,
            window_seconds=settings.app.rate_limit_window_seconds,
            max_keys=settings.app.rate_limit_max_keys,
        )
        _limiter_config = config
        logger.debug(
            "rate_limit.limiter_built",
            extra={
                "limit": config[0],
                "window_s": config[1],
                "max_keys": config[2],
            },
        )

    return _limiter


def resolve_origin_id(request: Request) -> str:
    """Derive the rate limiting key for a request.

    Args:
        request: FastAPI request.

    Returns:
        str: Client address, or "unknown" when none can be determined.
    """

    forwarded = request.headers.get(settings.app.forwarded_for_header)
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    if settings.app.rate_limit_fallback_to_client_host and request.client:
        return request.client.host or UNKNOWN_ORIGIN

    return UNKNOWN_ORIGIN


def rate_limit_headers(result: RateLimitResult | None) -> dict[str, str]:
    """Build throttling headers for a blocked request (empty if disabled)."""

    if result is None or result.allowed or not settings.app.rate_limit_include_headers:
        return {}

    return {
        "Retry-After": str(result.retry_after_seconds or 0),
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset_at),
    }
