"""Rate limiting adapters.

Small abstraction layer so the service can start with an in-memory limiter
and later move to Redis or another shared store without touching the API
layer.
"""

from contact_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from contact_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitResult",
]
