"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Bounded: the least recently seen origin is dropped once ``max_keys`` is hit.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from contact_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass
class _WindowState:
    window_start: float
    count: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per key.

    A key's window opens with its first admitted request and lasts
    ``window_seconds``. Within the window at most ``limit`` units are admitted;
    the first request after the window expires resets the counter to that
    request's cost. Bursts straddling the boundary can therefore see up to
    twice the limit.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        max_keys: int | None = 10_000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of allowed units per window.
            window_seconds: Size of the fixed window in seconds.
            max_keys: Maximum number of tracked keys (None for unlimited).
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit, window_seconds or max_keys are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")
        if max_keys is not None and max_keys < 1:
            raise ValueError("max_keys must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._max_keys = max_keys
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: OrderedDict[str, _WindowState] = OrderedDict()
        self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def _is_expired(self, state: _WindowState, now: float) -> bool:
        return now - state.window_start > self._window_seconds

    def _reset_at(self, state: _WindowState) -> float:
        return state.window_start + self._window_seconds

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_keys is None:
            return

        while len(self._state_by_key) > self._max_keys:
            self._state_by_key.popitem(last=False)
            self._evictions += 1
            logger.debug(
                "rate_limit.evicted",
                extra={"size": len(self._state_by_key), "evictions": self._evictions},
            )

    def _build_allowed_result(self, *, remaining: int, reset_at: float) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=remaining,
            reset_at=int(math.ceil(reset_at)),
            retry_after_seconds=None,
        )

    def _build_blocked_result(self, *, now: float, remaining: int, reset_at: float) -> RateLimitResult:
        retry_after = max(0, int(math.ceil(reset_at - now)))
        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=remaining,
            reset_at=int(math.ceil(reset_at)),
            retry_after_seconds=retry_after,
        )

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for the provided key.

        Checks the key's window and records the attempt in one step under
        the lock. Blocked attempts leave the state untouched.

        Args:
            key: Origin identifier for rate limiting.
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty or cost is invalid.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now = self._clock()
            state = self._state_by_key.get(key)

            if state is None or self._is_expired(state, now):
                if cost > self._limit:
                    return self._build_blocked_result(
                        now=now, remaining=self._limit, reset_at=now
                    )
                state = _WindowState(window_start=now, count=cost)
                self._state_by_key[key] = state
                self._state_by_key.move_to_end(key)
                self._evict_if_over_capacity_locked()
                return self._build_allowed_result(
                    remaining=self._limit - state.count,
                    reset_at=self._reset_at(state),
                )

            self._state_by_key.move_to_end(key)

            if state.count + cost <= self._limit:
                state.count += cost
                return self._build_allowed_result(
                    remaining=max(0, self._limit - state.count),
                    reset_at=self._reset_at(state),
                )

            remaining = max(0, self._limit - state.count)
            return self._build_blocked_result(
                now=now, remaining=remaining, reset_at=self._reset_at(state)
            )

    def stats(self) -> dict[str, int | None]:
        """Return lightweight limiter metrics without exposing keys."""

        with self._lock:
            return {
                "limit": self._limit,
                "window_seconds": self._window_seconds,
                "max_keys": self._max_keys,
                "keys": len(self._state_by_key),
                "evictions": self._evictions,
            }

    def clear(self) -> None:
        with self._lock:
            self._state_by_key.clear()
            self._evictions = 0
