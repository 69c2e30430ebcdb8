"""Tests for origin resolution and limiter wiring in the HTTP layer."""

from unittest.mock import MagicMock

import pytest

from contact_api.core import rate_limit as rate_limit_module
from contact_api.core.rate_limit import (
    UNKNOWN_ORIGIN,
    get_rate_limiter,
    rate_limit_headers,
    resolve_origin_id,
)
from contact_api.adapters.rate_limit.base import RateLimitResult


def _request(headers: dict[str, str] | None = None, client_host: str | None = "203.0.113.9") -> MagicMock:
    request = MagicMock()
    request.headers = headers or {}
    if client_host is None:
        request.client = None
    else:
        request.client.host = client_host
    return request


class TestResolveOriginId:
    def test_uses_forwarded_for_header(self) -> None:
        assert resolve_origin_id(_request({"X-Forwarded-For": "1.2.3.4"})) == "1.2.3.4"

    def test_takes_first_hop_of_forwarded_chain(self) -> None:
        request = _request({"X-Forwarded-For": " 1.2.3.4 , 10.0.0.1, 10.0.0.2"})

        assert resolve_origin_id(request) == "1.2.3.4"

    def test_falls_back_to_peer_address(self) -> None:
        assert resolve_origin_id(_request()) == "203.0.113.9"

    def test_shared_unknown_bucket_when_fallback_disabled(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            rate_limit_module.settings.app, "rate_limit_fallback_to_client_host", False
        )

        assert resolve_origin_id(_request()) == UNKNOWN_ORIGIN

    def test_unknown_when_no_peer(self) -> None:
        assert resolve_origin_id(_request(client_host=None)) == UNKNOWN_ORIGIN


class TestGetRateLimiter:
    def test_instance_is_reused(self) -> None:
        assert get_rate_limiter() is get_rate_limiter()

    def test_rebuilt_when_config_changes(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_rate_limiter()
        monkeypatch.setattr(rate_limit_module.settings.app, "rate_limit_requests", 2)

        second = get_rate_limiter()

        assert second is not first
        assert second.limit == 2

    def test_disabled_returns_none(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(rate_limit_module.settings.app, "rate_limit_enabled", False)

        assert get_rate_limiter() is None


class TestRateLimitHeaders:
    def test_blocked_result_produces_headers(self) -> None:
        result = RateLimitResult(
            allowed=False, limit=5, remaining=0, reset_at=4600, retry_after_seconds=120
        )

        assert rate_limit_headers(result) == {
            "Retry-After": "120",
            "X-RateLimit-Limit": "5",
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": "4600",
        }

    def test_allowed_result_produces_no_headers(self) -> None:
        result = RateLimitResult(
            allowed=True, limit=5, remaining=3, reset_at=4600, retry_after_seconds=None
        )

        assert rate_limit_headers(result) == {}
        assert rate_limit_headers(None) == {}
