"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from contact_api.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    set_request_id,
)


@pytest.fixture
def capture_logger():
    def _build(name: str) -> tuple[logging.Logger, StringIO]:
        logger = logging.getLogger(name)
        logger.setLevel(logging.INFO)
        logger.handlers.clear()
        logger.propagate = False

        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.addFilter(RequestIdFilter())
        handler.addFilter(SensitiveDataFilter())
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        return logger, stream

    return _build


def test_sensitive_filter_redacts_supabase_keys(capture_logger):
    logger, stream = capture_logger("test_redaction")

    logger.info(
        "gateway_event",
        extra={
            "service_role_key": "eyJhbGciOi-secret",
            "authorization": "Bearer another-secret",
            "table": "contacts",
        },
    )

    output = stream.getvalue()
    assert "eyJhbGciOi-secret" not in output
    assert "another-secret" not in output
    assert "[REDACTED]" in output
    assert "contacts" in output


def test_sensitive_filter_allows_safe_fields(capture_logger):
    logger, stream = capture_logger("test_safe_fields")

    logger.info(
        "safe_event",
        extra={
            "route": "/api/contact",
            "status_code": 200,
            "duration_ms": 15.5,
        },
    )

    output = stream.getvalue()
    assert "/api/contact" in output
    assert "200" in output
    assert "[REDACTED]" not in output


def test_sensitive_filter_redacts_nested_dicts(capture_logger):
    logger, stream = capture_logger("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {"apikey": "secret-key", "user-agent": "pytest"},
            "details": {"backend_error": "timeout", "table": "contacts"},
        },
    )

    output = stream.getvalue()
    assert "secret-key" not in output
    assert "[REDACTED]" in output
    assert "pytest" in output
    assert "timeout" in output


def test_json_formatter_includes_request_id_from_context(capture_logger):
    logger, stream = capture_logger("test_request_id")

    set_request_id("req-123")
    try:
        logger.info("with_request_id")
    finally:
        clear_request_id()

    payload = json.loads(stream.getvalue())
    assert payload["request_id"] == "req-123"
    assert payload["message"] == "with_request_id"
    assert payload["level"] == "info"


def test_hash_identifier_is_stable_and_short():
    assert hash_identifier("1.2.3.4") == hash_identifier("1.2.3.4")
    assert hash_identifier("1.2.3.4") != hash_identifier("5.6.7.8")
    assert len(hash_identifier("1.2.3.4")) == 16
