"""Contact submission service.

Runs one submission through the pipeline, strictly in this order:
- Rate limiting per origin (before anything touches the body)
- JSON parsing of the raw body
- Field validation
- Persistence through the configured gateway (durable or log-only)

Each step that fails ends the request with a distinct Outcome. Nothing is
retried; the visitor may simply submit again.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from contact_api.adapters.persistence.base import AbstractContactGateway
from contact_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from contact_api.core.errors import PersistenceAppError, SubmissionValidationError
from contact_api.core.logging import hash_identifier
from contact_api.schemas.contact import StoredContact
from contact_api.services.validation import validate_submission

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Too many requests. Please try again later."
BAD_REQUEST_MESSAGE = "Invalid request body. Expected a JSON object."
PERSISTENCE_FAILED_MESSAGE = "Failed to save message. Please try again."
ACCEPTED_MESSAGE = "Message sent successfully!"
ACCEPTED_LOG_ONLY_MESSAGE = "Message received (development mode)"


class OutcomeKind(str, Enum):
    ACCEPTED = "accepted"
    RATE_LIMITED = "rate_limited"
    BAD_REQUEST = "bad_request"
    VALIDATION_FAILED = "validation_failed"
    PERSISTENCE_FAILED = "persistence_failed"


_HTTP_STATUS = {
    OutcomeKind.ACCEPTED: 200,
    OutcomeKind.RATE_LIMITED: 429,
    OutcomeKind.BAD_REQUEST: 400,
    OutcomeKind.VALIDATION_FAILED: 400,
    OutcomeKind.PERSISTENCE_FAILED: 500,
}


@dataclass(frozen=True)
class Outcome:
    """Terminal state of one submission.

    Attributes:
        kind: Which terminal state was reached.
        message: Human-readable text safe to show to the visitor.
        data: Stored row, only for durable acceptance.
        rate_limit: Limiter decision, when the rate check ran.
    """

    kind: OutcomeKind
    message: str
    data: StoredContact | None = None
    rate_limit: RateLimitResult | None = None

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self.kind]

    @property
    def accepted(self) -> bool:
        return self.kind is OutcomeKind.ACCEPTED

    def to_body(self) -> dict[str, Any]:
        """JSON body for the HTTP response."""
        if not self.accepted:
            return {"error": self.message}

        body: dict[str, Any] = {"success": True, "message": self.message}
        if self.data is not None:
            body["data"] = self.data.model_dump(mode="json")
        return body


def parse_body(raw_body: bytes | str) -> dict[str, Any] | None:
    """Decode a request body into a JSON object, or None if it is not one."""
    try:
        payload = json.loads(raw_body)
    except (ValueError, TypeError, RecursionError):
        return None
    if not isinstance(payload, dict):
        return None
    return payload


class ContactService:
    """Orchestrates rate limiting, validation and persistence for submissions."""

    def __init__(
        self,
        *,
        gateway: AbstractContactGateway,
        limiter: AbstractRateLimiter | None,
        persistence_timeout_seconds: float = 10.0,
    ) -> None:
        """Initialize the service.

        Args:
            gateway: Where accepted submissions go.
            limiter: Per-origin limiter; None disables rate limiting.
            persistence_timeout_seconds: Upper bound for a gateway write.
        """
        self.gateway = gateway
        self.limiter = limiter
        self.persistence_timeout_seconds = persistence_timeout_seconds

    async def handle(self, raw_body: bytes | str, origin_id: str) -> Outcome:
        """Process one submission and return its Outcome.

        Args:
            raw_body: Untrusted request body.
            origin_id: Rate limiting key for the client (e.g., IP address).

        Returns:
            Outcome describing the terminal state.
        """
        origin_hash = hash_identifier(origin_id)

        rate_limit: RateLimitResult | None = None
        if self.limiter is not None:
            rate_limit = self.limiter.consume(origin_id)
            if not rate_limit.allowed:
                logger.warning(
                    "rate_limit.exceeded",
                    extra={
                        "origin_hash": origin_hash,
                        "limit": rate_limit.limit,
                        "retry_after_s": rate_limit.retry_after_seconds,
                    },
                )
                return Outcome(
                    kind=OutcomeKind.RATE_LIMITED,
                    message=RATE_LIMITED_MESSAGE,
                    rate_limit=rate_limit,
                )

        payload = parse_body(raw_body)
        if payload is None:
            logger.info("contact.bad_request", extra={"origin_hash": origin_hash})
            return Outcome(
                kind=OutcomeKind.BAD_REQUEST,
                message=BAD_REQUEST_MESSAGE,
                rate_limit=rate_limit,
            )

        try:
            submission = validate_submission(payload)
        except SubmissionValidationError as exc:
            logger.info(
                "contact.validation_failed",
                extra={"origin_hash": origin_hash, "errors": exc.errors},
            )
            return Outcome(
                kind=OutcomeKind.VALIDATION_FAILED,
                message=exc.message,
                rate_limit=rate_limit,
            )

        try:
            stored = await asyncio.wait_for(
                self.gateway.save(submission),
                timeout=self.persistence_timeout_seconds,
            )
        except PersistenceAppError as exc:
            logger.error(
                "persistence.insert_failed",
                extra={
                    "origin_hash": origin_hash,
                    "error_code": exc.code,
                    "details": exc.details,
                },
            )
            return Outcome(
                kind=OutcomeKind.PERSISTENCE_FAILED,
                message=PERSISTENCE_FAILED_MESSAGE,
                rate_limit=rate_limit,
            )
        except asyncio.TimeoutError:
            logger.error(
                "persistence.insert_timeout",
                extra={
                    "origin_hash": origin_hash,
                    "timeout_s": self.persistence_timeout_seconds,
                },
            )
            return Outcome(
                kind=OutcomeKind.PERSISTENCE_FAILED,
                message=PERSISTENCE_FAILED_MESSAGE,
                rate_limit=rate_limit,
            )

        if not self.gateway.durable:
            return Outcome(
                kind=OutcomeKind.ACCEPTED,
                message=ACCEPTED_LOG_ONLY_MESSAGE,
                rate_limit=rate_limit,
            )

        logger.info(
            "contact.accepted",
            extra={
                "origin_hash": origin_hash,
                "gateway": self.gateway.name,
                "record_id": str(stored.id) if stored else None,
            },
        )
        return Outcome(
            kind=OutcomeKind.ACCEPTED,
            message=ACCEPTED_MESSAGE,
            data=stored,
            rate_limit=rate_limit,
        )
