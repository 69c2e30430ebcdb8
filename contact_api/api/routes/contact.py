from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from contact_api.adapters.persistence.base import AbstractContactGateway
from contact_api.core.config import settings
from contact_api.core.rate_limit import get_rate_limiter, rate_limit_headers, resolve_origin_id
from contact_api.schemas.contact import (
    ContactHealthResponse,
    ContactSubmission,
    ContactSuccessResponse,
    ErrorResponse,
)
from contact_api.services.contact_service import ContactService

router = APIRouter(prefix="/api/contact", tags=["Contact"])


def get_contact_gateway(request: Request) -> AbstractContactGateway:
    """Gateway chosen at startup (see create_app)."""
    return request.app.state.contact_gateway


def get_contact_service(
    gateway: AbstractContactGateway = Depends(get_contact_gateway),
) -> ContactService:
    """Build the service for the current request.

    The limiter is process-wide; only the lightweight service wrapper is
    created per request.
    """
    return ContactService(
        gateway=gateway,
        limiter=get_rate_limiter(),
        persistence_timeout_seconds=settings.supabase.timeout_seconds,
    )


@router.post(
    "",
    response_model=ContactSuccessResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed body or invalid fields"},
        429: {"model": ErrorResponse, "description": "Too many submissions from this origin"},
        500: {"model": ErrorResponse, "description": "Message could not be stored"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": ContactSubmission.model_json_schema()},
            },
        }
    },
)
async def submit_contact(
    request: Request,
    service: ContactService = Depends(get_contact_service),
) -> JSONResponse:
    """Accept a contact form submission.

    The body is read raw so that rate limiting runs before any parsing.

    Returns:
        JSONResponse: 200 with success payload, or 400/429/500 with
            ``{"error": ...}``.
    """
    raw_body = await request.body()
    origin_id = resolve_origin_id(request)

    outcome = await service.handle(raw_body, origin_id)

    return JSONResponse(
        status_code=outcome.http_status,
        content=outcome.to_body(),
        headers=rate_limit_headers(outcome.rate_limit) or None,
    )


@router.get("", response_model=ContactHealthResponse)
async def contact_health() -> ContactHealthResponse:
    """Liveness check for the contact endpoint."""
    return ContactHealthResponse(status="ok", timestamp=datetime.now(timezone.utc))
