from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems. Also reports whether
    submissions are being stored or only logged.

    Returns:
        dict: ``status`` set to "ok" and the active ``persistence`` mode.
    """

    gateway = getattr(request.app.state, "contact_gateway", None)
    persistence = gateway.name if gateway is not None else "unconfigured"
    return {"status": "ok", "persistence": persistence}
