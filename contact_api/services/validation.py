"""Field validation for contact submissions.

Turns pydantic's structured errors into the short, human-readable messages
shown under the contact form. Every violated rule is reported, in field
order, so the visitor can fix everything in one go.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import ValidationError

from contact_api.core.errors import SubmissionValidationError
from contact_api.schemas.contact import ContactSubmission

ERROR_SEPARATOR = ", "

_FIELD_LABELS = {
    "name": "Name",
    "email": "Email",
    "subject": "Subject",
    "message": "Message",
}


def _describe_error(error: Mapping[str, Any]) -> str:
    """Map one pydantic error entry to a display message."""
    loc = error.get("loc") or ("",)
    field = str(loc[0])
    label = _FIELD_LABELS.get(field, field.capitalize())
    error_type = error.get("type")
    ctx = error.get("ctx") or {}

    if error_type == "missing":
        return f"{label} is required"
    if error_type in ("string_type", "string_unicode"):
        return f"{label} must be a string"
    if error_type == "string_too_short":
        return f"{label} must be at least {ctx.get('min_length')} characters"
    if error_type == "string_too_long":
        return f"{label} must be less than {ctx.get('max_length')} characters"
    # Custom errors (e.g., invalid_email) already carry the display message
    return str(error.get("msg"))


def submission_errors(payload: Mapping[str, Any]) -> list[str]:
    """Return every rule violation for ``payload`` (empty when valid)."""
    try:
        ContactSubmission.model_validate(payload)
    except ValidationError as exc:
        return [_describe_error(error) for error in exc.errors()]
    return []


def validate_submission(payload: Mapping[str, Any]) -> ContactSubmission:
    """Validate untrusted input into a ContactSubmission.

    Args:
        payload: Decoded JSON object from the request body.

    Returns:
        ContactSubmission with the values exactly as submitted.

    Raises:
        SubmissionValidationError: If one or more fields break a rule. The
            ``message`` joins all violations; ``errors`` keeps them apart.
    """
    try:
        return ContactSubmission.model_validate(payload)
    except ValidationError as exc:
        errors = [_describe_error(error) for error in exc.errors()]
        raise SubmissionValidationError(
            code="submission_invalid",
            message=ERROR_SEPARATOR.join(errors),
            errors=errors,
        ) from exc
