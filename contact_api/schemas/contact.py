"""Pydantic schemas for contact form submissions and responses."""

from __future__ import annotations

from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

NAME_MIN_CHARS = 2
NAME_MAX_CHARS = 100
SUBJECT_MIN_CHARS = 5
SUBJECT_MAX_CHARS = 200
MESSAGE_MIN_CHARS = 10
MESSAGE_MAX_CHARS = 5000

INVALID_EMAIL_MESSAGE = "Please enter a valid email address"


class ContactSubmission(BaseModel):
    """A single contact attempt, as submitted by the site's contact form.

    Values are kept verbatim: nothing is trimmed or case-folded, so what is
    stored is exactly what the visitor typed.
    """

    name: str = Field(
        ...,
        min_length=NAME_MIN_CHARS,
        max_length=NAME_MAX_CHARS,
        description="Sender's name.",
    )
    email: str = Field(
        ...,
        description="Sender's email address (syntax-checked, not verified).",
    )
    subject: str = Field(
        ...,
        min_length=SUBJECT_MIN_CHARS,
        max_length=SUBJECT_MAX_CHARS,
        description="Message subject line.",
    )
    message: str = Field(
        ...,
        min_length=MESSAGE_MIN_CHARS,
        max_length=MESSAGE_MAX_CHARS,
        description="Message body.",
    )

    @field_validator("email")
    @classmethod
    def _check_email_syntax(cls, value: str) -> str:
        try:
            validate_email(
                value,
                check_deliverability=False,
                allow_smtputf8=False,
                test_environment=True,
            )
        except EmailNotValidError as exc:
            raise PydanticCustomError("invalid_email", INVALID_EMAIL_MESSAGE) from exc
        return value


class StoredContact(BaseModel):
    """A contact submission as persisted in the ``contacts`` table."""

    id: str | int = Field(..., description="Row identifier assigned by the store.")
    name: str
    email: str
    subject: str
    message: str
    created_at: datetime | None = Field(
        default=None,
        description="Insertion timestamp assigned by the store.",
    )
    read: bool = Field(
        default=False,
        description="Whether the site owner has read the message.",
    )


class ContactSuccessResponse(BaseModel):
    """Body returned when a submission is accepted."""

    success: bool = True
    message: str
    data: StoredContact | None = Field(
        default=None,
        description="Stored row; only present when the submission was persisted.",
    )


class ErrorResponse(BaseModel):
    """Uniform error body."""

    error: str


class ContactHealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime
