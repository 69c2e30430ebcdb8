"""Log-only gateway used when no row store is configured."""

from __future__ import annotations

import logging

from contact_api.adapters.persistence.base import AbstractContactGateway
from contact_api.schemas.contact import ContactSubmission, StoredContact

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_CHARS = 100


def _preview(text: str, max_chars: int = MESSAGE_PREVIEW_CHARS) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


class NullContactGateway(AbstractContactGateway):
    """Accepts submissions without storing them (development mode).

    The submission is logged so a developer running locally can still see
    what came in. Only a preview of the message body is written.
    """

    name = "log_only"
    durable = False

    async def save(self, submission: ContactSubmission) -> StoredContact | None:
        logger.info(
            "contact.log_only_submission",
            extra={
                "submission": {
                    "name": submission.name,
                    "email": submission.email,
                    "subject": submission.subject,
                    "message_preview": _preview(submission.message),
                },
            },
        )
        return None

    async def fetch(self, record_id: str | int) -> StoredContact | None:
        return None
