"""Supabase row store adapter for contact submissions."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

from pydantic import ValidationError
from supabase import Client, create_client

from contact_api.adapters.persistence.base import AbstractContactGateway
from contact_api.core.errors import PersistenceAppError
from contact_api.schemas.contact import ContactSubmission, StoredContact

logger = logging.getLogger(__name__)


class SupabaseContactGateway(AbstractContactGateway):
    """Writes contact submissions to a Supabase (PostgREST) table.

    The official client is synchronous, so calls run in a worker thread to
    keep the event loop free. The client itself is created on first use so
    importing the app never touches the network.
    """

    name = "supabase"
    durable = True

    def __init__(self, url: str, key: str, *, table: str = "contacts") -> None:
        """Initialize the gateway.

        Args:
            url: Supabase project URL.
            key: Service role key (preferred) or anon key.
            table: Table receiving submissions.
        """
        self._url = url
        self._key = key
        self._table = table
        self._client: Client | None = None
        self._client_lock = threading.Lock()

    @property
    def table(self) -> str:
        return self._table

    def _get_client(self) -> Client:
        with self._client_lock:
            if self._client is None:
                self._client = create_client(self._url, self._key)
            return self._client

    def _insert(self, row: dict[str, Any]) -> list[dict[str, Any]]:
        response = self._get_client().table(self._table).insert(row).execute()
        return list(response.data or [])

    def _select_by_id(self, record_id: str | int) -> list[dict[str, Any]]:
        response = (
            self._get_client()
            .table(self._table)
            .select("*")
            .eq("id", record_id)
            .limit(1)
            .execute()
        )
        return list(response.data or [])

    def _failure(self, operation: str, exc: Exception) -> PersistenceAppError:
        return PersistenceAppError(
            code=f"persistence_{operation}_failed",
            message="Failed to save message. Please try again."
            if operation == "insert"
            else "Failed to read message.",
            details={
                "table": self._table,
                "error_type": type(exc).__name__,
                "backend_error": str(exc),
            },
        )

    async def save(self, submission: ContactSubmission) -> StoredContact | None:
        row = submission.model_dump()
        try:
            rows = await asyncio.to_thread(self._insert, row)
        except Exception as exc:
            raise self._failure("insert", exc) from exc

        if not rows:
            # Insert succeeded but the store returned no representation
            logger.info(
                "persistence.insert_no_representation",
                extra={"table": self._table},
            )
            return None

        try:
            stored = StoredContact.model_validate(rows[0])
        except ValidationError as exc:
            # Row is already stored, so this is still an accepted insert
            logger.warning(
                "persistence.insert_unparsed_representation",
                extra={
                    "table": self._table,
                    "error_type": type(exc).__name__,
                    "error_count": exc.error_count(),
                },
            )
            return None

        logger.info(
            "persistence.inserted",
            extra={"table": self._table, "record_id": str(stored.id)},
        )
        return stored

    async def fetch(self, record_id: str | int) -> StoredContact | None:
        try:
            rows = await asyncio.to_thread(self._select_by_id, record_id)
            return StoredContact.model_validate(rows[0]) if rows else None
        except Exception as exc:
            raise self._failure("select", exc) from exc
