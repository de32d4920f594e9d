"""
Supabase-backed implementation of InvoiceStore.

Invoices live in a single table (see sql/invoices.sql):

    id            uuid primary key
    user_id       uuid references auth.users, owner of the row
    invoice_data  jsonb, the serialized Invoice
    created_at    timestamptz
    updated_at    timestamptz, bumped on every write

Row level security policies restrict select/insert/update/delete to the
owner, so the queries below never filter on user_id themselves; the
client's signed-in session decides which rows are visible.

PostgREST errors are converted at this boundary: a missing table becomes
StoreUnavailable (the project was never provisioned), anything else
becomes StoreError.
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Mapping

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from invoice_editor.auth.session import AuthSession
from invoice_editor.config import DEFAULT_TABLE_NAME
from invoice_editor.errors import StoreError, StoreUnavailable
from invoice_editor.lib import logs
from invoice_editor.models.invoice import (
    Invoice,
    StoredInvoice,
    deserialize_invoice,
    serialize_invoice,
    with_id,
)
from invoice_editor.services.invoice_store import InvoiceStore

LOG = logs.logger(__file__)

# Postgres "undefined_table" and the PostgREST schema cache miss.
_MISSING_TABLE_CODES = {"42P01", "PGRST205"}


def _is_missing_table(exc: APIError) -> bool:
    code = str(getattr(exc, "code", "") or "")
    message = str(getattr(exc, "message", "") or exc)
    return code in _MISSING_TABLE_CODES or (
        "relation" in message and "does not exist" in message
    )


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse a timestamptz value returned by PostgREST."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        LOG.warning("Unparseable updated_at value: %s", value)
        return None


class SupabaseInvoiceStore(InvoiceStore):
    """
    Invoice store backed by a Supabase table.

    Attributes:
        client: Async Supabase client (shared with SupabaseAuthService).
        table_name: Name of the invoice table.
    """

    def __init__(
        self,
        client: AsyncClient,
        session: AuthSession,
        table_name: str = DEFAULT_TABLE_NAME,
    ) -> None:
        super().__init__(session)
        self.client = client
        self.table_name = table_name

    def _table(self):
        return self.client.table(self.table_name)

    def _convert(self, exc: Exception, message_key: str) -> Exception:
        if isinstance(exc, APIError) and _is_missing_table(exc):
            LOG.error("Invoice table %s does not exist", self.table_name)
            return StoreUnavailable(str(exc))
        LOG.error("Invoice store request failed: %s", exc, exc_info=True)
        return StoreError(str(exc), message_key=message_key)

    async def list_invoices(self) -> list[StoredInvoice]:
        self.require_identity()
        try:
            response = await (
                self._table()
                .select("id, invoice_data, updated_at")
                .order("updated_at", desc=True)
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise self._convert(exc, "fetchInvoicesError") from exc
        return [self._to_stored(row) for row in response.data or []]

    async def upsert_invoice(self, invoice: Invoice) -> StoredInvoice:
        identity = self.require_identity()
        invoice = with_id(invoice)
        updated_at = datetime.now(timezone.utc)
        payload = {
            "id": invoice.id,
            "user_id": identity.user_id,
            "invoice_data": serialize_invoice(invoice),
            "updated_at": updated_at.isoformat(),
        }
        try:
            response = await self._table().upsert(payload).execute()
        except (APIError, httpx.HTTPError) as exc:
            raise self._convert(exc, "failedToSaveInvoice") from exc
        LOG.info("Saved invoice %s (%s)", invoice.id, invoice.invoice_number)
        if response.data:
            return self._to_stored(response.data[0])
        return StoredInvoice(invoice=invoice, updated_at=updated_at)

    async def delete_invoice(self, invoice_id: str) -> bool:
        self.require_identity()
        try:
            response = await self._table().delete().eq("id", invoice_id).execute()
        except (APIError, httpx.HTTPError) as exc:
            raise self._convert(exc, "deleteInvoiceError") from exc
        removed = bool(response.data)
        LOG.info("Delete invoice %s removed=%s", invoice_id, removed)
        return removed

    @staticmethod
    def _to_stored(row: Mapping[str, Any]) -> StoredInvoice:
        invoice = deserialize_invoice(row.get("invoice_data") or {})
        if row.get("id"):
            invoice = replace(invoice, id=str(row["id"]))
        return StoredInvoice(invoice=invoice, updated_at=_parse_timestamp(row.get("updated_at")))
