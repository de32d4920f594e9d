"""
Demo implementation of InvoiceStore using in-memory rows.

This store is useful for:
- Local development without a Supabase project
- Testing the editor and list view with realistic persistence rules

Rows mirror the Supabase table: an id, the owning user, the serialized
invoice blob and an update timestamp. Ownership is enforced the way row
level security does it: other users' rows are invisible to list and
delete, and overwriting them fails.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable

from invoice_editor.auth.session import AuthSession
from invoice_editor.errors import StoreError
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


@dataclass
class DemoRow:
    """One stored invoice row."""

    id: str
    user_id: str
    invoice_data: dict
    updated_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DemoTable:
    """
    Rows shared by every DemoInvoiceStore in the process.

    Timestamps are strictly increasing so "most recently updated" ordering is
    stable even when two writes land within the same clock tick.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self.rows: dict[str, DemoRow] = {}
        self._clock = clock
        self._last: datetime | None = None

    def stamp(self) -> datetime:
        now = self._clock()
        if self._last is not None and now <= self._last:
            now = self._last + timedelta(microseconds=1)
        self._last = now
        return now


class DemoInvoiceStore(InvoiceStore):
    """
    In-memory invoice store with per-user row visibility.

    Attributes:
        table: Row container, shareable between stores for several users.
    """

    def __init__(self, session: AuthSession, table: DemoTable | None = None) -> None:
        super().__init__(session)
        self.table = table or DemoTable()

    async def list_invoices(self) -> list[StoredInvoice]:
        identity = self.require_identity()
        rows = [row for row in self.table.rows.values() if row.user_id == identity.user_id]
        rows.sort(key=lambda row: row.updated_at, reverse=True)
        return [self._to_stored(row) for row in rows]

    async def upsert_invoice(self, invoice: Invoice) -> StoredInvoice:
        identity = self.require_identity()
        invoice = with_id(invoice)
        existing = self.table.rows.get(invoice.id)
        if existing is not None and existing.user_id != identity.user_id:
            LOG.warning("Rejected write to invoice %s owned by another user", invoice.id)
            raise StoreError("Row is owned by another user", message_key="failedToSaveInvoice")
        row = DemoRow(
            id=invoice.id,
            user_id=identity.user_id,
            invoice_data=serialize_invoice(invoice),
            updated_at=self.table.stamp(),
        )
        self.table.rows[row.id] = row
        LOG.info("Saved invoice %s (%s)", row.id, invoice.invoice_number)
        return self._to_stored(row)

    async def delete_invoice(self, invoice_id: str) -> bool:
        identity = self.require_identity()
        row = self.table.rows.get(invoice_id)
        if row is None or row.user_id != identity.user_id:
            return False
        del self.table.rows[invoice_id]
        LOG.info("Deleted invoice %s", invoice_id)
        return True

    @staticmethod
    def _to_stored(row: DemoRow) -> StoredInvoice:
        invoice = replace(deserialize_invoice(row.invoice_data), id=row.id)
        return StoredInvoice(invoice=invoice, updated_at=row.updated_at)
